"""Locate article links on a rendered profile page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Ordered from the most specific layout to the catch-all. ``{path}`` is the
# site's article path, e.g. ``/article/``.
DISCOVERY_STRATEGIES: Tuple[Tuple[str, str], ...] = (
    ("main-article", 'main article a[href*="{path}"]'),
    ("main-article-item", "main .article-item a[href]"),
    ("main-article-list", 'main [class*="article-list"] a[href*="{path}"]'),
    ("author-articles", '[class*="author-articles"] a[href*="{path}"]'),
    ("profile", '[class*="profile"] a[href*="{path}"]'),
    ("section", 'section a[href*="{path}"]'),
    ("any-article-link", 'a[href*="{path}"]'),
)

EXCLUDED_REGIONS: Tuple[str, ...] = (
    '[class*="trending"]',
    '[class*="popular"]',
    '[class*="more-from"]',
    '[class*="related"]',
    '[class*="recommended"]',
    '[class*="sidebar"]',
    "aside",
    "footer",
    '[role="complementary"]',
    '[data-section="trending"]',
    '[data-section="popular"]',
)


@dataclass
class DiscoveryResult:
    """Links found by the first productive strategy."""

    links: List[Tuple[Tag, str]]
    strategy: Optional[str]
    permissive: bool = False


def excluded_links(document: BeautifulSoup, regions: Sequence[str] = EXCLUDED_REGIONS) -> Set[int]:
    """Return ids of every link living in a non-primary region."""
    excluded: Set[int] = set()
    for selector in regions:
        for region in document.select(selector):
            if region.name == "a":
                excluded.add(id(region))
            for link in region.find_all("a"):
                excluded.add(id(link))
    logger.debug("Found %d links in excluded sections", len(excluded))
    return excluded


def resolve_article_url(
    href: Optional[str],
    base_url: str,
    article_path: str,
    site_domain: Optional[str] = None,
) -> Optional[str]:
    """Make ``href`` absolute and return it if it looks like an article URL."""
    if not href:
        return None
    url, _ = urldefrag(urljoin(base_url, href.strip()))
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    if article_path not in parsed.path:
        return None
    if site_domain:
        host = (parsed.hostname or "").lower()
        domain = site_domain.lower()
        if host != domain and not host.endswith("." + domain):
            return None
    return url


class CandidateDiscovery:
    """Run the strategy cascade and keep the first strategy that finds anything."""

    def __init__(
        self,
        article_path: str = "/article/",
        site_domain: Optional[str] = None,
        strategies: Sequence[Tuple[str, str]] = DISCOVERY_STRATEGIES,
        regions: Sequence[str] = EXCLUDED_REGIONS,
    ):
        self.article_path = article_path
        self.site_domain = site_domain
        self.strategies = list(strategies)
        self.regions = list(regions)

    def _collect(
        self,
        document: BeautifulSoup,
        selector: str,
        base_url: str,
        excluded: Set[int],
    ) -> List[Tuple[Tag, str]]:
        seen: Set[int] = set()
        found: List[Tuple[Tag, str]] = []
        for link in document.select(selector.format(path=self.article_path)):
            if id(link) in seen or id(link) in excluded:
                continue
            seen.add(id(link))
            url = resolve_article_url(
                link.get("href"), base_url, self.article_path, self.site_domain
            )
            if url:
                found.append((link, url))
        return found

    def discover(self, document: BeautifulSoup, base_url: str) -> DiscoveryResult:
        excluded = excluded_links(document, self.regions)

        for name, selector in self.strategies:
            links = self._collect(document, selector, base_url, excluded)
            if links:
                logger.info(
                    "Strategy '%s' found %d potential article links", name, len(links)
                )
                return DiscoveryResult(links=links, strategy=name)
            logger.debug("Strategy '%s' found nothing; trying next", name)

        if not self.strategies:
            return DiscoveryResult(links=[], strategy=None)

        # Nothing survived exclusion: accept any article link on the page.
        name, selector = self.strategies[-1]
        links = self._collect(document, selector, base_url, set())
        if links:
            logger.warning(
                "No links outside excluded sections; using %d links from the whole page",
                len(links),
            )
            return DiscoveryResult(links=links, strategy=name, permissive=True)

        logger.warning("No article links found on the page")
        return DiscoveryResult(links=[], strategy=None)
