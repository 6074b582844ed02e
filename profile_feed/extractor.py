"""Turn a rendered profile page into an ordered list of article records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .cleanup import DEFAULT_CATEGORIES, description_rules, get_text_splitter, title_rules
from .discovery import CandidateDiscovery
from .fields import extract_date, extract_description, extract_title
from .filters import AuthorFilter, element_text, find_container, normalize_space
from .models import UNTITLED, ArticleCandidate, ArticleRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractorSettings:
    """Static extraction options, read once per run."""

    author: str
    site_name: Optional[str] = None
    site_domain: Optional[str] = None
    article_path: str = "/article/"
    max_articles: int = 10
    text_splitter: str = "metadata-boundary"
    categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    debug: bool = False


def _anchor_text(link: Tag) -> str:
    text = element_text(link)
    if text:
        return text
    image = link.find("img")
    return normalize_space(
        link.get("title")
        or link.get("aria-label")
        or (image.get("alt") if image is not None else None)
    )


def deduplicate(records: Iterable[ArticleRecord]) -> List[ArticleRecord]:
    """Keep one record per URL at its first position.

    Later duplicates only fill in what the first one is missing.
    """
    merged: Dict[str, ArticleRecord] = {}
    for record in records:
        existing = merged.get(record.url)
        if existing is None:
            merged[record.url] = record
            continue
        updates = {}
        if existing.title == UNTITLED and record.title != UNTITLED:
            updates["title"] = record.title
        if not existing.description and record.description:
            updates["description"] = record.description
        if existing.published_at is None and record.published_at is not None:
            updates["published_at"] = record.published_at
        if updates:
            merged[record.url] = replace(existing, **updates)
    return list(merged.values())


class ArticleExtractor:
    """Discovery, filtering, field extraction, deduplication and truncation."""

    def __init__(
        self,
        settings: ExtractorSettings,
        *,
        discovery: Optional[CandidateDiscovery] = None,
        author_filter: Optional[AuthorFilter] = None,
    ):
        if settings.max_articles <= 0:
            raise ValueError("max_articles must be positive.")
        self.settings = settings
        self.discovery = discovery or CandidateDiscovery(
            article_path=settings.article_path,
            site_domain=settings.site_domain,
        )
        self.author_filter = author_filter or AuthorFilter(
            settings.author, site_name=settings.site_name
        )
        self._splitter = get_text_splitter(settings.text_splitter)
        self._title_rules = title_rules(settings.author, settings.categories)
        self._description_rules = description_rules(settings.categories)

    def candidates(
        self, document: BeautifulSoup, base_url: str
    ) -> List[ArticleCandidate]:
        """Discover links and drop those failing the author and section checks."""
        result = self.discovery.discover(document, base_url)
        accepted: List[ArticleCandidate] = []
        for link, url in result.links:
            anchor_text = _anchor_text(link)
            if not anchor_text:
                logger.debug("Skipping link without text: %s", url)
                continue
            container = find_container(link)
            candidate = ArticleCandidate(
                link=link,
                container=container,
                href=url,
                anchor_text=anchor_text,
                container_text=element_text(container),
            )
            reason = self.author_filter.rejection_reason(
                container, candidate.container_text, permissive=result.permissive
            )
            if reason:
                logger.debug("Skipping article %s: %s", url, reason)
                continue
            accepted.append(candidate)

        logger.info(
            "Kept %d of %d discovered links after author and section checks",
            len(accepted),
            len(result.links),
        )
        return accepted

    def build_record(self, candidate: ArticleCandidate) -> ArticleRecord:
        title, teaser = extract_title(candidate, self._title_rules, self._splitter)
        description = extract_description(candidate, self._description_rules, teaser)
        record = ArticleRecord(
            title=title,
            url=candidate.href,
            author=self.settings.author,
            description=description,
            published_at=extract_date(candidate),
        )
        if self.settings.debug:
            logger.debug(
                "Extracted title %r (date=%s) from %s",
                record.title[:60],
                record.published_at,
                record.url,
            )
        return record

    def extract(self, document: BeautifulSoup, base_url: str) -> List[ArticleRecord]:
        """Return at most ``max_articles`` unique records in page order."""
        records: List[ArticleRecord] = []
        for candidate in self.candidates(document, base_url):
            try:
                records.append(self.build_record(candidate))
            except Exception:
                logger.exception("Failed to process article link %s", candidate.href)

        unique = deduplicate(records)
        logger.info("Extracted %d unique articles", len(unique))

        limit = self.settings.max_articles
        if len(unique) > limit:
            logger.info(
                "Limited to first %d articles (excluded %d)", limit, len(unique) - limit
            )
            unique = unique[:limit]
        return unique
