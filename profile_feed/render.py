"""Page rendering collaborators.

A renderer turns a profile URL into a queryable document. The extractor never
talks to the network itself, so any renderer that returns a
``RenderedPage`` will do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_WAIT_SELECTOR = 'article, .article-item, [class*="article"], a[href*="/article/"]'


class RenderError(RuntimeError):
    """Raised when no document at all could be produced for a URL."""


@dataclass
class RenderedPage:
    url: str
    html: str
    document: BeautifulSoup


class PageRenderer(Protocol):
    def render(self, url: str, timeout: float) -> RenderedPage: ...


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def wait_for_content(document: BeautifulSoup, selector: Optional[str]) -> bool:
    """Report whether the article markup is present; extraction goes ahead either way."""
    if not selector:
        return True
    if document.select_one(selector) is None:
        logger.warning("Article selector not found - continuing anyway")
        return False
    return True


class HttpRenderer:
    """Fetch the page with ``requests`` and parse whatever markup comes back."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        wait_selector: Optional[str] = DEFAULT_WAIT_SELECTOR,
        session: Optional[requests.Session] = None,
    ):
        self.user_agent = user_agent
        self.wait_selector = wait_selector
        self._session = session

    def render(self, url: str, timeout: float) -> RenderedPage:
        logger.info("Loading page: %s", url)
        getter = self._session.get if self._session is not None else requests.get
        try:
            response = getter(
                url, timeout=timeout, headers={"User-Agent": self.user_agent}
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise RenderError(f"Failed to load {url}: {exc}") from exc

        html = response.text
        if not html.strip():
            raise RenderError(f"Empty document returned for {url}")

        document = parse_document(html)
        wait_for_content(document, self.wait_selector)
        return RenderedPage(url=response.url or url, html=html, document=document)


class SnapshotRenderer:
    """Serve a previously saved copy of the page."""

    def __init__(self, path: str, wait_selector: Optional[str] = DEFAULT_WAIT_SELECTOR):
        self.path = Path(path)
        self.wait_selector = wait_selector

    def render(self, url: str, timeout: float) -> RenderedPage:
        logger.info("Loading page snapshot from %s", self.path)
        try:
            html = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RenderError(f"Page snapshot not readable: {self.path}") from exc

        document = parse_document(html)
        wait_for_content(document, self.wait_selector)
        return RenderedPage(url=url, html=html, document=document)


def save_snapshot(path: str, page: RenderedPage) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(page.html, encoding="utf-8")
    logger.info("Saved page snapshot to %s", location)
