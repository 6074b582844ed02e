"""Author and section checks for discovered article links."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence

from bs4 import Tag

from .cleanup import DATE, PERSON_NAME, READING_TIME

logger = logging.getLogger(__name__)

CONTAINER_TAGS = ("article", "li", "section", "div")

BYLINE_SELECTOR = '[rel="author"], [class*="byline"], [class*="author"]'

DEFAULT_SECTION_PHRASES = (
    "more from {site}",
    "also on {site}",
    "trending",
    "recommended",
    "you might also like",
    "related articles",
    "from our partners",
    "sponsored",
)

ATTRIBUTION_RE = re.compile(rf"(?i:\b(?:by|author:|from:))\s+({PERSON_NAME})")
_BYLINE_NOISE = re.compile(rf"{DATE}|{READING_TIME}", re.IGNORECASE)


def normalize_space(value: Optional[str]) -> str:
    return re.sub(r"\s+", " ", value or "").strip()


def _is_container(tag: Tag) -> bool:
    if tag.name in CONTAINER_TAGS:
        return True
    return any("article" in cls for cls in tag.get("class") or [])


def find_container(link: Tag) -> Optional[Tag]:
    """Return the nearest structural ancestor of ``link``."""
    return link.find_parent(_is_container)


def element_text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return normalize_space(element.get_text(" ", strip=True))


class AuthorFilter:
    """Reject links that belong to other authors or to promotional sections."""

    def __init__(
        self,
        author: str,
        site_name: Optional[str] = None,
        section_phrases: Sequence[str] = DEFAULT_SECTION_PHRASES,
    ):
        self.author = normalize_space(author)
        self._author_key = self.author.casefold()
        site = (site_name or "").strip().lower()
        phrases: List[str] = []
        for phrase in section_phrases:
            if "{site}" in phrase:
                if not site:
                    continue
                phrase = phrase.format(site=site)
            phrases.append(phrase.lower())
        self.section_phrases = tuple(phrases)

    def names_author(self, name: str) -> bool:
        return normalize_space(name).casefold().startswith(self._author_key)

    def _structured_byline(self, container: Tag) -> Optional[bool]:
        """True/False when a byline element decides authorship, None otherwise."""
        element = container.select_one(BYLINE_SELECTOR)
        text = element_text(element)
        if not text:
            return None
        if self._author_key in text.casefold():
            return True
        # Dates and reading times often share the byline element.
        name = _BYLINE_NOISE.sub(" ", text)
        name = re.sub(r"^\s*(?:by|author:)\s*", "", name, flags=re.IGNORECASE)
        return False if re.search(PERSON_NAME, name) else None

    def attributed_names(self, text: str) -> Iterable[str]:
        return (match.group(1) for match in ATTRIBUTION_RE.finditer(text))

    def rejection_reason(
        self, container: Optional[Tag], container_text: str, permissive: bool = False
    ) -> Optional[str]:
        """Return why a candidate should be dropped, or None to keep it."""
        if container is None:
            return None

        structured = self._structured_byline(container)
        if structured is False:
            return "byline names a different author"

        if structured is None:
            names = list(self.attributed_names(container_text))
            if names and not any(self.names_author(name) for name in names):
                return f"attributed to {names[0]!r}"

        if not permissive:
            lowered = container_text.lower()
            for phrase in self.section_phrases:
                if phrase in lowered:
                    return f"inside a '{phrase}' section"
        return None
