"""Per-candidate field extraction: title, description and publish date."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from bs4 import Tag
from dateutil import parser as date_parser

from .cleanup import (
    DATE_RE,
    MAX_TITLE_LENGTH,
    MIN_DESCRIPTION_LENGTH,
    CleanupRule,
    TextSplitter,
    apply_rules,
    clean_description,
    is_metadata_blob,
    looks_like_metadata,
    slug_title,
    split_metadata_boundary,
    truncate_at_metadata,
    truncate_text,
)
from .filters import element_text, normalize_space
from .models import UNTITLED, ArticleCandidate

logger = logging.getLogger(__name__)

HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
TITLE_SELECTOR = '[class*="title"], [class*="headline"]'
DESCRIPTION_SELECTORS = (
    '[class*="summary"]',
    '[class*="excerpt"]',
    '[class*="description"]',
    '[class*="dek"]',
    '[class*="standfirst"]',
    '[class*="intro"]',
    '[class*="abstract"]',
)
DATE_ATTRIBUTE_SELECTOR = "time[datetime], [datetime]"
DATE_TEXT_SELECTOR = 'time, [class*="date"], [class*="published"], [class*="timestamp"]'


def _first_text(candidate: ArticleCandidate, selector: str) -> str:
    for scope in (candidate.container, candidate.link):
        if scope is None:
            continue
        text = element_text(scope.select_one(selector))
        if text:
            return text
    return ""


def structured_title(candidate: ArticleCandidate) -> str:
    """Heading or title-classed element near the link, if any."""
    return _first_text(candidate, HEADING_SELECTOR) or _first_text(
        candidate, TITLE_SELECTOR
    )


def attribute_title(link: Tag) -> str:
    return normalize_space(link.get("title") or link.get("aria-label"))


def extract_title(
    candidate: ArticleCandidate,
    rules: Sequence[CleanupRule],
    splitter: TextSplitter = split_metadata_boundary,
) -> Tuple[str, str]:
    """Return the cleaned title and any teaser split off the anchor text."""
    teaser = ""
    raw = structured_title(candidate) or attribute_title(candidate.link)
    if not raw:
        raw, teaser = splitter(candidate.anchor_text)

    title = truncate_at_metadata(apply_rules(raw, rules))

    if is_metadata_blob(title):
        title = slug_title(candidate.href) or title

    if looks_like_metadata(title):
        logger.debug("Could not extract a proper title for %s", candidate.href)
        return UNTITLED, teaser

    return truncate_text(title, MAX_TITLE_LENGTH), teaser


def extract_description(
    candidate: ArticleCandidate,
    rules: Sequence[CleanupRule],
    teaser: str = "",
) -> str:
    text = ""
    for selector in DESCRIPTION_SELECTORS:
        text = _first_text(candidate, selector)
        if len(text) > MIN_DESCRIPTION_LENGTH:
            break
    if len(text) <= MIN_DESCRIPTION_LENGTH:
        text = _first_text(candidate, "p") or teaser
    return clean_description(text, rules)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a machine or human readable date; naive results are taken as UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as exc:
        logger.debug("Unparseable date %r: %s", value, exc)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def extract_date(candidate: ArticleCandidate) -> Optional[datetime]:
    for scope in (candidate.container, candidate.link):
        if scope is None:
            continue
        element = scope.select_one(DATE_ATTRIBUTE_SELECTOR)
        if element is not None:
            parsed = parse_date(element.get("datetime"))
            if parsed:
                return parsed

    for text in (
        _first_text(candidate, DATE_TEXT_SELECTOR),
        candidate.container_text or candidate.anchor_text,
    ):
        match = DATE_RE.search(text)
        if match:
            parsed = parse_date(match.group(0))
            if parsed:
                return parsed
    return None
