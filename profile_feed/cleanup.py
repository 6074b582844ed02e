"""Text cleanup rules for titles and descriptions scraped from listing pages.

Listing cards on the profile page often render as one run of text: the title,
an optional teaser, then the byline, the publish date, a reading-time marker
and one or more topic tags. Everything here is a heuristic. The rules are kept
as ordered tables so each one can be exercised on its own.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\b\.?"
)
DATE = rf"{MONTH}\s+\d{{1,2}},\s+\d{{4}}"
READING_TIME = r"\d+\s+mins?\b"
# A capitalised run of at least two words, e.g. "Sharon Machlis".
PERSON_NAME = r"[A-Z][\w'.-]*(?:\s+[A-Z][\w'.-]*)+"

DATE_RE = re.compile(DATE, re.IGNORECASE)

DEFAULT_CATEGORIES: Tuple[str, ...] = (
    "Generative AI",
    "Natural Language Processing",
    "R Language",
    "Technology Industry",
    "Development Tools",
    "Programming Languages",
    "Artificial Intelligence",
    "Software Development",
    "Machine Learning",
    "Cloud Computing",
    "Web Development",
    "Mobile Development",
    "Data Science",
    "Big Data",
    "Analytics",
    "Developer",
    "Programming",
    "DevOps",
    "Cybersecurity",
    "Blockchain",
    "Python",
    "IoT",
    "AI",
)

CONTENT_TYPE_LABELS = ("how-to", "feature", "news", "analysis", "opinion", "review")

PLACEHOLDER_PHRASES = ("click to read", "read more")

LEAD_PHRASES = (
    "See how",
    "Learn how",
    "Discover",
    "Find out",
    "Explore",
    "Get",
    "Understand",
    "Master",
    "How to save",
)

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 500

METADATA_RULES = ("leading-metadata", "trailing-byline", "trailing-date", "trailing-reading-time")


@dataclass(frozen=True)
class CleanupRule:
    """A single substitution in a cleanup chain.

    ``requires`` names earlier rules; when set, the rule only runs if one of
    them changed the text.
    """

    name: str
    pattern: Pattern[str]
    replacement: str = ""
    requires: Tuple[str, ...] = ()

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text).strip()


def _alternation(values: Iterable[str]) -> str:
    ordered = sorted({value for value in values if value}, key=len, reverse=True)
    return "|".join(re.escape(value) for value in ordered)


def title_rules(
    author: str, categories: Sequence[str] = DEFAULT_CATEGORIES
) -> List[CleanupRule]:
    """Return the ordered title cleanup table for ``author``."""
    author_re = r"\s+".join(re.escape(part) for part in author.split())
    rules = [
        CleanupRule("whitespace", re.compile(r"\s+"), " "),
        CleanupRule(
            "content-type-label",
            # Any case for the label, but only in front of a capitalised title.
            re.compile(rf"^(?i:{_alternation(CONTENT_TYPE_LABELS)})\s+(?=[A-Z0-9])"),
        ),
        CleanupRule(
            "leading-metadata",
            re.compile(
                rf"^By\s+{author_re}\s+{DATE}\s+{READING_TIME}\s+(?=\S)",
                re.IGNORECASE,
            ),
        ),
        CleanupRule("trailing-byline", re.compile(rf"\s+By\s+{PERSON_NAME}.*$")),
        CleanupRule("trailing-date", re.compile(rf"\s+{DATE}.*$", re.IGNORECASE)),
        CleanupRule(
            "trailing-reading-time",
            re.compile(rf"\s+{READING_TIME}.*$", re.IGNORECASE),
        ),
        CleanupRule("read-more", re.compile(r"\s*Read more.*$", re.IGNORECASE)),
    ]
    if categories:
        rules.append(
            CleanupRule(
                "trailing-category",
                re.compile(rf"(?:\s+(?:{_alternation(categories)}))+$"),
                requires=METADATA_RULES,
            )
        )
    return rules


def description_rules(categories: Sequence[str] = DEFAULT_CATEGORIES) -> List[CleanupRule]:
    """Return the ordered description cleanup table."""
    rules = [
        CleanupRule("whitespace", re.compile(r"\s+"), " "),
        CleanupRule(
            "leading-byline",
            re.compile(
                rf"^By\s+(?:{PERSON_NAME}\s+)?{DATE}(?:\s+{READING_TIME})?\s*",
                re.IGNORECASE,
            ),
        ),
        CleanupRule("trailing-byline", re.compile(rf"\s+By\s+{PERSON_NAME}.*$")),
        CleanupRule("trailing-date", re.compile(rf"\s+{DATE}.*$", re.IGNORECASE)),
        CleanupRule(
            "trailing-reading-time",
            re.compile(rf"\s+{READING_TIME}.*$", re.IGNORECASE),
        ),
        CleanupRule("leading-connective", re.compile(r"^(?:Plus|Also),?\s+", re.IGNORECASE)),
    ]
    if categories:
        rules.append(
            CleanupRule(
                "trailing-category",
                re.compile(rf"(?:\s+(?:{_alternation(categories)}))+$"),
                requires=("trailing-byline", "trailing-date", "trailing-reading-time"),
            )
        )
    return rules


def apply_rules(text: str, rules: Sequence[CleanupRule]) -> str:
    """Run ``rules`` left to right over ``text``."""
    fired = set()
    value = text.strip()
    for rule in rules:
        if rule.requires and not fired.intersection(rule.requires):
            continue
        updated = rule.apply(value)
        if updated != value:
            fired.add(rule.name)
            value = updated
    return value


_INDICATORS = (
    re.compile(rf"\s+{DATE}", re.IGNORECASE),
    re.compile(rf"\s+{READING_TIME}", re.IGNORECASE),
    re.compile(r"\s+By\s+"),
)


def truncate_at_metadata(text: str, keep: int = 10) -> str:
    """Cut ``text`` at the first leftover metadata marker past ``keep`` chars."""
    for pattern in _INDICATORS:
        match = pattern.search(text)
        if match and match.start() > keep:
            text = text[: match.start()].strip()
    return text


_BYLINE_START = re.compile(r"^by\s+\S", re.IGNORECASE)
_METADATA_SHAPES = (
    re.compile(r"^\d+$"),
    re.compile(r"^(?:By|mins?)\b", re.IGNORECASE),
    re.compile(rf"^{MONTH}\s+\d", re.IGNORECASE),
)


def is_metadata_blob(text: str) -> bool:
    """True when the whole string is a byline block rather than a title."""
    return bool(_BYLINE_START.match(text))


def looks_like_metadata(text: str) -> bool:
    if len(text) < MIN_TITLE_LENGTH:
        return True
    return any(pattern.match(text) for pattern in _METADATA_SHAPES)


def slug_title(url: str) -> Optional[str]:
    """Turn the last path segment of ``url`` into a title-cased phrase."""
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    if not segments:
        return None
    slug = re.sub(r"\.html?$", "", segments[-1], flags=re.IGNORECASE)
    words = [word for word in re.split(r"[-_]+", slug) if word]
    if not words or all(word.isdigit() for word in words):
        return None
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def truncate_text(value: str, limit: int, ellipsis: str = "") -> str:
    """Limit text length to ``limit`` characters, ellipsis included."""
    if len(value) <= limit:
        return value
    logger.debug("Truncating text to %d characters", limit)
    return value[: limit - len(ellipsis)].rstrip() + ellipsis


def clean_description(
    text: str, rules: Optional[Sequence[CleanupRule]] = None
) -> str:
    """Return a tidy description or an empty string when nothing usable remains."""
    value = apply_rules(text or "", rules if rules is not None else description_rules())
    lowered = value.lower()
    if len(value) < MIN_DESCRIPTION_LENGTH or any(
        phrase in lowered for phrase in PLACEHOLDER_PHRASES
    ):
        return ""
    return truncate_text(value, MAX_DESCRIPTION_LENGTH, ellipsis="...")


# Anchor-text splitters. Each takes the raw link text and returns the title
# part and, when the layout allows it, a teaser sentence.
TextSplitter = Callable[[str], Tuple[str, str]]


def split_whole(text: str) -> Tuple[str, str]:
    return text, ""


def split_metadata_boundary(text: str) -> Tuple[str, str]:
    """Everything before the first byline, date or reading-time marker is the title.

    Text that opens with the byline is returned whole; the leading-metadata
    cleanup rule recovers the title that follows the block.
    """
    value = re.sub(r"\s+", " ", text).strip()
    if is_metadata_blob(value):
        return value, ""
    return truncate_at_metadata(value), ""


_LEAD_PHRASE_RE = re.compile(rf"^(.*?)\s+((?:{_alternation(LEAD_PHRASES)})\b.*)$")


def split_lead_phrase(text: str) -> Tuple[str, str]:
    """Split a "title + teaser" run at a sentence that opens like a teaser."""
    value = re.sub(r"\s+", " ", text).strip()
    match = _LEAD_PHRASE_RE.match(value)
    if match and 10 < len(match.group(1)) < 100:
        return match.group(1).strip(), match.group(2).strip()
    return value, ""


TEXT_SPLITTERS: Dict[str, TextSplitter] = {
    "whole": split_whole,
    "metadata-boundary": split_metadata_boundary,
    "lead-phrase": split_lead_phrase,
}


def get_text_splitter(name: str) -> TextSplitter:
    try:
        return TEXT_SPLITTERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown text splitter {name!r}; expected one of {sorted(TEXT_SPLITTERS)}"
        ) from None
