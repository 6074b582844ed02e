"""RSS 2.0 serialization of extracted article records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import feedparser

from .models import ArticleRecord
from .templating import get_environment

logger = logging.getLogger(__name__)

NOTICE_TITLE = "Feed Generation Notice"
NOTICE_DESCRIPTION = (
    "The RSS feed generator could not find articles. Please check the source page."
)
ERROR_TITLE = "Feed Generation Error"
ERROR_DESCRIPTION = (
    "An error occurred while generating the RSS feed. "
    "It will retry on the next scheduled run."
)
SYSTEM_CREATOR = "System"


@dataclass(frozen=True)
class FeedSettings:
    """Channel metadata and date policy for the generated feed."""

    link: str
    author: str
    site_name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    language: str = "en-us"
    generator: str = "profile-feed RSS generator"
    ttl: int = 10080
    self_link: Optional[str] = None
    date_interval: timedelta = timedelta(days=7)
    fill_missing_descriptions: bool = False

    @property
    def channel_title(self) -> str:
        if self.title:
            return self.title
        if self.site_name:
            return f"{self.author} - {self.site_name} Articles"
        return f"{self.author} - Articles"

    @property
    def channel_description(self) -> str:
        if self.description:
            return self.description
        where = f" on {self.site_name}" if self.site_name else ""
        return f"Latest articles by {self.author}{where} - Automatically generated RSS feed"


@dataclass
class FeedItem:
    title: str
    link: str
    description: str
    creator: str
    published: datetime


@dataclass
class _Channel:
    title: str
    link: str
    description: str
    language: str
    generator: str
    ttl: int
    self_link: Optional[str]


def resolve_publish_dates(
    records: Sequence[ArticleRecord], build_time: datetime, interval: timedelta
) -> List[datetime]:
    """Use each record's own date, or space undated ones back from ``build_time``.

    The synthetic date depends on the record's position, so earlier records
    always come out newer.
    """
    return [
        record.published_at
        if record.published_at is not None
        else build_time - interval * index
        for index, record in enumerate(records)
    ]


def _fallback_description(record: ArticleRecord, settings: FeedSettings) -> str:
    where = f" on {settings.site_name}" if settings.site_name else ""
    return f'Read the article "{record.title}" by {record.author}{where}.'


def to_feed_items(
    records: Sequence[ArticleRecord], settings: FeedSettings, build_time: datetime
) -> List[FeedItem]:
    dates = resolve_publish_dates(records, build_time, settings.date_interval)
    items: List[FeedItem] = []
    for index, (record, published) in enumerate(zip(records, dates)):
        description = record.description
        if settings.fill_missing_descriptions and len(description) < 10:
            description = _fallback_description(record, settings)
        items.append(
            FeedItem(
                title=record.title or f"Article {index + 1}",
                link=record.url,
                description=description,
                creator=record.author or settings.author,
                published=published,
            )
        )
    return items


def _render(
    items: Sequence[FeedItem],
    settings: FeedSettings,
    build_time: datetime,
    channel_description: Optional[str] = None,
) -> str:
    channel = _Channel(
        title=settings.channel_title,
        link=settings.link,
        description=channel_description or settings.channel_description,
        language=settings.language,
        generator=settings.generator,
        ttl=settings.ttl,
        self_link=settings.self_link,
    )
    template = get_environment().get_template("feed.xml.j2")
    return template.render(channel=channel, items=items, build_time=build_time)


def _notice(settings: FeedSettings, build_time: datetime, title: str, description: str) -> FeedItem:
    return FeedItem(
        title=title,
        link=settings.link,
        description=description,
        creator=SYSTEM_CREATOR,
        published=build_time,
    )


def build_feed(
    records: Sequence[ArticleRecord],
    settings: FeedSettings,
    build_time: Optional[datetime] = None,
) -> str:
    """Render ``records`` as an RSS document.

    An empty sequence produces a single notice item instead of an empty channel.
    """
    build_time = build_time or datetime.now(timezone.utc)
    if not records:
        logger.warning("No articles to publish; emitting a notice item")
        items = [_notice(settings, build_time, NOTICE_TITLE, NOTICE_DESCRIPTION)]
    else:
        items = to_feed_items(records, settings, build_time)
    return _render(items, settings, build_time)


def build_error_feed(
    settings: FeedSettings,
    message: Optional[str] = None,
    build_time: Optional[datetime] = None,
) -> str:
    """Render the single-item feed written when the page could not be loaded."""
    build_time = build_time or datetime.now(timezone.utc)
    item = _notice(settings, build_time, ERROR_TITLE, message or ERROR_DESCRIPTION)
    return _render(
        [item], settings, build_time, channel_description="Error generating feed"
    )


def validate_feed(xml: str) -> bool:
    """Parse ``xml`` with feedparser and report whether it is well-formed."""
    parsed = feedparser.parse(xml.encode("utf-8"))
    if parsed.bozo:
        logger.warning("Generated feed is not well-formed: %s", parsed.bozo_exception)
        return False
    logger.debug("Generated feed parsed with %d entries", len(parsed.entries))
    return True
