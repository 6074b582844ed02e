"""High-level orchestration for the profile_feed application."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from .cleanup import DEFAULT_CATEGORIES
from .extractor import ArticleExtractor, ExtractorSettings
from .feed import FeedSettings, build_error_feed, build_feed, validate_feed
from .models import UNTITLED, ArticleRecord
from .render import (
    DEFAULT_USER_AGENT,
    HttpRenderer,
    PageRenderer,
    RenderError,
    SnapshotRenderer,
    save_snapshot,
)

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    profile_url: str
    author: str
    output_path: str = "feed.xml"
    site_name: Optional[str] = None
    site_domain: Optional[str] = None
    article_path: str = "/article/"
    max_articles: int = 10
    debug: bool = False
    render_timeout: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT
    wait_selector: Optional[str] = None
    text_splitter: str = "metadata-boundary"
    categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    feed_title: Optional[str] = None
    feed_description: Optional[str] = None
    language: str = "en-us"
    generator: str = "profile-feed RSS generator"
    ttl: int = 10080
    self_link: Optional[str] = None
    date_interval_days: float = 7.0
    fill_missing_descriptions: bool = False
    load_html_path: Optional[str] = None
    save_html_path: Optional[str] = None
    save_articles_path: Optional[str] = None


@dataclass
class RunResult:
    """Returned data after executing the app."""

    feed_xml: str
    output_path: str
    articles: List[ArticleRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extractor_settings(config: RunConfig) -> ExtractorSettings:
    return ExtractorSettings(
        author=config.author,
        site_name=config.site_name,
        site_domain=config.site_domain,
        article_path=config.article_path,
        max_articles=config.max_articles,
        text_splitter=config.text_splitter,
        categories=tuple(config.categories),
        debug=config.debug,
    )


def feed_settings(config: RunConfig) -> FeedSettings:
    return FeedSettings(
        link=config.profile_url,
        author=config.author,
        site_name=config.site_name,
        title=config.feed_title,
        description=config.feed_description,
        language=config.language,
        generator=config.generator,
        ttl=config.ttl,
        self_link=config.self_link,
        date_interval=timedelta(days=config.date_interval_days),
        fill_missing_descriptions=config.fill_missing_descriptions,
    )


def build_renderer(config: RunConfig) -> PageRenderer:
    if config.load_html_path:
        return SnapshotRenderer(config.load_html_path, wait_selector=config.wait_selector)
    return HttpRenderer(user_agent=config.user_agent, wait_selector=config.wait_selector)


def _write_output(path: str, content: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(content, encoding="utf-8")
    logger.info("Saved feed to %s", location)


def _save_articles_to_file(path: str, articles: List[ArticleRecord]) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)

    serialisable = [article.to_dict() for article in articles]
    location.write_text(
        json.dumps(serialisable, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    logger.info("Saved %d articles to %s", len(serialisable), location)


def _log_summary(articles: List[ArticleRecord]) -> None:
    logger.info("Total articles: %d", len(articles))
    for index, article in enumerate(articles[:5], start=1):
        logger.info(
            "%d. %s | %s | %s",
            index,
            article.title,
            article.url,
            article.published_at.isoformat() if article.published_at else "no date",
        )
    untitled = sum(1 for article in articles if article.title == UNTITLED)
    if untitled:
        logger.warning(
            "%d articles had title extraction issues; enable debug to see details.",
            untitled,
        )


def write_error_feed(
    config: RunConfig, error: str, build_time: Optional[datetime] = None
) -> RunResult:
    """Write the placeholder feed so the next scheduled run has something to replace."""
    feed_xml = build_error_feed(feed_settings(config), build_time=build_time)
    _write_output(config.output_path, feed_xml)
    return RunResult(feed_xml=feed_xml, output_path=config.output_path, error=error)


def execute(
    config: RunConfig,
    renderer: Optional[PageRenderer] = None,
    build_time: Optional[datetime] = None,
) -> RunResult:
    """Render the profile page, extract articles and write the feed.

    A feed file is written in every case; when the page cannot be rendered it
    is a single-item error feed.
    """
    build_time = build_time or datetime.now(timezone.utc)
    settings = feed_settings(config)
    extractor = ArticleExtractor(extractor_settings(config))
    renderer = renderer or build_renderer(config)

    logger.info("Target URL: %s", config.profile_url)
    try:
        page = renderer.render(config.profile_url, config.render_timeout)
    except RenderError as exc:
        logger.error("Error generating RSS feed: %s", exc)
        return write_error_feed(config, str(exc), build_time=build_time)

    if config.save_html_path:
        save_snapshot(config.save_html_path, page)

    logger.info("Extracting articles...")
    articles = extractor.extract(page.document, page.url)
    if not articles:
        logger.warning("No articles found. The page structure might have changed.")

    if config.save_articles_path:
        _save_articles_to_file(config.save_articles_path, articles)

    feed_xml = build_feed(articles, settings, build_time=build_time)
    validate_feed(feed_xml)
    _write_output(config.output_path, feed_xml)
    _log_summary(articles)

    return RunResult(feed_xml=feed_xml, output_path=config.output_path, articles=articles)
