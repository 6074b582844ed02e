"""Configuration loading for profile_feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple
from xml.etree import ElementTree as ET

from .cleanup import DEFAULT_CATEGORIES, TEXT_SPLITTERS
from .render import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    timeout: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT
    wait_selector: Optional[str] = None


@dataclass
class ExtractionConfig:
    text_splitter: str = "metadata-boundary"
    categories: Tuple[str, ...] = DEFAULT_CATEGORIES


@dataclass
class FeedConfig:
    title: Optional[str] = None
    description: Optional[str] = None
    language: str = "en-us"
    generator: str = "profile-feed RSS generator"
    ttl: int = 10080
    self_link: Optional[str] = None
    date_interval_days: float = 7.0
    fill_missing_descriptions: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    profile_url: str
    author: str
    site_name: Optional[str] = None
    site_domain: Optional[str] = None
    article_path: str = "/article/"
    max_articles: int = 10
    debug: bool = False
    output: str = "feed.xml"
    render: RenderConfig = field(default_factory=RenderConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _text(node: Optional[ET.Element], tag: str) -> Optional[str]:
    if node is None:
        return None
    value = node.findtext(tag)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _flag(node: Optional[ET.Element], tag: str, default: bool = False) -> bool:
    value = _text(node, tag)
    if value is None:
        return default
    return value.lower() == "true"


def _parse_render(node: Optional[ET.Element], article_path: str) -> RenderConfig:
    render = RenderConfig(
        wait_selector=(
            'article, .article-item, [class*="article"], '
            f'a[href*="{article_path}"]'
        )
    )
    if node is None:
        return render
    timeout = _text(node, "timeout")
    if timeout:
        render.timeout = float(timeout)
    render.user_agent = _text(node, "user-agent") or render.user_agent
    render.wait_selector = _text(node, "wait-selector") or render.wait_selector
    return render


def _parse_extraction(node: Optional[ET.Element]) -> ExtractionConfig:
    extraction = ExtractionConfig()
    if node is None:
        return extraction
    splitter = _text(node, "text-splitter")
    if splitter:
        if splitter not in TEXT_SPLITTERS:
            raise ValueError(
                f"Unknown text-splitter '{splitter}'; expected one of {sorted(TEXT_SPLITTERS)}"
            )
        extraction.text_splitter = splitter
    categories_node = node.find("categories")
    if categories_node is not None:
        extraction.categories = tuple(
            (category.text or "").strip()
            for category in categories_node.findall("category")
            if (category.text or "").strip()
        )
    return extraction


def _parse_feed(node: Optional[ET.Element]) -> FeedConfig:
    feed = FeedConfig()
    if node is None:
        return feed
    feed.title = _text(node, "title")
    feed.description = _text(node, "description")
    feed.language = _text(node, "language") or feed.language
    feed.generator = _text(node, "generator") or feed.generator
    ttl = _text(node, "ttl")
    if ttl:
        feed.ttl = int(ttl)
    feed.self_link = _text(node, "self-link")
    interval = _text(node, "date-interval-days")
    if interval:
        feed.date_interval_days = float(interval)
        if feed.date_interval_days <= 0:
            raise ValueError("<date-interval-days> must be positive.")
    feed.fill_missing_descriptions = _flag(node, "fill-missing-descriptions")
    return feed


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    profile_url = _text(root, "profile-url")
    if not profile_url:
        raise ValueError("Config missing <profile-url>")
    author = _text(root, "author")
    if not author:
        raise ValueError("Config missing <author>")

    article_path = _text(root, "article-path") or "/article/"

    max_articles = int(_text(root, "max-articles") or "10")
    if max_articles <= 0:
        raise ValueError("<max-articles> must be positive.")

    output = _resolve_path(config_path, _text(root, "output") or "feed.xml")

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = _text(log_node, "level") or "INFO"
        log_file = _text(log_node, "file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        profile_url=profile_url,
        author=author,
        site_name=_text(root, "site-name"),
        site_domain=_text(root, "site-domain"),
        article_path=article_path,
        max_articles=max_articles,
        debug=_flag(root, "debug"),
        output=output,
        render=_parse_render(root.find("render"), article_path),
        extraction=_parse_extraction(root.find("extraction")),
        feed=_parse_feed(root.find("feed")),
        logging=logging_config,
    )
