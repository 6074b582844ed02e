"""Command-line interface for the profile_feed application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, parse_app_config
from .runner import RunConfig, execute, write_error_feed

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate an RSS feed from an author's profile page."
    )
    parser.add_argument(
        "--config",
        default="configs/config.xml",
        help="Path to the main configuration XML file.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Where to write the feed. Overrides config.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument(
        "--load-html",
        metavar="PATH",
        help="Read the profile page from a saved HTML file instead of fetching it.",
    )
    parser.add_argument(
        "--save-html",
        metavar="PATH",
        help="Write the rendered profile page to PATH before extraction.",
    )
    parser.add_argument(
        "--save-articles",
        metavar="PATH",
        help="Write the extracted articles to PATH as JSON.",
    )

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def build_run_config(app_config: AppConfig, args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        profile_url=app_config.profile_url,
        author=app_config.author,
        output_path=args.output or app_config.output,
        site_name=app_config.site_name,
        site_domain=app_config.site_domain,
        article_path=app_config.article_path,
        max_articles=app_config.max_articles,
        debug=app_config.debug,
        render_timeout=app_config.render.timeout,
        user_agent=app_config.render.user_agent,
        wait_selector=app_config.render.wait_selector,
        text_splitter=app_config.extraction.text_splitter,
        categories=app_config.extraction.categories,
        feed_title=app_config.feed.title,
        feed_description=app_config.feed.description,
        language=app_config.feed.language,
        generator=app_config.feed.generator,
        ttl=app_config.feed.ttl,
        self_link=app_config.feed.self_link,
        date_interval_days=app_config.feed.date_interval_days,
        fill_missing_descriptions=app_config.feed.fill_missing_descriptions,
        load_html_path=args.load_html,
        save_html_path=args.save_html,
        save_articles_path=args.save_articles,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        # Determine logging settings (CLI overrides Config)
        log_level = args.log_level or (
            "DEBUG" if app_config.debug else app_config.logging.level
        )
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        config = build_run_config(app_config, args)
    except ValueError as exc:
        parser.error(str(exc))
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Could not load configuration from %s", args.config)
        return 1

    config_dict = dataclasses.asdict(config)
    config_dict.pop("categories", None)
    logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

    try:
        result = execute(config)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        write_error_feed(config, str(exc))
        return 1

    if not result.ok:
        return 1

    print(f"Wrote {len(result.articles)} articles to {result.output_path}")
    return 0
