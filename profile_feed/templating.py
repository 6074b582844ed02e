"""Jinja2 environment for profile_feed templates."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

_ENV: Environment | None = None

_XML_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}
)


def xml_escape(value: object | None) -> Markup:
    """Escape the five XML special characters using named entities."""
    if value is None:
        return Markup("")
    return Markup(str(value).translate(_XML_ESCAPES))


def rfc822(value: datetime) -> str:
    """Format a datetime the way RSS expects, always in GMT."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "xml.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        _ENV.filters["xml"] = xml_escape
        _ENV.filters["rfc822"] = rfc822
    return _ENV
