"""Shared data models for profile_feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bs4 import Tag

UNTITLED = "Untitled Article"


@dataclass
class ArticleCandidate:
    """A discovered link that might be one of the author's articles."""

    link: Tag
    container: Optional[Tag]
    href: str
    anchor_text: str
    container_text: str


@dataclass
class ArticleRecord:
    """Normalized article extracted from the profile page."""

    title: str
    url: str
    author: str
    description: str = ""
    published_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "author": self.author,
            "description": self.description,
            "published_at": self.published_at.isoformat()
            if self.published_at
            else None,
        }
