"""Build an RSS feed from an author's profile page."""
