import pytest
from bs4 import BeautifulSoup

from profile_feed.extractor import ExtractorSettings

PROFILE_URL = "https://www.infoworld.com/profile/sharon-machlis/"
AUTHOR = "Sharon Machlis"


@pytest.fixture
def profile_url():
    return PROFILE_URL


@pytest.fixture
def settings():
    return ExtractorSettings(
        author=AUTHOR, site_name="InfoWorld", site_domain="infoworld.com"
    )


@pytest.fixture
def make_document():
    """Wrap a body fragment in a full HTML page and parse it."""

    def _make(body: str) -> BeautifulSoup:
        return BeautifulSoup(f"<html><body>{body}</body></html>", "html.parser")

    return _make
