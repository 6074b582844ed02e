import html
from datetime import datetime, timedelta, timezone
from xml.etree import ElementTree as ET

import feedparser

from profile_feed.feed import (
    ERROR_TITLE,
    NOTICE_TITLE,
    FeedSettings,
    build_error_feed,
    build_feed,
    resolve_publish_dates,
    validate_feed,
)
from profile_feed.models import ArticleRecord

PROFILE_URL = "https://www.infoworld.com/profile/sharon-machlis/"
BUILD_TIME = datetime(2024, 10, 10, 12, 0, tzinfo=timezone.utc)
DC = "{http://purl.org/dc/elements/1.1/}"
ATOM = "{http://www.w3.org/2005/Atom}"


def _settings(**overrides):
    values = dict(link=PROFILE_URL, author="Sharon Machlis", site_name="InfoWorld")
    values.update(overrides)
    return FeedSettings(**values)


def _record(index, **overrides):
    values = dict(
        title=f"Article {index}",
        url=f"https://www.infoworld.com/article/{index}/a.html",
        author="Sharon Machlis",
    )
    values.update(overrides)
    return ArticleRecord(**values)


def _parse(xml):
    return ET.fromstring(xml.encode("utf-8"))


def test_build_feed_renders_channel_and_items():
    records = [_record(1, description="A description that is long enough.")]

    xml = build_feed(records, _settings(), build_time=BUILD_TIME)
    channel = _parse(xml).find("channel")

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert channel.findtext("title") == "Sharon Machlis - InfoWorld Articles"
    assert channel.findtext("link") == PROFILE_URL
    assert channel.findtext("language") == "en-us"
    assert channel.findtext("ttl") == "10080"
    assert channel.findtext("lastBuildDate") == "Thu, 10 Oct 2024 12:00:00 GMT"

    items = channel.findall("item")
    assert len(items) == 1
    item = items[0]
    assert item.findtext("title") == "Article 1"
    assert item.findtext("link") == "https://www.infoworld.com/article/1/a.html"
    assert item.findtext(f"{DC}creator") == "Sharon Machlis"
    guid = item.find("guid")
    assert guid.text == "https://www.infoworld.com/article/1/a.html"
    assert guid.get("isPermaLink") == "true"


def test_reserved_characters_survive_escaping():
    title = "Tom & Jerry <\"quoted\"> 'single'"
    description = "Use <b>bold</b> & 'friends' in \"R\""
    xml = build_feed(
        [_record(1, title=title, description=description)],
        _settings(),
        build_time=BUILD_TIME,
    )

    assert "Tom &amp; Jerry &lt;&quot;quoted&quot;&gt; &apos;single&apos;" in xml
    assert "<![CDATA[Use &lt;b&gt;bold&lt;/b&gt; &amp; &apos;friends&apos;" in xml

    item = _parse(xml).find("channel/item")
    assert item.findtext("title") == title
    assert html.unescape(item.findtext("description")) == description


def test_undated_records_get_synthetic_dates():
    records = [
        _record(0),
        _record(1, published_at=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        _record(2),
    ]

    dates = resolve_publish_dates(records, BUILD_TIME, timedelta(days=1))

    assert dates == [
        BUILD_TIME,
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        BUILD_TIME - timedelta(days=2),
    ]

    xml = build_feed(
        records, _settings(date_interval=timedelta(days=1)), build_time=BUILD_TIME
    )
    pub_dates = [item.findtext("pubDate") for item in _parse(xml).iter("item")]
    assert pub_dates == [
        "Thu, 10 Oct 2024 12:00:00 GMT",
        "Mon, 01 Jan 2024 00:00:00 GMT",
        "Tue, 08 Oct 2024 12:00:00 GMT",
    ]


def test_empty_sequence_yields_single_notice_item():
    xml = build_feed([], _settings(), build_time=BUILD_TIME)

    items = _parse(xml).findall("channel/item")
    assert len(items) == 1
    assert items[0].findtext("title") == NOTICE_TITLE
    assert items[0].findtext("link") == PROFILE_URL

    parsed = feedparser.parse(xml.encode("utf-8"))
    assert not parsed.bozo
    assert len(parsed.entries) == 1


def test_empty_optional_fields_stay_well_formed():
    records = [_record(index, description="") for index in range(3)]

    xml = build_feed(records, _settings(site_name=None), build_time=BUILD_TIME)

    assert validate_feed(xml)
    assert xml.count("<![CDATA[]]>") == 3
    assert _parse(xml).findtext("channel/title") == "Sharon Machlis - Articles"


def test_fill_missing_descriptions():
    xml = build_feed(
        [_record(1, description="")],
        _settings(fill_missing_descriptions=True),
        build_time=BUILD_TIME,
    )

    description = _parse(xml).findtext("channel/item/description")
    assert html.unescape(description) == (
        'Read the article "Article 1" by Sharon Machlis on InfoWorld.'
    )


def test_self_link_is_optional():
    without = build_feed([_record(1)], _settings(), build_time=BUILD_TIME)
    assert _parse(without).find(f"channel/{ATOM}link") is None

    with_link = build_feed(
        [_record(1)],
        _settings(self_link="https://example.github.io/feed.xml"),
        build_time=BUILD_TIME,
    )
    link = _parse(with_link).find(f"channel/{ATOM}link")
    assert link.get("href") == "https://example.github.io/feed.xml"
    assert link.get("rel") == "self"


def test_error_feed_is_valid_single_item_document():
    xml = build_error_feed(_settings(), build_time=BUILD_TIME)

    root = _parse(xml)
    assert root.findtext("channel/description") == "Error generating feed"
    items = root.findall("channel/item")
    assert [item.findtext("title") for item in items] == [ERROR_TITLE]
    assert validate_feed(xml)


def test_validate_feed_flags_malformed_documents():
    assert not validate_feed("<rss><channel><item></channel>")
