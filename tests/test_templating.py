from datetime import datetime, timedelta, timezone

from profile_feed.templating import get_environment, rfc822, xml_escape


def test_get_environment_registers_feed_filters():
    env = get_environment()

    assert "xml" in env.filters
    assert "rfc822" in env.filters
    assert env.get_template("feed.xml.j2") is not None


def test_xml_escape_uses_named_entities():
    assert xml_escape("a&b<c>\"d'e") == "a&amp;b&lt;c&gt;&quot;d&apos;e"
    assert xml_escape(None) == ""


def test_rfc822_converts_to_gmt():
    eastern = timezone(timedelta(hours=-4))

    assert rfc822(datetime(2024, 10, 3, 8, 30, tzinfo=eastern)) == (
        "Thu, 03 Oct 2024 12:30:00 GMT"
    )
    assert rfc822(datetime(2024, 10, 3)) == "Thu, 03 Oct 2024 00:00:00 GMT"
