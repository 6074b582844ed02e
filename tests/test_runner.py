import json
from datetime import datetime, timezone
from xml.etree import ElementTree as ET

from profile_feed import runner
from profile_feed.render import RenderError, RenderedPage, parse_document
from profile_feed.runner import RunConfig, build_renderer, execute

PROFILE_URL = "https://www.infoworld.com/profile/sharon-machlis/"
BUILD_TIME = datetime(2024, 10, 10, 12, 0, tzinfo=timezone.utc)

PAGE = """
<html><body><main>
  <article>
    <a href="/article/1/how-to-use-widgets.html">
      How to Use Widgets By Sharon Machlis Oct 3, 2024 5 mins R Language
    </a>
    <p>Learn how widgets make your R code easier to maintain.</p>
  </article>
  <article>
    <a href="/article/2/tidy-tricks.html">Tidy Tricks for Data Frames</a>
  </article>
  <article>
    <a href="/article/3/other.html">By Jane Doe Oct 1, 2024 4 mins Something Else</a>
  </article>
</main></body></html>
"""


class FakeRenderer:
    def __init__(self, html=PAGE, error=None):
        self.html = html
        self.error = error
        self.calls = []

    def render(self, url, timeout):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return RenderedPage(url=url, html=self.html, document=parse_document(self.html))


def _config(tmp_path, **overrides):
    values = dict(
        profile_url=PROFILE_URL,
        author="Sharon Machlis",
        site_name="InfoWorld",
        site_domain="infoworld.com",
        output_path=str(tmp_path / "feed.xml"),
        render_timeout=12.0,
    )
    values.update(overrides)
    return RunConfig(**values)


def _item_titles(path):
    root = ET.parse(path).getroot()
    return [item.findtext("title") for item in root.iter("item")]


def test_execute_writes_feed_from_rendered_page(tmp_path):
    renderer = FakeRenderer()
    config = _config(tmp_path)

    result = execute(config, renderer=renderer, build_time=BUILD_TIME)

    assert result.ok
    assert renderer.calls == [(PROFILE_URL, 12.0)]
    assert [article.title for article in result.articles] == [
        "How to Use Widgets",
        "Tidy Tricks for Data Frames",
    ]
    assert result.articles[0].description == (
        "Learn how widgets make your R code easier to maintain."
    )
    assert _item_titles(tmp_path / "feed.xml") == [
        "How to Use Widgets",
        "Tidy Tricks for Data Frames",
    ]


def test_execute_writes_error_feed_when_render_fails(tmp_path):
    config = _config(tmp_path)

    result = execute(
        config, renderer=FakeRenderer(error=RenderError("timeout")), build_time=BUILD_TIME
    )

    assert not result.ok
    assert result.error == "timeout"
    assert _item_titles(tmp_path / "feed.xml") == ["Feed Generation Error"]


def test_execute_writes_notice_feed_when_nothing_found(tmp_path):
    config = _config(tmp_path)

    result = execute(
        config,
        renderer=FakeRenderer(html="<html><body><p>Empty</p></body></html>"),
        build_time=BUILD_TIME,
    )

    assert result.ok
    assert result.articles == []
    assert _item_titles(tmp_path / "feed.xml") == ["Feed Generation Notice"]


def test_execute_saves_snapshot_and_articles(tmp_path):
    config = _config(
        tmp_path,
        save_html_path=str(tmp_path / "snapshots" / "page.html"),
        save_articles_path=str(tmp_path / "articles.json"),
    )

    execute(config, renderer=FakeRenderer(), build_time=BUILD_TIME)

    assert (tmp_path / "snapshots" / "page.html").read_text(encoding="utf-8") == PAGE
    saved = json.loads((tmp_path / "articles.json").read_text(encoding="utf-8"))
    assert [article["url"] for article in saved] == [
        "https://www.infoworld.com/article/1/how-to-use-widgets.html",
        "https://www.infoworld.com/article/2/tidy-tricks.html",
    ]
    assert saved[0]["published_at"].startswith("2024-10-03")
    assert saved[1]["published_at"] is None


def test_execute_respects_max_articles(tmp_path):
    config = _config(tmp_path, max_articles=1)

    result = execute(config, renderer=FakeRenderer(), build_time=BUILD_TIME)

    assert len(result.articles) == 1


def test_build_renderer_prefers_snapshot(tmp_path):
    snapshot = _config(tmp_path, load_html_path=str(tmp_path / "page.html"))
    live = _config(tmp_path)

    assert isinstance(build_renderer(snapshot), runner.SnapshotRenderer)
    assert isinstance(build_renderer(live), runner.HttpRenderer)


def test_execute_loads_snapshot_from_disk(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")
    config = _config(tmp_path, load_html_path=str(page))

    result = execute(config, build_time=BUILD_TIME)

    assert len(result.articles) == 2
