"""End-to-end tests for the rendering pipeline (Pandoc via pypandoc)."""

import asyncio

from bs4 import BeautifulSoup

from console.markdown import renderer
from console.markdown.parser import MarkdownParseError
from console.markdown.postprocessors.modify_external_links import modify_external_links
from console.markdown.renderer import (
    ERROR_HTML,
    LOADING_HTML,
    MarkdownView,
    RenderResult,
    render_document,
    render_markdown,
    style_attribute,
)


def _soup(source, context=None):
    return BeautifulSoup(render_markdown(source, context), "html.parser")


def test_tip_container_with_title():
    soup = _soup(":::tip [Note]\nHello\n:::")

    container = soup.select_one("div.custom-container.custom-container-tip")
    assert container is not None
    assert container.select_one(".custom-container-title").get_text() == "💡 Note"
    assert container.select_one(".custom-container-content").get_text(strip=True) == "Hello"


def test_container_without_title_uses_default():
    soup = _soup(":::warning\nCareful\n:::")

    title = soup.select_one(".custom-container-warning .custom-container-title")
    assert title.get_text() == "⚠️ 警告"


def test_unknown_directive_renders_generic_container():
    soup = _soup(":::custom\nX\n:::")

    container = soup.select_one("div.custom-container-generic")
    assert container is not None
    assert container.get_text(strip=True) == "X"


def test_unclosed_directive_is_shown_as_text():
    soup = _soup(":::tip\nHello")

    assert soup.select_one(".custom-container") is None
    assert ":::tip" in soup.get_text()


def test_stray_fences_do_not_wrap_later_content():
    soup = _soup("Before\n\n:::\n\n:::note\nAfter")

    assert soup.find("div") is None
    text = soup.get_text()
    assert ":::note" in text
    assert "After" in text


def test_code_fence_keeps_trailing_blank_line():
    soup = _soup("```python\nx\n\n```")

    assert soup.select_one("button.code-block-copy-btn")["data-code"] == "x\n"


def test_code_group_block_keeps_trailing_blank_line():
    soup = _soup(":::code-group\n```python\nx\n\n```\n\n```bash\nls\n```\n:::")

    codes = [button["data-code"] for button in soup.select("button.code-block-copy-btn")]
    assert codes == ["x\n", "ls"]


def test_nested_directives():
    soup = _soup(":::tip\nOuter\n\n:::warning\nInner\n:::\n:::")

    inner = soup.select_one(".custom-container-tip .custom-container-warning")
    assert inner is not None
    assert inner.select_one(".custom-container-content").get_text(strip=True) == "Inner"


def test_code_fence_round_trip():
    soup = _soup("```python\nprint('hi')\n```")

    widget = soup.select_one(".code-block-container")
    assert widget["data-language"] == "python"
    assert widget.select_one("button.code-block-copy-btn")["data-code"] == "print('hi')"


def test_code_fence_without_language_is_text():
    soup = _soup("```\nplain words\n```")

    assert soup.select_one(".code-block-container")["data-language"] == "text"


def test_inline_code_is_not_a_widget():
    soup = _soup("Use `pip install` here.")

    assert soup.select_one("code.markdown-inline-code").get_text() == "pip install"
    assert soup.select_one(".code-block-container") is None


def test_code_group_labels():
    source = (
        ":::code-group\n"
        "```javascript\n"
        "<!-- BLOCK_TITLE: main.js -->\n"
        "console.log(1)\n"
        "```\n"
        "\n"
        "```python\n"
        "print(1)\n"
        "```\n"
        ":::"
    )

    soup = _soup(source)

    assert [tab.get_text() for tab in soup.select(".code-group-tab")] == ["main.js", "python"]


def test_scripts_and_handlers_never_survive():
    source = (
        "<script>alert(1)</script>\n\n"
        '<div onclick="steal()">Hi</div>\n\n'
        "[bad](javascript:alert(1))"
    )

    html = render_markdown(source)

    assert "<script" not in html
    assert "onclick" not in html
    assert "javascript:" not in html


def test_raw_custom_container_markup_is_preserved():
    source = '<div class="custom-container custom-container-tip" data-title="Raw">\n\nText\n\n</div>'

    div = _soup(source).find("div", attrs={"data-title": "Raw"})

    assert div is not None
    assert "custom-container-tip" in div["class"]


def test_iframe_directive():
    soup = _soup(":::iframe\nhttps://example.com/embed/1\n:::")

    iframe = soup.select_one(".custom-container-iframe iframe")
    assert iframe["src"] == "https://example.com/embed/1"


def test_external_links_open_in_new_tab():
    soup = _soup("[out](https://other.org/page)")

    link = soup.find("a")
    assert link["target"] == "_blank"
    assert link["rel"] == ["noopener", "noreferrer"]
    assert "external-link" in link["class"]


def test_internal_host_links_are_left_alone():
    html = modify_external_links('<a href="https://console.example.com/x">in</a>', {})

    assert "target" not in html


def test_dark_scheme_from_context():
    soup = _soup("```bash\nls\n```", {"color_scheme": "dark"})

    assert "code-block-theme-dark" in soup.select_one(".code-block-container")["class"]


def test_empty_source_renders_nothing():
    assert render_markdown("") == ""


def test_pipeline_errors_render_inline_message(monkeypatch):
    def failing(text):
        raise MarkdownParseError("pandoc exploded")

    monkeypatch.setattr(renderer, "parse_markdown", failing)

    assert render_markdown("# Title") == ERROR_HTML
    result = asyncio.run(render_document("# Title"))
    assert result.failed
    assert result.html == ERROR_HTML


def test_render_document_returns_markup_and_stylesheet():
    result = asyncio.run(render_document("# Title", {"color_scheme": "dark"}))

    assert not result.failed
    assert BeautifulSoup(result.html, "html.parser").find("h1").get_text() == "Title"
    assert ".code-block-theme-dark" in result.stylesheet


def test_view_discards_stale_renders(monkeypatch):
    async def fake_render(source, context=None):
        await asyncio.sleep(0.05 if source == "slow" else 0)
        return RenderResult(html=f"<p>{source}</p>")

    monkeypatch.setattr(renderer, "render_document", fake_render)
    view = MarkdownView()

    async def scenario():
        return await asyncio.gather(view.update("slow"), view.update("fast"))

    slow, fast = asyncio.run(scenario())

    assert slow is None
    assert fast.html == "<p>fast</p>"
    assert view.html == "<p>fast</p>"
    assert not view.loading


def test_view_hydrates_on_commit(monkeypatch):
    async def fake_render(source, context=None):
        return RenderResult(html='<pre><code class="language-python">x = 1</code></pre>')

    monkeypatch.setattr(renderer, "render_document", fake_render)
    view = MarkdownView(class_name="article-body", style={"font-size": "18px"})

    asyncio.run(view.update("anything"))
    wrapper = BeautifulSoup(view.render(), "html.parser").find("div")

    assert wrapper["class"] == ["markdown-renderer", "article-body"]
    assert "font-size: 18px" in wrapper["style"]
    assert "line-height: 1.8" in wrapper["style"]
    assert wrapper.select_one(".code-block-hydrated") is not None


def test_view_shows_placeholder_while_loading():
    view = MarkdownView()
    view.loading = True

    assert view.render() == LOADING_HTML


def test_style_attribute_drops_unsafe_values():
    style = style_attribute({"color": "red; background: url(x)", "margin": "0"})

    assert "url(" not in style
    assert "margin: 0" in style
    assert "color: red" not in style
