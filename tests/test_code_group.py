"""Tests for the code group tab builder."""

from bs4 import BeautifulSoup

from console.markdown.code_group import EMPTY_MESSAGE, CodeGroup, build_code_group


def _elements(html):
    return BeautifulSoup(html, "html.parser").contents


TWO_BLOCKS = (
    '<pre><code class="language-javascript">&lt;!-- BLOCK_TITLE: main.js --&gt;\n'
    "console.log(1)\n</code></pre>"
    '<pre><code class="language-python">print(1)\n</code></pre>'
)


def test_empty_group_shows_message():
    html = build_code_group(_elements("<p>No code here</p>"))

    soup = BeautifulSoup(html, "html.parser")
    assert soup.find("div")["class"] == ["code-group-empty"]
    assert soup.get_text() == EMPTY_MESSAGE


def test_single_block_has_no_tab_strip():
    html = build_code_group(
        _elements('<pre><code class="language-bash">echo hi</code></pre>'),
        title="Install",
    )

    soup = BeautifulSoup(html, "html.parser")
    assert "code-group-single" in soup.find("div")["class"]
    assert soup.select_one(".code-group-title").get_text() == "Install"
    assert soup.select_one("[role=tablist]") is None
    assert len(soup.select(".code-block-container")) == 1


def test_two_blocks_get_a_tab_each():
    soup = BeautifulSoup(build_code_group(_elements(TWO_BLOCKS)), "html.parser")

    tabs = soup.select(".code-group-tab")
    assert [tab.get_text() for tab in tabs] == ["main.js", "python"]
    assert [tab["data-index"] for tab in tabs] == ["0", "1"]
    assert tabs[0]["aria-selected"] == "true"
    panels = soup.select(".code-group-panel")
    assert len(panels) == 2
    assert not panels[0].has_attr("hidden")
    assert panels[1].has_attr("hidden")


def test_group_collects_only_pre_siblings():
    group = CodeGroup.from_elements(_elements("<p>intro</p>" + TWO_BLOCKS + "text"))

    assert group.labels == ("main.js", "python")
    assert group.tab_keys() == ["0", "1"]
    assert group.blocks[0].content == "<!-- BLOCK_TITLE: main.js -->\nconsole.log(1)"


def test_explicit_and_bracket_titles():
    group = CodeGroup.from_elements(
        _elements(
            '<pre><code class="language-bash" data-title="explicit">[ignored]\nls</code></pre>'
            '<pre><code class="language-bash">[bracket]\nls</code></pre>'
        )
    )

    assert group.labels == ("explicit", "bracket")


def test_ordinal_label_when_code_element_is_missing():
    group = CodeGroup.from_elements(
        _elements('<pre><code class="language-go">go</code></pre><pre>raw text</pre>')
    )

    assert group.labels == ("go", "代码块 2")
    assert group.blocks[1].language == "text"
