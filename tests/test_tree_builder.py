"""Tests for converting the Pandoc JSON AST into console nodes."""

import pytest

from console.markdown.nodes import NodeType
from console.markdown.parser import build_tree, parse_markdown

NO_ATTR = ["", [], []]


def _doc(*blocks):
    return {"pandoc-api-version": [1, 23, 1], "meta": {}, "blocks": list(blocks)}


def _str(value):
    return {"t": "Str", "c": value}


def _plain(*inlines):
    return {"t": "Plain", "c": list(inlines)}


def _cell(value, align="AlignDefault"):
    return [NO_ATTR, {"t": align}, 1, 1, [_plain(_str(value))]]


def test_heading_text_is_merged():
    tree = build_tree(
        _doc({"t": "Header", "c": [2, ["hi", [], []], [_str("Hello"), {"t": "Space"}, _str("world")]]})
    )

    heading = tree.children[0]
    assert heading.type == NodeType.HEADING
    assert heading.get("level") == "2"
    assert len(heading.children) == 1
    assert heading.children[0].value == "Hello world"


def test_code_block_keeps_pandoc_text_as_is():
    # Pandoc has already dropped the newline before the closing fence
    tree = build_tree(_doc({"t": "CodeBlock", "c": [["", ["javascript"], []], "console.log(1)\n"]}))

    block = tree.children[0]
    assert block.type == NodeType.CODE_BLOCK
    assert block.get("language") == "javascript"
    assert block.value == "console.log(1)\n"


@pytest.mark.parametrize(
    "body, expected",
    [
        ("x\n", "x"),
        ("x\n\n", "x\n"),
        ("a\n  b\n", "a\n  b"),
    ],
)
def test_fence_body_loses_exactly_one_trailing_newline(body, expected):
    tree = build_tree(parse_markdown(f"```python\n{body}```"))

    block = tree.children[0]
    assert block.get("language") == "python"
    assert block.value == expected


def test_code_block_without_or_with_unknown_language_is_text():
    tree = build_tree(
        _doc(
            {"t": "CodeBlock", "c": [NO_ATTR, "plain"]},
            {"t": "CodeBlock", "c": [["", ["no-such-language-xyz"], []], "odd"]},
        )
    )

    assert [node.get("language") for node in tree.children] == ["text", "text"]


def test_code_block_title_attribute():
    tree = build_tree(
        _doc({"t": "CodeBlock", "c": [["", ["python"], [["title", "app.py"]]], "pass"]})
    )

    assert tree.children[0].get("title") == "app.py"


def test_custom_container_div_becomes_directive():
    div = {
        "t": "Div",
        "c": [
            ["", ["custom-container", "custom-container-tip"], [["directive", "tip"], ["title", "Note"]]],
            [{"t": "Para", "c": [_str("Hello")]}],
        ],
    }

    container = build_tree(_doc(div)).children[0]

    assert container.type == NodeType.CONTAINER_DIRECTIVE
    assert container.attributes == {"name": "tip", "title": "Note"}
    assert container.children[0].type == NodeType.PARAGRAPH
    assert container.text_content() == "Hello"


def test_iframe_container_keeps_src():
    div = {
        "t": "Div",
        "c": [
            ["", ["custom-container", "custom-container-iframe"], [["directive", "iframe"], ["src", "https://e.com/v"]]],
            [],
        ],
    }

    container = build_tree(_doc(div)).children[0]

    assert container.get("name") == "iframe"
    assert container.get("src") == "https://e.com/v"


def test_plain_div_is_unwrapped():
    div = {"t": "Div", "c": [["", ["aside"], []], [{"t": "Para", "c": [_str("Inside")]}]]}

    tree = build_tree(_doc(div))

    assert [node.type for node in tree.children] == [NodeType.PARAGRAPH]


def test_raw_html_is_kept_and_other_raw_formats_dropped():
    tree = build_tree(
        _doc(
            {"t": "RawBlock", "c": ["html", "<iframe src=\"https://e.com\"></iframe>"]},
            {"t": "RawBlock", "c": ["latex", "\\newpage"]},
        )
    )

    assert len(tree.children) == 1
    assert tree.children[0].type == NodeType.RAW_HTML
    assert tree.children[0].value.startswith("<iframe")


def test_tight_list_items_hold_inlines():
    tree = build_tree(_doc({"t": "BulletList", "c": [[_plain(_str("one"))], [_plain(_str("two"))]]}))

    listing = tree.children[0]
    assert listing.get("ordered") == "false"
    assert [item.type for item in listing.children] == [NodeType.LIST_ITEM, NodeType.LIST_ITEM]
    assert listing.children[1].children[0].value == "two"


def test_ordered_list_start():
    ordered = {
        "t": "OrderedList",
        "c": [[3, {"t": "Decimal"}, {"t": "Period"}], [[_plain(_str("three"))]]],
    }

    listing = build_tree(_doc(ordered)).children[0]

    assert listing.get("ordered") == "true"
    assert listing.get("start") == "3"


def test_table_rows_cells_and_alignment():
    table = {
        "t": "Table",
        "c": [
            NO_ATTR,
            [None, []],
            [[{"t": "AlignRight"}, {"t": "ColWidthDefault"}]],
            [NO_ATTR, [[NO_ATTR, [_cell("Head")]]]],
            [[NO_ATTR, 0, [], [[NO_ATTR, [_cell("Body")]]]]],
            [NO_ATTR, []],
        ],
    }

    node = build_tree(_doc(table)).children[0]

    assert node.type == NodeType.TABLE
    head, body = node.children
    assert head.get("section") == "head"
    assert head.children[0].attributes == {"header": "true", "align": "right"}
    assert body.children[0].get("header") == "false"
    assert body.children[0].text_content() == "Body"


def test_inline_nodes():
    para = {
        "t": "Para",
        "c": [
            {"t": "Emph", "c": [_str("em")]},
            {"t": "Code", "c": [NO_ATTR, "x = 1"]},
            {"t": "Link", "c": [NO_ATTR, [_str("site")], ["https://example.com", "Example"]]},
            {"t": "Image", "c": [NO_ATTR, [_str("logo")], ["logo.png", ""]]},
            {"t": "Quoted", "c": [{"t": "DoubleQuote"}, [_str("q")]]},
        ],
    }

    children = build_tree(_doc(para)).children[0].children

    assert children[0].type == NodeType.EMPHASIS
    assert children[1].type == NodeType.INLINE_CODE
    assert children[1].value == "x = 1"
    assert children[2].attributes == {"href": "https://example.com", "title": "Example"}
    assert children[3].attributes == {"src": "logo.png", "alt": "logo"}
    assert children[4].value == "“q”"


def test_horizontal_rule_and_blockquote():
    tree = build_tree(
        _doc(
            {"t": "HorizontalRule"},
            {"t": "BlockQuote", "c": [{"t": "Para", "c": [_str("quoted")]}]},
        )
    )

    assert [node.type for node in tree.children] == [NodeType.THEMATIC_BREAK, NodeType.BLOCKQUOTE]
