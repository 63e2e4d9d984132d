# console/markdown/parser.py
"""
Parse Markdown into the console document tree.

Pandoc does the Markdown parsing (``pypandoc.convert_text(..., to="json")``)
and this module converts the Pandoc JSON AST into ``Node`` objects:

    {"t": "Header", "c": [1, ["intro", [], []], [{"t": "Str", "c": "Hi"}]]}

becomes

    Node(HEADING, attributes={"level": "1"}, children=[Node(TEXT, value="Hi")])

Raw HTML islands are kept as raw-html nodes, never escaped here; the
sanitizer decides what survives.
"""

import json
import logging

import pypandoc

from .code_blocks import normalize_language
from .config import get_pandoc_config
from .nodes import Node, NodeType, text

logger = logging.getLogger(__name__)

ALIGNMENTS = {
    "AlignLeft": "left",
    "AlignRight": "right",
    "AlignCenter": "center",
}

QUOTES = {
    "DoubleQuote": ("“", "”"),
    "SingleQuote": ("‘", "’"),
}

# Inline wrappers whose formatting is not kept; their content is
SPLICED_INLINES = {"Underline", "SmallCaps", "Superscript", "Subscript"}

CONTAINER_CLASS = "custom-container"


class MarkdownParseError(Exception):
    """Pandoc could not be run or rejected the input."""


def parse_markdown(source: str) -> dict:
    """Run Pandoc and return its JSON AST."""
    config = get_pandoc_config()
    try:
        output = pypandoc.convert_text(
            source,
            to="json",
            format=config["format"],
            extra_args=config["extra_args"],
        )
    except (RuntimeError, OSError) as e:
        raise MarkdownParseError(f"Pandoc failed: {e}") from e

    try:
        return json.loads(output)
    except ValueError as e:
        raise MarkdownParseError("Pandoc returned invalid JSON") from e


def _attr(attr):
    """Split a Pandoc Attr triple into (identifier, classes, key/value dict)."""
    identifier, classes, pairs = attr
    return identifier, classes, {key: value for key, value in pairs}


class TreeBuilder:
    """Convert a Pandoc JSON AST into a ``Node`` tree."""

    def build(self, document: dict) -> Node:
        root = Node(NodeType.ROOT)
        self._blocks(document.get("blocks", []), root)
        return root

    # Blocks

    def _blocks(self, blocks, parent: Node):
        for block in blocks:
            self._block(block, parent)

    def _block(self, block, parent: Node):
        kind = block["t"]
        content = block.get("c")

        if kind == "Para":
            paragraph = Node(NodeType.PARAGRAPH)
            self._inlines(content, paragraph)
            parent.append(paragraph)
        elif kind == "Plain":
            # Tight list items and table cells hold inlines directly
            self._inlines(content, parent)
        elif kind == "Header":
            level, _attrs, inlines = content
            heading = Node(NodeType.HEADING, attributes={"level": str(level)})
            self._inlines(inlines, heading)
            parent.append(heading)
        elif kind == "CodeBlock":
            parent.append(self._code_block(content))
        elif kind == "RawBlock":
            self._raw(content, parent)
        elif kind == "BlockQuote":
            quote = Node(NodeType.BLOCKQUOTE)
            self._blocks(content, quote)
            parent.append(quote)
        elif kind == "BulletList":
            parent.append(self._list(content, ordered=False))
        elif kind == "OrderedList":
            list_attrs, items = content
            parent.append(self._list(items, ordered=True, start=list_attrs[0]))
        elif kind == "DefinitionList":
            parent.append(self._definition_list(content))
        elif kind == "HorizontalRule":
            parent.append(Node(NodeType.THEMATIC_BREAK))
        elif kind == "Table":
            parent.append(self._table(content))
        elif kind == "Div":
            self._div(content, parent)
        elif kind == "Figure":
            _attrs, _caption, blocks = content
            paragraph = Node(NodeType.PARAGRAPH)
            for inner in blocks:
                if inner["t"] in ("Plain", "Para"):
                    self._inlines(inner["c"], paragraph)
                else:
                    self._block(inner, parent)
            if paragraph.children:
                parent.append(paragraph)
        elif kind == "LineBlock":
            paragraph = Node(NodeType.PARAGRAPH)
            for index, line in enumerate(content):
                if index:
                    paragraph.append(Node(NodeType.BREAK))
                self._inlines(line, paragraph)
            parent.append(paragraph)
        else:
            logger.debug("Skipping unsupported Pandoc block %s", kind)

    def _code_block(self, content) -> Node:
        attrs, code = content
        _identifier, classes, pairs = _attr(attrs)
        language = classes[0] if classes else None
        node = Node(
            NodeType.CODE_BLOCK,
            attributes={"language": normalize_language(language)},
            value=code,
        )
        title = pairs.get("title") or pairs.get("data-title")
        if title:
            node.attributes["title"] = title
        return node

    def _raw(self, content, parent: Node):
        raw_format, raw = content
        if raw_format.lower() != "html":
            logger.debug("Dropping raw %s content", raw_format)
            return
        parent.append(Node(NodeType.RAW_HTML, value=raw))

    def _list(self, items, ordered: bool, start: int = 1) -> Node:
        attributes = {"ordered": "true" if ordered else "false"}
        if ordered and start != 1:
            attributes["start"] = str(start)
        node = Node(NodeType.LIST, attributes=attributes)
        for item in items:
            list_item = Node(NodeType.LIST_ITEM)
            self._blocks(item, list_item)
            node.append(list_item)
        return node

    def _definition_list(self, entries) -> Node:
        node = Node(NodeType.LIST, attributes={"ordered": "false"})
        for term, definitions in entries:
            item = Node(NodeType.LIST_ITEM)
            strong = Node(NodeType.STRONG)
            self._inlines(term, strong)
            term_paragraph = Node(NodeType.PARAGRAPH, children=[strong])
            item.append(term_paragraph)
            for definition in definitions:
                self._blocks(definition, item)
            node.append(item)
        return node

    def _table(self, content) -> Node:
        _attrs, _caption, colspecs, head, bodies, foot = content
        alignments = [ALIGNMENTS.get(colspec[0]["t"]) for colspec in colspecs]
        table = Node(NodeType.TABLE)

        _head_attrs, head_rows = head
        for row in head_rows:
            table.append(self._row(row, "head", alignments))
        for body in bodies:
            _body_attrs, _row_head_columns, intermediate_rows, body_rows = body
            for row in intermediate_rows + body_rows:
                table.append(self._row(row, "body", alignments))
        _foot_attrs, foot_rows = foot
        for row in foot_rows:
            table.append(self._row(row, "body", alignments))
        return table

    def _row(self, row, section: str, alignments) -> Node:
        _attrs, cells = row
        node = Node(NodeType.TABLE_ROW, attributes={"section": section})
        for index, cell in enumerate(cells):
            _cell_attrs, alignment, _rowspan, _colspan, blocks = cell
            attributes = {"header": "true" if section == "head" else "false"}
            align = ALIGNMENTS.get(alignment["t"])
            if align is None and index < len(alignments):
                align = alignments[index]
            if align:
                attributes["align"] = align
            cell_node = Node(NodeType.TABLE_CELL, attributes=attributes)
            self._blocks(blocks, cell_node)
            node.append(cell_node)
        return node

    def _div(self, content, parent: Node):
        attrs, blocks = content
        _identifier, classes, pairs = _attr(attrs)
        if CONTAINER_CLASS not in classes:
            # Plain Pandoc divs carry no meaning for the console
            self._blocks(blocks, parent)
            return

        name = pairs.get("directive")
        if not name:
            prefix = f"{CONTAINER_CLASS}-"
            name = next(
                (cls[len(prefix):] for cls in classes if cls.startswith(prefix)),
                "",
            )
        attributes = {"name": name}
        if pairs.get("title"):
            attributes["title"] = pairs["title"]
        if "src" in pairs:
            attributes["src"] = pairs["src"]
        container = Node(NodeType.CONTAINER_DIRECTIVE, attributes=attributes)
        self._blocks(blocks, container)
        parent.append(container)

    # Inlines

    def _inlines(self, inlines, parent: Node):
        for inline in inlines:
            self._inline(inline, parent)

    def _inline(self, inline, parent: Node):
        kind = inline["t"]
        content = inline.get("c")

        if kind == "Str":
            parent.append(text(content))
        elif kind == "Space":
            parent.append(text(" "))
        elif kind == "SoftBreak":
            parent.append(text("\n"))
        elif kind == "LineBreak":
            parent.append(Node(NodeType.BREAK))
        elif kind == "Emph":
            self._wrapped(NodeType.EMPHASIS, content, parent)
        elif kind == "Strong":
            self._wrapped(NodeType.STRONG, content, parent)
        elif kind == "Strikeout":
            self._wrapped(NodeType.STRIKETHROUGH, content, parent)
        elif kind in SPLICED_INLINES:
            self._inlines(content, parent)
        elif kind == "Span":
            self._inlines(content[1], parent)
        elif kind == "Cite":
            self._inlines(content[1], parent)
        elif kind == "Quoted":
            quote_type, inlines = content
            opening, closing = QUOTES.get(quote_type["t"], ('"', '"'))
            parent.append(text(opening))
            self._inlines(inlines, parent)
            parent.append(text(closing))
        elif kind == "Code":
            parent.append(Node(NodeType.INLINE_CODE, value=content[1]))
        elif kind == "Math":
            parent.append(text(content[1]))
        elif kind == "RawInline":
            self._raw(content, parent)
        elif kind == "Link":
            _attrs, inlines, (url, title) = content
            attributes = {"href": url}
            if title:
                attributes["title"] = title
            link = Node(NodeType.LINK, attributes=attributes)
            self._inlines(inlines, link)
            parent.append(link)
        elif kind == "Image":
            _attrs, inlines, (url, title) = content
            alt = Node(NodeType.ROOT)
            self._inlines(inlines, alt)
            attributes = {"src": url, "alt": alt.text_content()}
            if title:
                attributes["title"] = title
            parent.append(Node(NodeType.IMAGE, attributes=attributes))
        elif kind == "Note":
            logger.debug("Dropping footnote content")
        else:
            logger.debug("Skipping unsupported Pandoc inline %s", kind)

    def _wrapped(self, node_type: NodeType, inlines, parent: Node):
        node = Node(node_type)
        self._inlines(inlines, node)
        parent.append(node)


def build_tree(document: dict) -> Node:
    return TreeBuilder().build(document)
