# console/markdown/writer.py
"""
Write a sanitized document tree as presentational HTML.

Every node type maps to class-qualified markup the console stylesheet
targets. Raw HTML islands are written verbatim (the tree has already been
sanitized). Container directives render a title row and a content region:

    <div class="custom-container custom-container-tip" data-title="Note">
        <div class="custom-container-title">💡 Note</div>
        <div class="custom-container-content"><p>Hello</p></div>
    </div>
"""

import logging
from html import escape
from typing import Optional

from bs4 import BeautifulSoup

from .code_blocks import CodeBlock, render_code_widget
from .code_group import build_code_group
from .containers import (
    CODE_GROUP_CONTAINER,
    DETAILS_CONTAINER,
    GENERIC_CONTAINER_CLASS,
    IFRAME_CONTAINER,
    lookup_container,
    resolve_container_title,
)
from .nodes import Node, NodeType

logger = logging.getLogger(__name__)

INLINE_TAGS = {
    NodeType.EMPHASIS: "em",
    NodeType.STRONG: "strong",
    NodeType.STRIKETHROUGH: "del",
}


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _is_image_paragraph(node: Node) -> bool:
    """A paragraph holding nothing but images (and whitespace)."""
    images = 0
    for child in node.children:
        if child.type == NodeType.IMAGE:
            images += 1
        elif child.type == NodeType.TEXT and not child.value.strip():
            continue
        else:
            return False
    return images > 0


class HtmlWriter:
    def __init__(self, scheme: Optional[str] = None):
        self.scheme = scheme

    def write(self, root: Node) -> str:
        return self._children(root)

    def _children(self, node: Node) -> str:
        return "".join(self._node(child) for child in node.children)

    def _node(self, node: Node) -> str:
        method = getattr(self, "_" + node.type.value.replace("-", "_"), None)
        if method is None:
            logger.debug("No writer for node type %s", node.type.value)
            return self._children(node)
        return method(node)

    # Blocks

    def _paragraph(self, node: Node) -> str:
        if _is_image_paragraph(node):
            return f'<div class="markdown-image">{self._children(node)}</div>'
        return f"<p>{self._children(node)}</p>"

    def _heading(self, node: Node) -> str:
        level = node.get("level", "1")
        if level not in ("1", "2", "3", "4", "5", "6"):
            level = "6"
        decoration = '<span class="heading-decoration"></span>' if level == "1" else ""
        return (
            f'<h{level} class="markdown-heading markdown-heading-{level}">'
            f"{decoration}{self._children(node)}</h{level}>"
        )

    def _list(self, node: Node) -> str:
        if node.get("ordered") == "true":
            start = node.get("start")
            start_attr = f' start="{_attr(start)}"' if start else ""
            return f'<ol class="markdown-list"{start_attr}>{self._children(node)}</ol>'
        return f'<ul class="markdown-list">{self._children(node)}</ul>'

    def _list_item(self, node: Node) -> str:
        return f'<li class="markdown-list-item">{self._children(node)}</li>'

    def _blockquote(self, node: Node) -> str:
        return f'<blockquote class="markdown-blockquote">{self._children(node)}</blockquote>'

    def _thematic_break(self, node: Node) -> str:
        return '<hr class="markdown-divider">'

    def _table(self, node: Node) -> str:
        head = [row for row in node.children if row.get("section") == "head"]
        body = [row for row in node.children if row.get("section") != "head"]
        parts = ['<div class="markdown-table-wrapper"><table class="markdown-table">']
        if head:
            parts.append("<thead>" + "".join(self._node(row) for row in head) + "</thead>")
        if body:
            parts.append("<tbody>" + "".join(self._node(row) for row in body) + "</tbody>")
        parts.append("</table></div>")
        return "".join(parts)

    def _table_row(self, node: Node) -> str:
        return f"<tr>{self._children(node)}</tr>"

    def _table_cell(self, node: Node) -> str:
        tag = "th" if node.get("header") == "true" else "td"
        align = node.get("align")
        align_attr = f' align="{_attr(align)}"' if align else ""
        return f"<{tag}{align_attr}>{self._children(node)}</{tag}>"

    def _code_block(self, node: Node) -> str:
        return render_code_widget(CodeBlock.from_node(node), self.scheme)

    def _raw_html(self, node: Node) -> str:
        return node.value

    def _container_directive(self, node: Node) -> str:
        name = node.get("name", "")
        if name == IFRAME_CONTAINER:
            return self._iframe(node)
        if name == DETAILS_CONTAINER:
            return self._details(node)
        if name == CODE_GROUP_CONTAINER:
            return self._code_group(node)

        title = resolve_container_title(name, node.get("title"))
        container = lookup_container(name)
        if container is None:
            logger.warning("Unknown directive %r rendered as a generic container", name)
            classes = f"custom-container {GENERIC_CONTAINER_CLASS}"
            if name:
                classes = f"custom-container custom-container-{name} {GENERIC_CONTAINER_CLASS}"
            header = title or ""
            opening = f'<div class="{classes}" role="alert"'
        else:
            header = f"{container.icon} {title}"
            opening = f'<div class="custom-container custom-container-{name}"'

        if node.get("title"):
            opening += f' data-title="{_attr(node.get("title"))}"'
        title_html = ""
        if header:
            title_html = f'<div class="custom-container-title">{escape(header)}</div>'
        return (
            f"{opening}>{title_html}"
            f'<div class="custom-container-content">{self._children(node)}</div>'
            "</div>"
        )

    def _iframe(self, node: Node) -> str:
        src = node.get("src", "")
        if not src:
            logger.warning("iframe directive without a usable URL")
            return '<div class="custom-container custom-container-iframe"></div>'
        title = node.get("title")
        title_attr = f' title="{_attr(title)}"' if title else ""
        return (
            '<div class="custom-container custom-container-iframe">'
            f'<iframe src="{_attr(src)}"{title_attr} frameborder="0" '
            'allowfullscreen loading="lazy"></iframe>'
            "</div>"
        )

    def _details(self, node: Node) -> str:
        title = resolve_container_title(DETAILS_CONTAINER, node.get("title"))
        return (
            '<details class="custom-container custom-container-details">'
            f'<summary class="custom-container-title">{escape(title)}</summary>'
            f'<div class="custom-container-content">{self._children(node)}</div>'
            "</details>"
        )

    def _code_group(self, node: Node) -> str:
        # The tab builder works on sibling <pre> elements
        plain = []
        for child in node.children:
            if child.type == NodeType.CODE_BLOCK:
                plain.append(self._plain_code(child))
            else:
                logger.debug("Ignoring %s inside code group", child.type.value)
        soup = BeautifulSoup("".join(plain), "html.parser")
        return build_code_group(soup.contents, title=node.get("title"), scheme=self.scheme)

    def _plain_code(self, node: Node) -> str:
        language = _attr(node.get("language", "text"))
        title = node.get("title")
        title_attr = f' data-title="{_attr(title)}"' if title else ""
        # The group builder strips one trailing newline, as for any <pre>
        return (
            f'<pre><code class="language-{language}"{title_attr}>'
            f"{escape(node.value, quote=False)}\n</code></pre>"
        )

    # Inlines

    def _text(self, node: Node) -> str:
        return escape(node.value, quote=False)

    def _break(self, node: Node) -> str:
        return "<br>"

    def _inline_code(self, node: Node) -> str:
        return f'<code class="markdown-inline-code">{escape(node.value, quote=False)}</code>'

    def _link(self, node: Node) -> str:
        title = node.get("title")
        title_attr = f' title="{_attr(title)}"' if title else ""
        return (
            f'<a class="markdown-link" href="{_attr(node.get("href", ""))}"{title_attr}>'
            f"{self._children(node)}</a>"
        )

    def _image(self, node: Node) -> str:
        title = node.get("title")
        title_attr = f' title="{_attr(title)}"' if title else ""
        return (
            f'<img src="{_attr(node.get("src", ""))}" alt="{_attr(node.get("alt", ""))}"'
            f'{title_attr} loading="lazy">'
        )

    def _emphasis(self, node: Node) -> str:
        return self._inline(node)

    def _strong(self, node: Node) -> str:
        return self._inline(node)

    def _strikethrough(self, node: Node) -> str:
        return self._inline(node)

    def _inline(self, node: Node) -> str:
        tag = INLINE_TAGS[node.type]
        return f"<{tag}>{self._children(node)}</{tag}>"


def write_html(root: Node, scheme: Optional[str] = None) -> str:
    return HtmlWriter(scheme).write(root)
