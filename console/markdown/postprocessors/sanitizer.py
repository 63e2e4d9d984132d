# console/markdown/postprocessors/sanitizer.py
"""
Strip anything the sanitization schema does not allow.

Two passes share one schema:

1. ``sanitize_tree`` runs on the parsed document tree before it is written.
   It drops raw HTML islands that contain disallowed tags (``<script>`` and
   friends, content included), unwraps links whose URL protocol is not
   allowed, drops such images and keeps only the known attributes on
   directives and code blocks.
2. ``sanitize_html`` is the FIRST postprocessor. It runs bleach over the
   written markup so attributes inside raw HTML islands (``onclick``,
   ``style``...) and anything the tree pass could not see are removed.

Neither pass rejects a document; disallowed content is silently dropped and
identical input always produces identical output.
"""

import logging
import re
from typing import Optional

import bleach

from ..nodes import Node, NodeType
from ..schema import SanitizationSchema, get_schema

logger = logging.getLogger(__name__)

RAW_TAG_PATTERN = re.compile(r"<\s*/?\s*([A-Za-z][\w:-]*)")
CONTAINER_NAME_PATTERN = re.compile(r"^[A-Za-z][\w-]*$")

CONTAINER_ATTRIBUTES = ("name", "title", "src")
CODE_BLOCK_ATTRIBUTES = ("language", "title")


def _sanitize_raw(node: Node, schema: SanitizationSchema) -> Optional[Node]:
    tags = RAW_TAG_PATTERN.findall(node.value)
    disallowed = sorted({tag.lower() for tag in tags if not schema.allows_tag(tag)})
    if disallowed:
        logger.debug("Dropping raw HTML containing %s", ", ".join(disallowed))
        return None
    return Node(NodeType.RAW_HTML, value=node.value)


def _sanitize_container(node: Node, schema: SanitizationSchema) -> dict:
    attributes = {key: node.attributes[key] for key in CONTAINER_ATTRIBUTES if key in node.attributes}
    if not CONTAINER_NAME_PATTERN.match(attributes.get("name", "")):
        attributes["name"] = ""
    src = attributes.get("src")
    if src is not None and not schema.allows_url(src):
        logger.warning("Dropping embed URL with disallowed protocol")
        attributes["src"] = ""
    return attributes


def _sanitize_node(node: Node, schema: SanitizationSchema) -> list:
    """Return the sanitized replacement(s) for ``node`` (possibly none)."""
    if node.type == NodeType.RAW_HTML:
        raw = _sanitize_raw(node, schema)
        return [raw] if raw is not None else []

    if node.type == NodeType.IMAGE and not schema.allows_url(node.get("src", "")):
        logger.debug("Dropping image with disallowed URL")
        return []

    children = []
    for child in node.children:
        children.extend(_sanitize_node(child, schema))

    if node.type == NodeType.LINK and not schema.allows_url(node.get("href", "")):
        logger.debug("Unwrapping link with disallowed URL")
        return children

    if node.type == NodeType.CONTAINER_DIRECTIVE:
        attributes = _sanitize_container(node, schema)
    elif node.type == NodeType.CODE_BLOCK:
        attributes = {key: node.attributes[key] for key in CODE_BLOCK_ATTRIBUTES if key in node.attributes}
    else:
        attributes = dict(node.attributes)

    clean = Node(node.type, attributes=attributes, value=node.value)
    clean.extend(children)
    return [clean]


def sanitize_tree(root: Node, schema: Optional[SanitizationSchema] = None) -> Node:
    """Return a sanitized copy of the tree; the input is left untouched."""
    schema = schema or get_schema()
    clean = Node(root.type, attributes=dict(root.attributes), value=root.value)
    for child in root.children:
        clean.extend(_sanitize_node(child, schema))
    return clean


def clean_markup(html: str, schema: Optional[SanitizationSchema] = None) -> str:
    schema = schema or get_schema()
    return bleach.clean(
        html,
        tags=set(schema.tags),
        attributes=schema.bleach_attribute_filter(),
        protocols=set(schema.protocols),
        strip=True,
        strip_comments=True,
    )


def sanitize_html(html, context):
    """
    Sanitize HTML output using bleach.
    This is the FIRST post-processor and should run before any other HTML modifications.
    """
    try:
        return clean_markup(html, context.get("schema"))
    except Exception:
        logger.error("Bleach sanitization failed", exc_info=True)
        raise
