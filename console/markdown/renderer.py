# console/markdown/renderer.py
"""
Entry points of the Markdown pipeline.

``render_markdown`` runs every stage synchronously and returns hydrated
HTML. ``render_document`` is the async variant used by ``MarkdownView``;
it runs Pandoc in a worker thread and leaves hydration to the view. Any
failure is logged and replaced by ``ERROR_HTML``.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from html import escape
from typing import Mapping, Optional

from .code_blocks import theme_stylesheet
from .config import resolve_color_scheme
from .parser import build_tree, parse_markdown
from .postprocessors import apply_postprocessors
from .postprocessors.code_hydrator import hydrate_code_blocks
from .postprocessors.sanitizer import sanitize_tree
from .preprocessors import apply_preprocessors
from .writer import write_html

logger = logging.getLogger(__name__)

ERROR_HTML = '<div class="markdown-error"><p>Markdown 渲染出错</p></div>'
LOADING_HTML = '<div class="markdown-loading">加载中...</div>'

DEFAULT_STYLE = {
    "line-height": "1.8",
    "font-size": "16px",
    "color": "#333",
    "background-color": "transparent",
}

CSS_PROPERTY_PATTERN = re.compile(r"^-?[a-zA-Z][a-zA-Z-]*$")


@dataclass
class RenderResult:
    html: str
    stylesheet: str = ""
    failed: bool = False


def _prepare_context(context):
    # Processors cache state in the context; never write into the caller's dict
    context = dict(context or {})
    context["color_scheme"] = resolve_color_scheme(context.get("color_scheme"))
    return context


def _render_tree(tree, context):
    tree = sanitize_tree(tree, context.get("schema"))
    html = write_html(tree, context["color_scheme"])
    return apply_postprocessors(html, context)


def render_markdown(text, context=None):
    """
    Main rendering function with pre/post processing pipeline using pypandoc.
    The result is hydrated, ready to be marked safe and placed in a page.

    Args:
        text: Raw markdown text
        context: Optional dict for processors that need additional data
            (``color_scheme``: "light" or "dark")
    """
    if not text:
        return ""
    context = _prepare_context(context)

    try:
        # Pre-processing: Before markdown conversion
        text = apply_preprocessors(text, context)

        tree = build_tree(parse_markdown(text))

        # Sanitize, write and post-process
        html = _render_tree(tree, context)

        return hydrate_code_blocks(html, context)
    except Exception:
        logger.error("Markdown rendering failed", exc_info=True)
        return ERROR_HTML


async def render_document(text, context=None) -> RenderResult:
    """
    Asynchronous pipeline: each stage runs after the previous one finished.
    Pandoc runs in a worker thread. Hydration is left to the mount point.
    """
    if not text:
        return RenderResult(html="")
    context = _prepare_context(context)

    try:
        text = apply_preprocessors(text, context)
        document = await asyncio.to_thread(parse_markdown, text)
        tree = build_tree(document)
        html = _render_tree(tree, context)
    except Exception:
        logger.error("Markdown rendering failed", exc_info=True)
        return RenderResult(html=ERROR_HTML, failed=True)

    return RenderResult(html=html, stylesheet=theme_stylesheet(context["color_scheme"]))


def style_attribute(style: Optional[Mapping[str, str]] = None) -> str:
    """Merge host style overrides into the default wrapper style."""
    merged = {**DEFAULT_STYLE, **(style or {})}
    declarations = []
    for prop, value in merged.items():
        if value is None:
            continue
        if not CSS_PROPERTY_PATTERN.match(prop):
            logger.debug("Ignoring invalid style property %r", prop)
            continue
        value = str(value)
        if any(char in value for char in ";{}<>"):
            logger.debug("Ignoring unsafe value for style property %s", prop)
            continue
        declarations.append(f"{prop}: {value}")
    return "; ".join(declarations)


class MarkdownView:
    """
    A mount point for rendered Markdown.

    ``update()`` renders a new source; the result is committed and hydrated
    only if no newer ``update()`` started in the meantime. Stale results are
    discarded so the newest request always wins.
    """

    def __init__(self, class_name=None, style=None, context=None):
        self.class_name = class_name
        self.style = style
        self.context = dict(context or {})
        self.loading = False
        self.html = ""
        self.stylesheet = ""
        self._sequence = 0

    async def update(self, source) -> Optional[RenderResult]:
        self._sequence += 1
        sequence = self._sequence
        self.loading = True

        result = await render_document(source, self.context)

        if sequence != self._sequence:
            logger.debug("Discarding stale render %d (latest is %d)", sequence, self._sequence)
            return None

        self.html = result.html
        self.stylesheet = result.stylesheet
        self.loading = False
        self.hydrate()
        return result

    def hydrate(self):
        """Upgrade code blocks in the committed markup; safe to call repeatedly."""
        try:
            self.html = hydrate_code_blocks(self.html, _prepare_context(self.context))
        except Exception:
            logger.error("Code block hydration failed", exc_info=True)

    def render(self) -> str:
        if self.loading:
            return LOADING_HTML
        classes = "markdown-renderer"
        if self.class_name:
            classes = f"{classes} {self.class_name}"
        return (
            f'<div class="{escape(classes, quote=True)}" '
            f'style="{escape(style_attribute(self.style), quote=True)}">'
            f"{self.html}</div>"
        )
