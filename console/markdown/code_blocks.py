# console/markdown/code_blocks.py
"""
Code block descriptors and the interactive code widget markup.

A fenced block

    ```javascript
    <!-- BLOCK_TITLE: main.js -->
    console.log(1)
    ```

becomes

    <div class="code-block-container code-block-hydrated code-block-theme-light"
         data-language="javascript" data-title="main.js">
        <div class="code-block-header">
            <span class="code-block-dots">...</span>
            <span class="code-block-language">JAVASCRIPT</span>
            <button type="button" class="code-block-copy-btn" data-code="...">复制</button>
        </div>
        <div class="code-block-body"><!-- Pygments output with line numbers --></div>
    </div>

Title precedence: explicit title attribute, then a ``<!-- BLOCK_TITLE: x -->``
marker on the first line, then a leading ``[x]`` token, then the language.
"""

import logging
import re
from dataclasses import dataclass
from html import escape
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from .config import get_code_theme, resolve_color_scheme

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "text"

# Marker class: a wrapper carrying it is never hydrated again
HYDRATED_CLASS = "code-block-hydrated"
HIGHLIGHT_CLASS = "code-block-highlight"

BLOCK_TITLE_PATTERN = re.compile(r"<!--\s*BLOCK_TITLE:\s*(\S[^>]*?)\s*-->")
BRACKET_TITLE_PATTERN = re.compile(r"^\s*\[([^\]\n]+)\]")
LANGUAGE_CLASS_PATTERN = re.compile(r"^language-([\w+#.-]+)$")


def strip_trailing_newline(content: str) -> str:
    """Drop exactly one trailing newline, if any."""
    if content.endswith("\r\n"):
        return content[:-2]
    if content.endswith("\n"):
        return content[:-1]
    return content


def normalize_language(language: Optional[str]) -> str:
    """Return the language identifier, or ``text`` if absent or unknown to Pygments."""
    if not language:
        return DEFAULT_LANGUAGE
    language = language.strip().lower()
    if language.startswith("language-"):
        language = language[len("language-"):]
    if not language:
        return DEFAULT_LANGUAGE
    try:
        get_lexer_by_name(language)
    except ClassNotFound:
        logger.debug("Unknown code language %r, using %s", language, DEFAULT_LANGUAGE)
        return DEFAULT_LANGUAGE
    return language


def language_from_classes(classes) -> Optional[str]:
    """Extract ``xxx`` from a ``language-xxx`` class, if present."""
    if isinstance(classes, str):
        classes = classes.split()
    for cls in classes or []:
        match = LANGUAGE_CLASS_PATTERN.match(cls)
        if match:
            return match.group(1)
    return None


def resolve_title(content: str, explicit: Optional[str] = None, language: str = DEFAULT_LANGUAGE) -> str:
    if explicit and explicit.strip():
        return explicit.strip()

    first_line = next((line for line in content.splitlines() if line.strip()), "")
    marker = BLOCK_TITLE_PATTERN.search(first_line)
    if marker:
        return marker.group(1).strip()

    bracket = BRACKET_TITLE_PATTERN.match(content)
    if bracket and bracket.group(1).strip():
        return bracket.group(1).strip()

    return language


@dataclass(frozen=True)
class CodeBlock:
    content: str
    language: str = DEFAULT_LANGUAGE
    explicit_title: Optional[str] = None

    @property
    def title(self) -> str:
        return resolve_title(self.content, self.explicit_title, self.language)

    @classmethod
    def from_node(cls, node) -> "CodeBlock":
        return cls(
            content=node.value,
            language=node.get("language") or DEFAULT_LANGUAGE,
            explicit_title=node.get("title"),
        )


def highlight_code(code: str, language: str) -> str:
    """Pygments HTML with table line numbers; input whitespace is kept as-is."""
    try:
        lexer = get_lexer_by_name(language, stripnl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False)
    formatter = HtmlFormatter(cssclass=HIGHLIGHT_CLASS, linenos="table")
    return highlight(code, lexer, formatter)


def render_code_widget(block: CodeBlock, scheme: Optional[str] = None) -> str:
    scheme = resolve_color_scheme(scheme)
    language = escape(block.language, quote=True)
    title = escape(block.title, quote=True)
    dots = '<span class="code-block-dot"></span>' * 3

    return (
        f'<div class="code-block-container {HYDRATED_CLASS} code-block-theme-{scheme}" '
        f'data-language="{language}" data-title="{title}">'
        '<div class="code-block-header">'
        f'<span class="code-block-dots">{dots}</span>'
        f'<span class="code-block-language">{language.upper()}</span>'
        '<button type="button" class="code-block-copy-btn" data-copy-state="idle" '
        f'data-code="{escape(block.content, quote=True)}" title="复制代码" '
        'aria-label="Copy code">复制</button>'
        '</div>'
        f'<div class="code-block-body">{highlight_code(block.content, block.language)}</div>'
        '</div>'
    )


def theme_stylesheet(scheme: Optional[str] = None) -> str:
    """CSS for the Pygments theme matching the colour scheme."""
    scheme = resolve_color_scheme(scheme)
    style = get_code_theme(scheme)
    selector = f".code-block-theme-{scheme} .{HIGHLIGHT_CLASS}"
    try:
        formatter = HtmlFormatter(style=style, cssclass=HIGHLIGHT_CLASS)
    except ClassNotFound:
        logger.warning("Unknown Pygments style %r, falling back to default", style)
        formatter = HtmlFormatter(style="default", cssclass=HIGHLIGHT_CLASS)
    return formatter.get_style_defs(selector)
