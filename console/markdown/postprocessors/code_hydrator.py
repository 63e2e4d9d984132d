# console/markdown/postprocessors/code_hydrator.py
"""
Upgrade bare code blocks in mounted markup into interactive code widgets.

Runs after the rendered HTML has been committed. It finds every
``<pre><code class="language-xxx">`` pair that is not already inside a
widget and replaces the ``pre`` with the widget markup from
``render_code_widget``:

    <pre><code class="language-python">print(1)
    </code></pre>

becomes

    <div class="code-block-container code-block-hydrated ..." data-language="python" ...>
        ...
    </div>

The pass is idempotent: widgets carry the ``code-block-hydrated`` marker
class and anything under it is skipped. A ``pre`` holding anything besides a
single ``code`` element is left untouched.
"""

import logging

from bs4 import NavigableString

from ..code_blocks import (
    HYDRATED_CLASS,
    CodeBlock,
    language_from_classes,
    normalize_language,
    render_code_widget,
    strip_trailing_newline,
)
from .utils import parse_fragment

logger = logging.getLogger(__name__)


def _classify(pre, code):
    """Return a CodeBlock for a ``pre > code`` pair or None when the shape is unexpected."""
    elements = [
        child
        for child in pre.children
        if not (isinstance(child, NavigableString) and not child.strip())
    ]
    if len(elements) != 1 or elements[0] is not code:
        return None

    language = normalize_language(
        language_from_classes(code.get("class")) or code.get("data-language")
    )
    return CodeBlock(
        content=strip_trailing_newline(code.get_text()),
        language=language,
        explicit_title=code.get("data-title") or code.get("title"),
    )


def hydrate_code_blocks(html: str, context: dict) -> str:
    """
    Replace bare ``pre > code`` blocks with code widgets.

    Args:
        html: Mounted HTML
        context: Render context; ``color_scheme`` selects the widget theme

    Returns:
        HTML with every classifiable code block hydrated
    """
    soup = parse_fragment(html)
    scheme = context.get("color_scheme")
    hydrated = 0

    for code in soup.select("pre > code"):
        pre = code.parent
        # Skip blocks detached by an earlier replacement
        if not any(parent is soup for parent in pre.parents):
            continue
        if pre.find_parent(class_=HYDRATED_CLASS) is not None:
            continue

        block = _classify(pre, code)
        if block is None:
            logger.debug("Leaving unclassifiable code block as-is")
            continue

        widget = parse_fragment(render_code_widget(block, scheme))
        pre.replace_with(widget)
        hydrated += 1

    if not hydrated:
        return html

    logger.debug("Hydrated %d code block(s)", hydrated)
    return str(soup)
