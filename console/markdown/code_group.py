# console/markdown/code_group.py
"""
Present sibling code blocks as one tabbed unit.

Markdown input:
    :::code-group [Install]
    ```bash
    <!-- BLOCK_TITLE: pip -->
    pip install console
    ```

    ```bash
    [poetry]
    poetry add console
    ```
    :::

Only ``pre`` siblings take part; anything else inside the group is ignored.
- no code blocks:   <div class="code-group-empty">未找到代码块</div>
- one code block:   the widget alone, under the optional group title
- two or more:      a tab strip keyed by zero-based index plus one panel per block
"""

import logging
from dataclasses import dataclass
from html import escape
from typing import Iterable, List, Optional, Tuple

from bs4 import Tag

from .code_blocks import (
    CodeBlock,
    language_from_classes,
    normalize_language,
    render_code_widget,
    strip_trailing_newline,
)

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "未找到代码块"


def ordinal_title(index: int) -> str:
    return f"代码块 {index + 1}"


@dataclass(frozen=True)
class CodeGroup:
    blocks: Tuple[CodeBlock, ...]
    labels: Tuple[str, ...]
    title: Optional[str] = None

    def tab_keys(self) -> List[str]:
        return [str(index) for index in range(len(self.blocks))]

    @classmethod
    def from_elements(cls, elements: Iterable, title: Optional[str] = None) -> "CodeGroup":
        """Collect ``pre`` elements and resolve one label per block."""
        pres = [el for el in elements if isinstance(el, Tag) and el.name == "pre"]
        blocks = []
        labels = []
        for index, pre in enumerate(pres):
            code = pre.find("code", recursive=False)
            if code is None:
                logger.debug("Code group entry %d has no <code> child", index)
                blocks.append(CodeBlock(content=strip_trailing_newline(pre.get_text())))
                labels.append(ordinal_title(index))
                continue

            language = normalize_language(
                language_from_classes(code.get("class")) or code.get("data-language")
            )
            block = CodeBlock(
                content=strip_trailing_newline(code.get_text()),
                language=language,
                explicit_title=code.get("data-title") or code.get("title"),
            )
            blocks.append(block)
            labels.append(block.title)
        return cls(blocks=tuple(blocks), labels=tuple(labels), title=title or None)


def render_code_group(group: CodeGroup, scheme: Optional[str] = None) -> str:
    if not group.blocks:
        return f'<div class="code-group-empty">{EMPTY_MESSAGE}</div>'

    title_html = ""
    if group.title:
        title_html = f'<div class="code-group-title">{escape(group.title)}</div>'

    if len(group.blocks) == 1:
        return (
            '<div class="code-group code-group-single">'
            f"{title_html}{render_code_widget(group.blocks[0], scheme)}"
            "</div>"
        )

    tabs = []
    panels = []
    for key, block, label in zip(group.tab_keys(), group.blocks, group.labels):
        active = key == "0"
        tab_class = "code-group-tab code-group-tab-active" if active else "code-group-tab"
        tabs.append(
            f'<button type="button" class="{tab_class}" role="tab" data-index="{key}" '
            f'aria-selected="{"true" if active else "false"}">{escape(label)}</button>'
        )
        panel_class = "code-group-panel code-group-panel-active" if active else "code-group-panel"
        hidden = "" if active else " hidden"
        panels.append(
            f'<div class="{panel_class}" role="tabpanel" data-index="{key}"{hidden}>'
            f"{render_code_widget(block, scheme)}</div>"
        )

    return (
        '<div class="code-group code-group-multiple">'
        f"{title_html}"
        f'<div class="code-group-tabs" role="tablist">{"".join(tabs)}</div>'
        f'<div class="code-group-panels">{"".join(panels)}</div>'
        "</div>"
    )


def build_code_group(elements: Iterable, title: Optional[str] = None, scheme: Optional[str] = None) -> str:
    """Tabbed markup for the ``pre`` elements among ``elements``."""
    return render_code_group(CodeGroup.from_elements(elements, title), scheme)
