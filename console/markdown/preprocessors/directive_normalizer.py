"""
Preprocessor that turns custom container fences into Pandoc fenced divs.

Converts:
    :::tip [Read this first]
    Some **markdown** content.
    :::

Into:
    ::: {.custom-container .custom-container-tip directive="tip" title="Read this first"}

    Some **markdown** content.

    :::

Pandoc then parses the fenced div into a real ``Div`` node, so the tree
builder sees container directives as structure rather than text.

Rules:
- An opening line is exactly ``:::name`` or ``:::name [Title]``; a closing
  line is exactly ``:::``. Trailing whitespace is ignored.
- A closing line closes the innermost open directive, so directives nest.
- A colon fence that is not part of a matched directive is escaped
  (``\\:::tip``) so Pandoc shows it as literal text.
- Lines inside backtick or tilde code fences are never rewritten.
- ``:::iframe`` bodies are a URL, moved into a ``src`` attribute.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from ..containers import IFRAME_CONTAINER

logger = logging.getLogger(__name__)

OPEN_PATTERN = re.compile(r"^:::([A-Za-z][\w-]*)(?:[ \t]+\[([^\]\n]*)\])?[ \t]*$")
CLOSE_PATTERN = re.compile(r"^:::[ \t]*$")
CODE_FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
COLON_FENCE_PATTERN = re.compile(r"^( {0,3}):{3,}")


@dataclass
class Directive:
    name: str
    title: Optional[str]
    start: int
    end: int = -1


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
        and len(line) - len(line.lstrip(" ")) <= 3
    )


def _scan(lines: List[str]) -> Tuple[List[Directive], Set[int]]:
    """Matched directives plus the indexes of colon fences that match nothing."""
    stack: List[Directive] = []
    matched: List[Directive] = []
    stray: Set[int] = set()
    fence = None

    for index, line in enumerate(lines):
        if fence is not None:
            if _closes_fence(line, fence):
                fence = None
            continue

        # An iframe body is opaque until its closing line
        in_iframe = bool(stack) and stack[-1].name == IFRAME_CONTAINER

        if CLOSE_PATTERN.match(line):
            if stack:
                directive = stack.pop()
                directive.end = index
                matched.append(directive)
            else:
                logger.warning("Unmatched closing fence on line %d left as text", index + 1)
                stray.add(index)
            continue

        if in_iframe:
            continue

        fence_match = CODE_FENCE_PATTERN.match(line)
        if fence_match:
            fence = fence_match.group(1)
            continue

        open_match = OPEN_PATTERN.match(line)
        if open_match:
            title = open_match.group(2)
            title = title.strip() if title is not None else None
            stack.append(Directive(name=open_match.group(1), title=title or None, start=index))
        elif COLON_FENCE_PATTERN.match(line):
            logger.warning("Malformed directive fence on line %d left as text", index + 1)
            stray.add(index)

    for directive in stack:
        logger.warning(
            "Directive :::%s on line %d is never closed, left as text",
            directive.name,
            directive.start + 1,
        )
        stray.add(directive.start)

    return sorted(matched, key=lambda d: d.start), stray


def find_directives(lines: List[str]) -> List[Directive]:
    """Return every matched directive with the line indexes of its fences."""
    return _scan(lines)[0]


def escape_fence(line: str) -> str:
    """``:::tip`` -> ``\\:::tip``; Pandoc renders the escaped colon literally."""
    match = COLON_FENCE_PATTERN.match(line)
    if match is None:
        return line
    indent = len(match.group(1))
    return line[:indent] + "\\" + line[indent:]


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _opening_fence(name: str, title: Optional[str], src: Optional[str] = None) -> str:
    parts = [".custom-container", f".custom-container-{name}", f"directive={_quote(name)}"]
    if title:
        parts.append(f"title={_quote(title)}")
    if src is not None:
        parts.append(f"src={_quote(src)}")
    return "::: {" + " ".join(parts) + "}"


def normalize_directives(text: str) -> str:
    """Rewrite matched ``:::name [title]`` blocks as Pandoc fenced divs."""
    lines = text.replace("\r\n", "\n").split("\n")
    directives, stray = _scan(lines)
    if not directives and not stray:
        return text

    replacements = {index: [escape_fence(lines[index])] for index in stray}
    skipped = set()
    for directive in directives:
        logger.debug(
            "Normalizing directive :::%s (lines %d-%d)",
            directive.name,
            directive.start + 1,
            directive.end + 1,
        )
        if directive.name == IFRAME_CONTAINER:
            body = lines[directive.start + 1 : directive.end]
            src = " ".join(line.strip() for line in body).strip()
            replacements[directive.start] = [
                "",
                _opening_fence(directive.name, directive.title, src=src),
                "",
            ]
            skipped.update(range(directive.start + 1, directive.end))
        else:
            replacements[directive.start] = [
                "",
                _opening_fence(directive.name, directive.title),
                "",
            ]
        replacements[directive.end] = ["", ":::", ""]

    output: List[str] = []
    for index, line in enumerate(lines):
        if index in skipped:
            continue
        output.extend(replacements.get(index, [line]))
    return "\n".join(output)


def directive_normalizer_default(text: str, context: dict) -> str:
    """
    Default configuration for directive_normalizer.

    Register this in PREPROCESSORS.
    """
    return normalize_directives(text)
