# console/markdown/nodes.py
"""
Document tree produced by the parser and consumed by the sanitizer and writer.

Every node owns its children; the tree has no parent pointers and is built
top-down, so a node can only ever sit under one parent.

Attributes by node type:
    heading              level ("1".."6")
    list                 ordered ("true"/"false"), start
    link                 href, title
    image                src, alt, title
    table-row            section ("head"/"body")
    table-cell           header ("true"/"false"), align
    code-block           language, title
    container-directive  name, title, src (iframe only)

``value`` carries literal text for text, inline-code, code-block and
raw-html nodes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional


class NodeType(str, Enum):
    ROOT = "root"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    LIST_ITEM = "list-item"
    LINK = "link"
    IMAGE = "image"
    TABLE = "table"
    TABLE_ROW = "table-row"
    TABLE_CELL = "table-cell"
    BLOCKQUOTE = "blockquote"
    THEMATIC_BREAK = "thematic-break"
    CODE_BLOCK = "code-block"
    INLINE_CODE = "inline-code"
    CONTAINER_DIRECTIVE = "container-directive"
    RAW_HTML = "raw-html"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    BREAK = "break"


@dataclass
class Node:
    type: NodeType
    children: List["Node"] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)
    value: str = ""

    def append(self, child: "Node") -> "Node":
        # Merge adjacent text so leaves carry the literal rendered text
        if (
            child.type == NodeType.TEXT
            and self.children
            and self.children[-1].type == NodeType.TEXT
        ):
            self.children[-1].value += child.value
            return self.children[-1]
        self.children.append(child)
        return child

    def extend(self, children: List["Node"]) -> None:
        for child in children:
            self.append(child)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal including this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def text_content(self) -> str:
        if self.type in (NodeType.TEXT, NodeType.INLINE_CODE, NodeType.CODE_BLOCK):
            return self.value
        if self.type == NodeType.BREAK:
            return "\n"
        return "".join(child.text_content() for child in self.children)


def text(value: str) -> Node:
    return Node(NodeType.TEXT, value=value)
