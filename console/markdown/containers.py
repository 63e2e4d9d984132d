# console/markdown/containers.py
"""
Fixed vocabulary of custom containers.

Authors write containers as:

    :::tip [Optional Title]
    Content
    :::

Each known name maps to an icon and a default title. The table is a
read-only mapping built at import time.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional


@dataclass(frozen=True)
class ContainerType:
    icon: str
    title: str


CONTAINER_TYPES = MappingProxyType(
    {
        "tip": ContainerType(icon="💡", title="提示"),
        "warning": ContainerType(icon="⚠️", title="警告"),
        "danger": ContainerType(icon="🚨", title="危险"),
        "info": ContainerType(icon="ℹ️", title="信息"),
        "note": ContainerType(icon="📝", title="注意"),
        "success": ContainerType(icon="✅", title="成功"),
        "error": ContainerType(icon="❌", title="错误"),
    }
)

# Reserved names with their own rendering
IFRAME_CONTAINER = "iframe"
DETAILS_CONTAINER = "details"
CODE_GROUP_CONTAINER = "code-group"

DETAILS_DEFAULT_TITLE = "展开查看内容"

# Class added to containers whose name is not in the vocabulary
GENERIC_CONTAINER_CLASS = "custom-container-generic"


def lookup_container(name: str) -> Optional[ContainerType]:
    """Return the container type for ``name`` or None when it is unknown."""
    return CONTAINER_TYPES.get(name)


def resolve_container_title(name: str, title: Optional[str]) -> Optional[str]:
    """An explicit title overrides the type's default title."""
    if title:
        return title
    container = lookup_container(name)
    if container is not None:
        return container.title
    if name == DETAILS_CONTAINER:
        return DETAILS_DEFAULT_TITLE
    return None
