# console/markdown/schema.py
"""
Allow-list of tags and attributes that may survive into rendered output.

The schema is a frozen value. ``extend()`` returns a new schema that is a
superset of the old one; nothing can be removed and a fixed set of
executable tags and attributes can never be added. ``get_schema()`` builds
the process-wide schema once (base allow-list, directive/code extension,
widget extension, project extension from settings) and caches it.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .config import get_render_settings

logger = logging.getLogger(__name__)

NEVER_ALLOWED_TAGS = frozenset(
    {
        "script",
        "style",
        "object",
        "embed",
        "applet",
        "base",
        "meta",
        "link",
        "frame",
        "frameset",
    }
)
NEVER_ALLOWED_ATTRIBUTES = frozenset({"srcdoc", "formaction"})

# Matches every tag
WILDCARD = "*"


def _is_forbidden_attribute(name: str) -> bool:
    name = name.lower()
    return name.startswith("on") or name in NEVER_ALLOWED_ATTRIBUTES


@dataclass(frozen=True)
class SanitizationSchema:
    tags: frozenset = frozenset()
    attributes: Mapping[str, frozenset] = field(
        default_factory=lambda: MappingProxyType({})
    )
    protocols: frozenset = frozenset({"http", "https", "mailto", "tel"})

    def extend(
        self,
        tags: Iterable[str] = (),
        attributes: Optional[Mapping[str, Iterable[str]]] = None,
        protocols: Iterable[str] = (),
    ) -> "SanitizationSchema":
        """Return a new schema allowing everything this one does plus the given entries."""
        new_tags = set(self.tags)
        for tag in tags:
            tag = tag.lower()
            if tag in NEVER_ALLOWED_TAGS:
                logger.warning("Refusing to allow-list tag <%s>", tag)
                continue
            new_tags.add(tag)

        new_attributes = {tag: set(names) for tag, names in self.attributes.items()}
        for tag, names in (attributes or {}).items():
            tag = tag.lower()
            if tag in NEVER_ALLOWED_TAGS:
                logger.warning("Refusing attributes for forbidden tag <%s>", tag)
                continue
            allowed = new_attributes.setdefault(tag, set())
            for name in names:
                if _is_forbidden_attribute(name):
                    logger.warning("Refusing to allow-list attribute %s on <%s>", name, tag)
                    continue
                allowed.add(name.lower())

        new_protocols = set(self.protocols)
        for protocol in protocols:
            protocol = protocol.lower()
            if protocol in ("javascript", "vbscript", "data"):
                logger.warning("Refusing to allow-list protocol %s", protocol)
                continue
            new_protocols.add(protocol)

        return SanitizationSchema(
            tags=frozenset(new_tags),
            attributes=MappingProxyType(
                {tag: frozenset(names) for tag, names in new_attributes.items()}
            ),
            protocols=frozenset(new_protocols),
        )

    def allows_tag(self, tag: str) -> bool:
        tag = tag.lower()
        return tag in self.tags and tag not in NEVER_ALLOWED_TAGS

    def allows_attribute(self, tag: str, name: str) -> bool:
        name = name.lower()
        if _is_forbidden_attribute(name):
            return False
        if name in self.attributes.get(WILDCARD, ()):
            return True
        return name in self.attributes.get(tag.lower(), ())

    def allows_url(self, url: str) -> bool:
        """Relative URLs are fine, absolute ones need an allowed protocol."""
        candidate = "".join(url.split()).lower()
        if ":" not in candidate:
            return True
        scheme, _, _ = candidate.partition(":")
        # "/path:with-colon" and "#frag:x" are relative
        if "/" in scheme or "#" in scheme or "?" in scheme:
            return True
        return scheme in self.protocols

    def bleach_attribute_filter(self):
        """Callable usable as ``attributes=`` for ``bleach.clean``."""

        def _filter(tag, name, value):
            return self.allows_attribute(tag, name)

        return _filter


BASE_SCHEMA = SanitizationSchema().extend(
    tags=[
        # text
        "p",
        "br",
        "div",
        "span",
        "em",
        "strong",
        "b",
        "i",
        "del",
        "s",
        "ins",
        "sup",
        "sub",
        "kbd",
        "mark",
        # headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # lists
        "ul",
        "ol",
        "li",
        "hr",
        "blockquote",
        "dl",
        "dt",
        "dd",
        # code
        "pre",
        "code",
        # tables
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "caption",
        # media
        "img",
        "iframe",
        # links and interactive
        "a",
        "details",
        "summary",
        "input",
    ],
    attributes={
        "a": ["href", "title"],
        "img": ["src", "alt", "title", "width", "height", "loading"],
        "iframe": [
            "src",
            "width",
            "height",
            "title",
            "allow",
            "allowfullscreen",
            "frameborder",
            "loading",
        ],
        "th": ["align", "colspan", "rowspan", "scope"],
        "td": ["align", "colspan", "rowspan"],
        "ol": ["start"],
        "input": ["type", "checked", "disabled"],
        "details": ["open"],
    },
)

# Directive containers and code fences signal their type through classes
# and data attributes.
DIRECTIVE_ATTRIBUTES = {
    "div": ["class", "data-language", "data-title"],
    "pre": ["class", "data-language", "data-title"],
    "code": ["class", "data-language", "data-title"],
    "span": ["class", "data-language", "data-title"],
}

# Attributes emitted by the writer for styling hooks and widgets.
WIDGET_TAGS = ["button"]
WIDGET_ATTRIBUTES = {
    "div": ["role", "hidden", "data-index"],
    "button": [
        "type",
        "class",
        "title",
        "role",
        "aria-label",
        "aria-selected",
        "data-code",
        "data-copy-state",
        "data-index",
    ],
    "h1": ["class"],
    "h2": ["class"],
    "h3": ["class"],
    "h4": ["class"],
    "h5": ["class"],
    "h6": ["class"],
    "p": ["class"],
    "ul": ["class"],
    "ol": ["class"],
    "li": ["class"],
    "a": ["class"],
    "img": ["class"],
    "iframe": ["class"],
    "table": ["class"],
    "tr": ["class"],
    "th": ["class"],
    "td": ["class"],
    "blockquote": ["class"],
    "hr": ["class"],
    "details": ["class"],
    "summary": ["class"],
}


def build_schema(extra_attributes=None) -> SanitizationSchema:
    """Base allow-list extended for directives, widgets and project additions."""
    schema = BASE_SCHEMA.extend(attributes=DIRECTIVE_ATTRIBUTES)
    schema = schema.extend(tags=WIDGET_TAGS, attributes=WIDGET_ATTRIBUTES)
    if extra_attributes:
        schema = schema.extend(attributes=extra_attributes)
    return schema


@lru_cache(maxsize=1)
def get_schema() -> SanitizationSchema:
    """Process-wide schema, built on first use and read-only afterwards."""
    extra = get_render_settings()["EXTRA_ALLOWED_ATTRIBUTES"]
    schema = build_schema(extra)
    logger.debug(
        "Sanitization schema ready: %d tags, %d attribute rules",
        len(schema.tags),
        len(schema.attributes),
    )
    return schema
