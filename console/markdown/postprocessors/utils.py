# console/markdown/postprocessors/utils.py
"""BeautifulSoup helpers shared by the HTML passes."""

from __future__ import annotations

from bs4 import BeautifulSoup

SOUP_CACHE_KEY = "_soup_cache"


def parse_fragment(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def get_shared_soup(html: str, context: dict) -> BeautifulSoup:
    """
    Parsed document for ``html``, reused across consecutive postprocessors.

    The cache entry lives in the render context as ``(source, soup)`` and is
    replaced whenever a processor hands over markup that differs from the
    last serialised source.
    """
    cached = context.get(SOUP_CACHE_KEY)
    if cached is not None and cached[0] == html:
        return cached[1]
    soup = parse_fragment(html)
    context[SOUP_CACHE_KEY] = (html, soup)
    return soup


def soup_to_html(context: dict, soup: BeautifulSoup) -> str:
    html = str(soup)
    context[SOUP_CACHE_KEY] = (html, soup)
    return html


def clear_shared_soup(context: dict) -> None:
    context.pop(SOUP_CACHE_KEY, None)


def class_list(tag) -> list:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def add_class(tag, name: str) -> None:
    classes = class_list(tag)
    if name not in classes:
        classes.append(name)
    tag["class"] = classes
