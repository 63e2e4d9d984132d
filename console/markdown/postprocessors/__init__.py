# console/markdown/postprocessors/__init__.py

from .modify_external_links import modify_external_links
from .sanitizer import sanitize_html
from .utils import clear_shared_soup

POSTPROCESSORS = [
    sanitize_html,
    modify_external_links,
    # Order matters - they run sequentially
]


def apply_postprocessors(html, context):
    """Apply all postprocessors in order"""
    try:
        for processor in POSTPROCESSORS:
            html = processor(html, context)
    finally:
        clear_shared_soup(context)
    return html
