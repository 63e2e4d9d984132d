# console/templatetags/markdown_tags.py

from django import template
from django.utils.safestring import mark_safe

from console.markdown.code_blocks import theme_stylesheet
from console.markdown.config import resolve_color_scheme
from console.markdown.renderer import render_markdown

register = template.Library()

COLOR_SCHEME_HEADER = "Sec-CH-Prefers-Color-Scheme"


def _color_scheme(context):
    """Viewer preference: explicit context variable, then the client hint header."""
    scheme = context.get("color_scheme")
    request = context.get("request")
    if not scheme and request is not None:
        scheme = request.headers.get(COLOR_SCHEME_HEADER)
    return resolve_color_scheme(scheme)


@register.filter(name="markdown")
def markdown_filter(value):
    return mark_safe(render_markdown(value))


@register.simple_tag(takes_context=True)
def markdown_with_context(context, value):
    """Template tag that renders with the viewer's colour scheme"""
    processor_context = {
        "color_scheme": _color_scheme(context),
    }
    return mark_safe(render_markdown(value, context=processor_context))


@register.simple_tag(takes_context=True)
def code_theme_stylesheet(context):
    """<style> block for the code highlighting theme of the current viewer"""
    css = theme_stylesheet(_color_scheme(context))
    return mark_safe(f"<style>{css}</style>")
