"""
Configuration for the console Markdown pipeline.

Projects override any of the defaults below through a ``MARKDOWN_RENDERER``
dictionary in Django settings:

    MARKDOWN_RENDERER = {
        "COLOR_SCHEME": "dark",
        "THEMES": {"light": "friendly", "dark": "monokai"},
        "EXTRA_ALLOWED_ATTRIBUTES": {"a": ["hreflang"]},
        "INTERNAL_HOSTS": ["console.example.com"],
    }

When Django settings have not been configured (the pipeline used as a plain
library) the defaults apply unchanged.
"""

from django.conf import settings

PANDOC_FORMAT = (
    "markdown"
    "+fenced_divs"
    "+fenced_code_blocks"
    "+fenced_code_attributes"
    "+pipe_tables"
    "+strikeout"
    "+task_lists"
    "+autolink_bare_uris"
    "+raw_html"
    # An image alone in a paragraph stays a paragraph, the writer decides
    "-implicit_figures"
    # Raw <div>/<span> stay raw HTML islands for the sanitizer
    "-native_divs"
    "-native_spans"
)

DEFAULTS = {
    "COLOR_SCHEME": "light",
    "THEMES": {
        "light": "default",
        "dark": "monokai",
    },
    "PANDOC_FORMAT": PANDOC_FORMAT,
    "PANDOC_EXTRA_ARGS": [],
    "EXTRA_ALLOWED_ATTRIBUTES": {},
    "INTERNAL_HOSTS": [],
}

COLOR_SCHEMES = ("light", "dark")


def get_render_settings():
    """Return the effective renderer settings (defaults merged with overrides)."""
    overrides = {}
    if settings.configured:
        overrides = getattr(settings, "MARKDOWN_RENDERER", None) or {}

    merged = dict(DEFAULTS)
    for key, value in overrides.items():
        if key == "THEMES":
            merged["THEMES"] = {**DEFAULTS["THEMES"], **value}
        else:
            merged[key] = value
    return merged


def get_pandoc_config():
    """
    Configuration for pypandoc/Pandoc markdown parsing.

    The pipeline asks Pandoc for its JSON AST rather than HTML, so only the
    reader format and any extra command line arguments are configurable.
    """
    render_settings = get_render_settings()
    return {
        "format": render_settings["PANDOC_FORMAT"],
        "extra_args": list(render_settings["PANDOC_EXTRA_ARGS"]),
    }


def resolve_color_scheme(value=None):
    """Normalise a colour scheme hint to ``light`` or ``dark``."""
    if value:
        value = str(value).strip().strip('"').lower()
        if value in COLOR_SCHEMES:
            return value
    default = get_render_settings()["COLOR_SCHEME"]
    return default if default in COLOR_SCHEMES else "light"


def get_code_theme(scheme):
    """Pygments style name for the given colour scheme."""
    themes = get_render_settings()["THEMES"]
    return themes.get(resolve_color_scheme(scheme), DEFAULTS["THEMES"]["light"])
