# console/markdown/preprocessors/__init__.py

from .directive_normalizer import directive_normalizer_default

PREPROCESSORS = [
    directive_normalizer_default,  # Must run before Pandoc sees the text
    # Order matters - they run sequentially
]


def apply_preprocessors(text, context):
    """Apply all preprocessors in order"""
    for processor in PREPROCESSORS:
        text = processor(text, context)
    return text
