"""
pagegen.template - Wiki Page Templates

Scanner and renderer for ``{{{key}}}`` placeholder templates.
"""

from pagegen.template.scanner import (
    Literal,
    Placeholder,
    Scanner,
    TemplateLine,
    scan,
)
from pagegen.template.renderer import (
    Template,
    TemplateError,
    is_empty_value,
    render_aggregate,
    render_fragment,
    render_page,
)

__all__ = [
    # Scanner
    "Literal",
    "Placeholder",
    "Scanner",
    "TemplateLine",
    "scan",
    # Renderer
    "Template",
    "TemplateError",
    "is_empty_value",
    "render_aggregate",
    "render_fragment",
    "render_page",
]
