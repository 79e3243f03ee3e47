from quotebook.templates.base import RenderContext
from quotebook.templates.registry import (
    DEFAULT_TEMPLATE_ID,
    TEMPLATE_REGISTRY,
    Template,
    TemplateMetadata,
    all_templates,
    free_templates,
    get_template,
    has_template,
    premium_templates,
    render_document,
    require_template,
)

__all__ = [
    "DEFAULT_TEMPLATE_ID",
    "RenderContext",
    "TEMPLATE_REGISTRY",
    "Template",
    "TemplateMetadata",
    "all_templates",
    "free_templates",
    "get_template",
    "has_template",
    "premium_templates",
    "render_document",
    "require_template",
]
