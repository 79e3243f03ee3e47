"""Registry of document templates available for rendering."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from quotebook.exceptions import TemplateNotFoundError
from quotebook.templates.base import RenderContext
from quotebook.templates.classic import render_classic
from quotebook.templates.modern import render_modern

DEFAULT_TEMPLATE_ID = "classic"

Renderer = Callable[[RenderContext], bytes]


@dataclass(frozen=True)
class TemplateMetadata:
    id: str
    name: str
    description: str
    preview: str
    is_premium: bool = False
    tier: str = "FREE"
    category: str | None = None
    features: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Template:
    metadata: TemplateMetadata
    render: Renderer

    @property
    def id(self) -> str:
        return self.metadata.id


TEMPLATE_REGISTRY: dict[str, Template] = {
    "classic": Template(
        metadata=TemplateMetadata(
            id="classic",
            name="Classic",
            description="Traditional professional layout with clean design",
            preview="/templates/classic-preview.png",
            features=("Ruled item table", "Brand color accents"),
        ),
        render=render_classic,
    ),
    "modern": Template(
        metadata=TemplateMetadata(
            id="modern",
            name="Modern",
            description="Contemporary design with a brand banner and card-based layout",
            preview="/templates/modern-preview.png",
            features=("Brand color banner", "Card summary blocks"),
        ),
        render=render_modern,
    ),
}


def has_template(template_id: str) -> bool:
    return template_id in TEMPLATE_REGISTRY


def get_template(template_id: str | None) -> Template:
    """Return the template for ``template_id``, falling back to the default."""
    if template_id and template_id in TEMPLATE_REGISTRY:
        return TEMPLATE_REGISTRY[template_id]
    return TEMPLATE_REGISTRY[DEFAULT_TEMPLATE_ID]


def require_template(template_id: str) -> Template:
    """Strict lookup used when a caller selects a template explicitly.

    Raises:
        TemplateNotFoundError: If no template is registered under the id.
    """
    try:
        return TEMPLATE_REGISTRY[template_id]
    except KeyError:
        raise TemplateNotFoundError(template_id) from None


def all_templates() -> list[Template]:
    return list(TEMPLATE_REGISTRY.values())


def free_templates() -> list[Template]:
    return [t for t in TEMPLATE_REGISTRY.values() if not t.metadata.is_premium]


def premium_templates() -> list[Template]:
    return [t for t in TEMPLATE_REGISTRY.values() if t.metadata.is_premium]


def render_document(context: RenderContext, template_id: str | None = None) -> bytes:
    """Render with ``template_id`` or, when omitted, the selected template."""
    template = get_template(template_id or context.settings.selected_template_id)
    return template.render(context)
