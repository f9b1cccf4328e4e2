"""Template resolution and rendering for new projects.

Quick usage::

    from workbench.templates import RenderContext, TemplateResolver

    context = RenderContext.from_config(config)
    report = TemplateResolver().render_all(definition.templates, context, project_dir)
"""

from workbench.templates.context import (
    AgentsContext,
    IOSContext,
    RenderContext,
    TUIContext,
    WebsiteContext,
)
from workbench.templates.renderer import TemplateRenderer
from workbench.templates.resolver import RenderReport, TemplateResolver, resolve_templates

__all__ = [
    "AgentsContext",
    "IOSContext",
    "RenderContext",
    "RenderReport",
    "TUIContext",
    "TemplateRenderer",
    "TemplateResolver",
    "WebsiteContext",
    "resolve_templates",
]
