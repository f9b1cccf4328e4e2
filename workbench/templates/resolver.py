"""Resolve which templates apply to a project and materialize them.

Resolution starts from a definition's static destination map, layers each
enabled feature's conditional map on top, and drops the Cloudflare-only
``wrangler.jsonc`` unless the project deploys to Cloudflare.  Rendering is
best effort: a template that fails to render is reported and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import TemplateError

from ..errors import AdvisoryError
from ..projectdef import Templates
from ..utils import print_debug, print_warning
from .context import RenderContext
from .renderer import TemplateRenderer

CLOUDFLARE_ONLY_DESTINATION = "wrangler.jsonc"
CLOUDFLARE_TARGET = "cloudflare"


@dataclass
class RenderReport:
    """Outcome of a :meth:`TemplateResolver.render_all` run."""

    written: list[Path] = field(default_factory=list)
    failures: list[AdvisoryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def resolve_templates(templates: Templates, context: RenderContext) -> dict[str, str]:
    """Compute the final ``destination -> template id`` mapping.

    Feature maps are merged in the order features appear in
    ``context.features``; when two features declare the same destination the
    later-enabled feature wins.
    """
    resolved = dict(templates.static)
    for feature in context.features:
        overrides = templates.when.get(feature)
        if overrides:
            resolved.update(overrides)

    if context.deployment_target.lower() != CLOUDFLARE_TARGET:
        resolved.pop(CLOUDFLARE_ONLY_DESTINATION, None)
    return resolved


class TemplateResolver:
    """Resolves and renders a definition's templates into a project directory."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def resolve(self, templates: Templates, context: RenderContext) -> dict[str, str]:
        return resolve_templates(templates, context)

    def render_all(
        self,
        templates: Templates,
        context: RenderContext,
        project_dir: str | Path,
    ) -> RenderReport:
        """Render every resolved template under *project_dir*.

        Read, parse, render and write failures of a single template are
        advisory: they are printed, collected in the report, and the
        remaining templates are still rendered.
        """
        root = Path(project_dir)
        variables = context.as_template_vars()
        report = RenderReport()

        for destination, template_id in self.resolve(templates, context).items():
            target = root / destination
            try:
                self.renderer.render_to_file(template_id, target, variables)
            except (TemplateError, OSError, TypeError, ValueError) as exc:
                failure = AdvisoryError(template_id, destination, str(exc) or type(exc).__name__)
                print_warning(str(failure))
                report.failures.append(failure)
                continue
            report.written.append(target)
            print_debug(f"rendered {destination}")

        return report
