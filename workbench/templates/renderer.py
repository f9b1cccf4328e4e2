"""Jinja2 template rendering for project bootstrapping.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``workbench/templates/bootstrap/`` directory and renders them with a
project's render context.  Template ids are paths relative to that directory
(e.g. ``"website/wrangler.jsonc.j2"``), exactly as referenced by the
``[templates]`` tables of the project definitions.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "bootstrap"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders bootstrap templates with a small helper vocabulary.

    Besides Jinja2's built-in ``lower``, ``upper``, ``title``, ``trim``,
    ``join``, ``first``, ``last`` and ``default`` filters and its
    ``and``/``or``/``not`` operators, templates can use:

    * case conversion: ``slugify``, ``pascal_case``, ``snake_case``,
      ``camel_case``;
    * predicates: ``contains``, ``has_prefix``, ``has_suffix``;
    * ``split``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Register custom filters
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["camel_case"] = _camel_case_filter
        self.env.filters["contains"] = _contains_filter
        self.env.filters["has_prefix"] = _has_prefix_filter
        self.env.filters["has_suffix"] = _has_suffix_filter
        self.env.filters["split"] = _split_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_id: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_id: Path relative to the template directory.
            context: Variables available inside the template.

        Returns:
            The rendered content.
        """
        template = self.env.get_template(template_id)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def render_to_file(
        self,
        template_id: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_id, context)
        out = Path(output_path)
        _write_file(out, content)
        return out

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template ids under *prefix*."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def _contains_filter(value: Any, needle: Any) -> bool:
    if value is None:
        return False
    return needle in value


def _has_prefix_filter(value: str | None, prefix: str) -> bool:
    return value is not None and str(value).startswith(prefix)


def _has_suffix_filter(value: str | None, suffix: str) -> bool:
    return value is not None and str(value).endswith(suffix)


def _split_filter(value: str, sep: str | None = None) -> list[str]:
    return str(value).split(sep)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
