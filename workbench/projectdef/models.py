"""Pydantic models for declarative project-kind definitions.

Each ``defs/<kind>.toml`` file describes one project kind: its dependency
lists, the templates rendered into a new project, and the optional features
that can later be added or removed.  Definitions are immutable once loaded.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ProjectInfo(_Frozen):
    kind: str = ""
    description: str = ""


class ConditionalDeps(_Frozen):
    """Dependencies added when a condition tag is active."""

    runtime: list[str] = Field(default_factory=list)
    dev: list[str] = Field(default_factory=list)


class Dependencies(_Frozen):
    """Unconditional package lists plus tag-gated extras.

    The ``when`` map is keyed by condition tag, typically a deployment target
    such as ``cloudflare``.
    """

    runtime: list[str] = Field(default_factory=list)
    dev: list[str] = Field(default_factory=list)
    when: dict[str, ConditionalDeps] = Field(default_factory=dict)

    def all_deps(self, *tags: str) -> list[str]:
        """Return runtime deps plus those of every matching tag, in call order.

        Entries are not de-duplicated.
        """
        deps = list(self.runtime)
        for tag in tags:
            extra = self.when.get(tag)
            if extra is not None:
                deps.extend(extra.runtime)
        return deps

    def all_dev_deps(self, *tags: str) -> list[str]:
        """Return dev deps plus those of every matching tag, in call order."""
        deps = list(self.dev)
        for tag in tags:
            extra = self.when.get(tag)
            if extra is not None:
                deps.extend(extra.dev)
        return deps


class Templates(_Frozen):
    """Destination -> template-id mappings.

    In TOML the static entries sit directly under ``[templates]`` while the
    feature-gated maps live under ``[templates.when.<feature>]``, so a
    destination literally named ``when`` cannot be declared.
    """

    static: dict[str, str] = Field(default_factory=dict)
    when: dict[str, dict[str, str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_static(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "static" in data:
            return data
        when = data.get("when", {})
        static = {k: v for k, v in data.items() if k != "when"}
        return {"static": static, "when": when}


class FeatureRemove(_Frozen):
    """What to tear down when a feature is removed."""

    packages: list[str] = Field(default_factory=list)
    dev_packages: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)


class FeatureSpec(_Frozen):
    """An optional feature declared by a project definition."""

    description: str = ""
    packages: list[str] = Field(default_factory=list)
    dev_packages: list[str] = Field(default_factory=list)
    post_message: str = ""
    remove: FeatureRemove = Field(default_factory=FeatureRemove)


class Definition(_Frozen):
    """A complete project-kind definition."""

    project: ProjectInfo = Field(default_factory=ProjectInfo)
    dependencies: Dependencies = Field(default_factory=Dependencies)
    templates: Templates = Field(default_factory=Templates)
    features: dict[str, FeatureSpec] = Field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.project.kind

    @property
    def description(self) -> str:
        return self.project.description
