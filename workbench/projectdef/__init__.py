"""Declarative project-kind definitions.

Quick usage::

    from workbench.projectdef import DefinitionRegistry

    registry = DefinitionRegistry.load()
    website = registry.get("website")
    deps = website.dependencies.all_deps("cloudflare")
"""

from workbench.projectdef.models import (
    ConditionalDeps,
    Definition,
    Dependencies,
    FeatureRemove,
    FeatureSpec,
    ProjectInfo,
    Templates,
)
from workbench.projectdef.registry import DefinitionRegistry

__all__ = [
    "ConditionalDeps",
    "Definition",
    "DefinitionRegistry",
    "Dependencies",
    "FeatureRemove",
    "FeatureSpec",
    "ProjectInfo",
    "Templates",
]
