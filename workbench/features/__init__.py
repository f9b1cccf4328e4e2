"""Optional project features with an apply/remove lifecycle.

Quick usage::

    from workbench.features import FeatureContext, build_registry
    from workbench.projectdef import DefinitionRegistry

    features = build_registry(DefinitionRegistry.load())
    features.apply("convex", FeatureContext(project_dir=path, config=cfg))
"""

from workbench.features.base import Feature, FeatureContext
from workbench.features.convex import ConvexFeature
from workbench.features.declarative import DeclarativeFeature
from workbench.features.registry import FeatureRegistry, build_registry, native_features

__all__ = [
    "ConvexFeature",
    "DeclarativeFeature",
    "Feature",
    "FeatureContext",
    "FeatureRegistry",
    "build_registry",
    "native_features",
]
