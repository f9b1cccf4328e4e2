"""Feature registry: native features plus features synthesized from definitions."""

from __future__ import annotations

from collections.abc import Iterable

from ..config import Config
from ..errors import NotApplicableError, UnknownFeatureError
from ..projectdef import DefinitionRegistry
from ..utils import print_debug
from .base import Feature, FeatureContext
from .convex import ConvexFeature
from .declarative import DeclarativeFeature


def native_features() -> tuple[Feature, ...]:
    """Return every hand-written feature."""
    return (ConvexFeature(),)


class FeatureRegistry:
    """Name-keyed collection of features with apply/remove dispatch."""

    def __init__(self) -> None:
        self._features: dict[str, Feature] = {}

    def register(self, feature: Feature) -> None:
        """Add *feature*, replacing any feature with the same name."""
        self._features[feature.name] = feature

    def claim(self, feature: Feature) -> bool:
        """Register *feature* only if its name slot is free.

        Returns:
            True if the feature was registered.
        """
        if feature.name in self._features:
            return False
        self._features[feature.name] = feature
        return True

    def get(self, name: str) -> Feature | None:
        return self._features.get(name)

    def require(self, name: str) -> Feature:
        """Return the feature called *name*.

        Raises:
            UnknownFeatureError: Nothing is registered under *name*.
        """
        feature = self._features.get(name)
        if feature is None:
            raise UnknownFeatureError(name)
        return feature

    def list(self) -> list[Feature]:
        """Return all registered features, sorted by name."""
        return sorted(self._features.values(), key=lambda f: f.name)

    def list_applicable(self, config: Config) -> list[Feature]:
        return [f for f in self.list() if f.applies(config)]

    def apply(self, name: str, ctx: FeatureContext) -> None:
        """Apply the feature called *name* to the project in *ctx*.

        Raises:
            UnknownFeatureError: No such feature.
            NotApplicableError: The feature does not support the project kind.
        """
        feature = self.require(name)
        if not feature.applies(ctx.config):
            raise NotApplicableError(name, ctx.config.kind)
        feature.apply(ctx)

    def remove(self, name: str, ctx: FeatureContext) -> None:
        """Remove the feature called *name*.

        Unlike :meth:`apply` there is no applicability check, so a feature
        can still be removed after the project's kind has changed.
        """
        self.require(name).remove(ctx)

    def __contains__(self, name: object) -> bool:
        return name in self._features

    def __len__(self) -> int:
        return len(self._features)


def build_registry(
    definitions: DefinitionRegistry,
    native: Iterable[Feature] | None = None,
) -> FeatureRegistry:
    """Build the feature registry in two phases.

    1. Register every native feature.
    2. Walk the definition kinds in lexicographic order and synthesize a
       :class:`DeclarativeFeature` for each ``[features.<name>]`` entry, but
       only into name slots that are still free.

    Native features therefore always win a name collision, and among
    declarative features the lexicographically first kind wins.  The
    registry is keyed by name alone while ``applies`` is kind-scoped, so a
    name declared by two kinds stays bound to the first kind even when the
    project belongs to the other one.
    """
    registry = FeatureRegistry()
    for feature in native_features() if native is None else native:
        registry.register(feature)

    for kind in sorted(definitions.list()):
        definition = definitions.get(kind)
        for name, spec in definition.features.items():
            if not registry.claim(DeclarativeFeature(name, kind, spec)):
                print_debug(f"feature {name} from {kind} shadowed by existing registration")
    return registry
