"""Features synthesized from project-definition TOML.

A :class:`DeclarativeFeature` is a thin adapter over one
``[features.<name>]`` table of a project definition.  It holds no state
beyond its ``FeatureSpec`` and the kind that declared it.
"""

from __future__ import annotations

from ..config import Config
from ..errors import ExecutionError
from ..projectdef import FeatureSpec
from ..utils import console, print_warning
from .base import Feature, FeatureContext, persist, remove_directory


class DeclarativeFeature(Feature):
    """Feature whose lifecycle is fully described by definition data."""

    def __init__(self, name: str, kind: str, spec: FeatureSpec) -> None:
        self._name = name
        self.kind = kind
        self.spec = spec

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self.spec.description

    def applies(self, config: Config) -> bool:
        return config.kind == self.kind

    # -- Apply -------------------------------------------------------------

    def apply(self, ctx: FeatureContext) -> None:
        """Install packages, then record the feature and persist the config.

        Runtime packages are installed before dev packages, each with one
        package-manager call.  An install failure propagates before the
        config is touched.
        """
        spec = self.spec
        if ctx.dry_run:
            console.print(f"Would add feature [bold]{self.name}[/bold]")
            if spec.packages:
                console.print(f"  - Install packages: {', '.join(spec.packages)}")
            if spec.dev_packages:
                console.print(f"  - Install dev packages: {', '.join(spec.dev_packages)}")
            return

        if spec.packages:
            ctx.packages.add(spec.packages, label=f"Installing {self.name}")
        if spec.dev_packages:
            ctx.packages.add(
                spec.dev_packages,
                dev=True,
                label=f"Installing dev dependencies for {self.name}",
            )

        ctx.config.add_feature(self.name)
        persist(ctx)

        if spec.post_message:
            console.print()
            console.print(spec.post_message, markup=False)

    # -- Remove ------------------------------------------------------------

    def remove(self, ctx: FeatureContext) -> None:
        """Delete directories, uninstall packages, then unregister the feature.

        Directory removal is fail-fast and always precedes package removal
        and config persistence.  Package removal is best effort: the packages
        may already be gone.
        """
        removal = self.spec.remove
        if ctx.dry_run:
            console.print(f"Would remove feature [bold]{self.name}[/bold]")
            if removal.directories:
                console.print(f"  - Remove directories: {', '.join(removal.directories)}")
            if removal.packages:
                console.print(f"  - Uninstall packages: {', '.join(removal.packages)}")
            if removal.dev_packages:
                console.print(f"  - Uninstall dev packages: {', '.join(removal.dev_packages)}")
            return

        for directory in removal.directories:
            remove_directory(ctx.project_dir, directory)

        all_packages = [*removal.packages, *removal.dev_packages]
        if all_packages:
            try:
                ctx.packages.remove(all_packages, label=f"Removing {self.name}")
            except ExecutionError as exc:
                print_warning(f"Package removal for {self.name} failed (ignored): {exc}")

        ctx.config.remove_feature(self.name)
        persist(ctx)
