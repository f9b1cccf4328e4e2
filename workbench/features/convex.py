"""Convex real-time backend for website projects."""

from __future__ import annotations

from ..config import Config
from ..errors import ExecutionError
from ..utils import console, print_warning
from .base import Feature, FeatureContext, persist, remove_directory

CONVEX_PACKAGE = "convex"
CONVEX_DIR = "convex"


class ConvexFeature(Feature):
    """Adds the ``convex`` package and owns the ``convex/`` functions directory."""

    @property
    def name(self) -> str:
        return "convex"

    @property
    def description(self) -> str:
        return "Convex real-time backend with functions and auth"

    def applies(self, config: Config) -> bool:
        return config.kind == "website"

    def apply(self, ctx: FeatureContext) -> None:
        if ctx.dry_run:
            console.print("Would add Convex to project:")
            console.print(f"  - Install {CONVEX_PACKAGE} package")
            return

        ctx.packages.add([CONVEX_PACKAGE], label="Installing convex")

        ctx.config.add_feature(self.name)
        persist(ctx)

        console.print()
        console.print("To complete Convex setup, run:")
        console.print("  [bold]convex dev[/bold]")

    def remove(self, ctx: FeatureContext) -> None:
        if ctx.dry_run:
            console.print("Would remove Convex from project:")
            console.print(f"  - Remove {CONVEX_DIR}/ directory")
            console.print(f"  - Uninstall {CONVEX_PACKAGE} package")
            return

        remove_directory(ctx.project_dir, CONVEX_DIR)

        try:
            ctx.packages.remove([CONVEX_PACKAGE], label="Removing convex package")
        except ExecutionError as exc:
            print_warning(f"Package removal for convex failed (ignored): {exc}")

        ctx.config.remove_feature(self.name)
        persist(ctx)
