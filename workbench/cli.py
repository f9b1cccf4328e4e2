"""Command-line entry point for ``workbench``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.panel import Panel

from . import __version__
from .commands import (
    AppContext,
    add_feature,
    init_project,
    list_features,
    remove_feature,
    resolve_and_render,
)
from .config import KINDS, Config, Settings
from .errors import UnknownFeatureError, WorkbenchError
from .utils import console, print_error, print_feature_table, print_success, print_warning, set_verbose


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workbench",
        description="Workbench -- bootstrap and evolve projects from your catalog of kinds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  workbench init ./my-site --kind website --deployment cloudflare\n"
            "  workbench add convex --dry-run\n"
            "  workbench rm auth\n"
            "  workbench render\n"
        ),
    )
    parser.add_argument("--cwd", default=".", help="Project directory (default: .)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print diagnostic output")
    parser.add_argument("--version", action="version", version=f"workbench {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Create a new project")
    init.add_argument("path", nargs="?", default=".", help="Project path (default: .)")
    init.add_argument("--kind", required=True, choices=KINDS, help="Project type")
    init.add_argument("--deployment", default=None, help="Deployment target: cloudflare, railway")
    init.add_argument(
        "--feature", dest="features", action="append", default=[],
        help="Feature to enable (repeatable)",
    )
    init.add_argument("--templates", default=None, help="Upstream template ref (default: main)")
    init.add_argument("--no-install", action="store_true", help="Skip dependency installation")
    init.add_argument("--no-upstream", action="store_true", help="Skip the upstream website template")

    add = sub.add_parser("add", help="Add a feature to the project")
    add.add_argument("feature", help="Feature to add (e.g. convex)")
    add.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")

    rm = sub.add_parser("rm", help="Remove a feature from the project")
    rm.add_argument("feature", help="Feature to remove (e.g. convex)")
    rm.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")

    render = sub.add_parser("render", help="Re-render the project's templates")
    render.add_argument("--kind", default=None, help="Render another kind's templates")

    sub.add_parser("features", help="List features available for the project")
    return parser


def _cmd_init(app: AppContext, args: argparse.Namespace) -> None:
    config, report = init_project(
        app,
        args.path,
        args.kind,
        deployment=args.deployment,
        features=args.features,
        template_ref=args.templates,
        fetch_upstream=not args.no_upstream,
        install=not args.no_install,
    )
    console.print()
    print_success(f"Created {config.kind} project {config.name}")
    console.print(f"  Location: {Path(args.path).resolve()}")
    if report.failures:
        print_warning(f"{len(report.failures)} template(s) failed to render")
    steps = [f"cd {args.path}"] if args.path != "." else []
    steps += ["mise install", "mise run dev"]
    console.print(
        Panel(
            "\n".join(steps),
            title="Next steps",
            border_style="green",
            expand=False,
        )
    )


def _cmd_add(app: AppContext, args: argparse.Namespace) -> None:
    project_dir = Path(args.cwd)
    try:
        add_feature(app, project_dir, args.feature, dry_run=args.dry_run)
    except UnknownFeatureError:
        config = Config.load(project_dir)
        rows = [(f.name, f.description, on) for f, on in list_features(app, config)]
        if rows:
            print_feature_table(rows, title=f"Available features for {config.kind} projects")
        raise
    if args.dry_run:
        console.print("Dry run complete")
    else:
        print_success(f"Added {args.feature}")


def _cmd_rm(app: AppContext, args: argparse.Namespace) -> None:
    remove_feature(app, Path(args.cwd), args.feature, dry_run=args.dry_run)
    if args.dry_run:
        console.print("Dry run complete")
    else:
        print_success(f"Removed {args.feature}")


def _cmd_render(app: AppContext, args: argparse.Namespace) -> None:
    report = resolve_and_render(app, Path(args.cwd), kind=args.kind)
    print_success(f"Rendered {len(report.written)} file(s)")
    if report.failures:
        print_warning(f"{len(report.failures)} template(s) failed to render")


def _cmd_features(app: AppContext, args: argparse.Namespace) -> None:
    config = Config.load(Path(args.cwd))
    rows = [(f.name, f.description, on) for f, on in list_features(app, config)]
    if not rows:
        console.print(f"No features available for {config.kind} projects")
        return
    print_feature_table(rows, title=f"Features for {config.kind} projects")


_COMMANDS = {
    "init": _cmd_init,
    "add": _cmd_add,
    "rm": _cmd_rm,
    "render": _cmd_render,
    "features": _cmd_features,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``workbench`` and ``python -m workbench``."""
    args = _build_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.verbose:
        settings.verbose = True
    set_verbose(settings.verbose)

    app = AppContext.create(settings)
    try:
        _COMMANDS[args.command](app, args)
    except WorkbenchError as exc:
        print_error(f"Error: {exc}")
        return 1
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
