"""Command implementations shared by the CLI.

Every command receives an :class:`AppContext` holding the process-wide
registries, built once at start-up and passed by reference.  Commands return
normally on success and raise a :class:`~workbench.errors.WorkbenchError`
subclass on any abort-class failure.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .config import Config, Settings, WebDeploymentConfig
from .errors import ExecutionError, NotApplicableError
from .features import Feature, FeatureContext, FeatureRegistry, build_registry
from .packagejson import apply_package_preferences
from .projectdef import DefinitionRegistry
from .shell import PackageManager
from .templates import RenderContext, RenderReport, TemplateResolver
from .upstream import copy_template, fetch_react_router_template, react_router_template_name
from .utils import print_debug, print_info


@dataclass
class AppContext:
    """Registries and collaborators shared by all commands in one process."""

    definitions: DefinitionRegistry
    features: FeatureRegistry
    resolver: TemplateResolver = field(default_factory=TemplateResolver)
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        definitions_dir: str | Path | None = None,
    ) -> AppContext:
        """Load definitions and build the feature registry."""
        definitions = DefinitionRegistry.load(definitions_dir)
        return cls(
            definitions=definitions,
            features=build_registry(definitions),
            settings=settings or Settings(),
        )

    def package_manager(self, project_dir: Path) -> PackageManager:
        return PackageManager(project_dir, binary=self.settings.package_manager)

    def feature_context(self, project_dir: Path, config: Config, dry_run: bool) -> FeatureContext:
        return FeatureContext(
            project_dir=project_dir,
            config=config,
            dry_run=dry_run,
            packages=self.package_manager(project_dir),
        )


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def add_feature(app: AppContext, project_dir: str | Path, name: str, dry_run: bool = False) -> Config:
    """Load the project's config and apply the feature called *name*.

    Returns:
        The (possibly mutated) config document.
    """
    root = Path(project_dir).resolve()
    config = Config.load(root)
    app.features.apply(name, app.feature_context(root, config, dry_run))
    return config


def remove_feature(app: AppContext, project_dir: str | Path, name: str, dry_run: bool = False) -> Config:
    """Load the project's config and remove the feature called *name*."""
    root = Path(project_dir).resolve()
    config = Config.load(root)
    app.features.remove(name, app.feature_context(root, config, dry_run))
    return config


def list_features(app: AppContext, config: Config) -> list[tuple[Feature, bool]]:
    """Return the features applicable to *config* with their installed flag."""
    return [(f, config.has_feature(f.name)) for f in app.features.list_applicable(config)]


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def resolve_and_render(
    app: AppContext,
    project_dir: str | Path,
    kind: str | None = None,
    config: Config | None = None,
) -> RenderReport:
    """Render the templates of the project's definition into *project_dir*.

    Args:
        kind: Render another kind's templates instead of the config's kind.
        config: Use this document instead of loading it from disk.
    """
    root = Path(project_dir).resolve()
    config = config or Config.load(root)
    definition = app.definitions.get(kind or config.kind)
    context = RenderContext.from_config(config)
    if kind:
        context.kind = kind
    return app.resolver.render_all(definition.templates, context, root)


# ---------------------------------------------------------------------------
# Init
# ---------------------------------------------------------------------------


def init_project(
    app: AppContext,
    path: str | Path,
    kind: str,
    *,
    deployment: str | None = None,
    features: Iterable[str] = (),
    template_ref: str | None = None,
    fetch_upstream: bool = True,
    install: bool = True,
) -> tuple[Config, RenderReport]:
    """Create a new project: config, upstream template, rendered files, deps.

    The project name is inferred from the directory name.  Requested feature
    names are checked against the feature registry and recorded in the config
    before rendering so their conditional templates are included; their
    packages are not installed here.  Website projects get Workbench package
    preferences merged into ``package.json`` before rendering.
    """
    root = Path(path).resolve()
    config = Config.new(root.name, kind)
    config.path = str(path)
    if config.website is not None and deployment:
        config.website.deployment = WebDeploymentConfig(target=deployment)
        config.apply_defaults()
    for name in features:
        if not app.features.require(name).applies(config):
            raise NotApplicableError(name, config.kind)
        config.add_feature(name)

    ref = template_ref or app.settings.template_ref
    config.template_ref = ref
    config.project.template_ref = ref

    config.validate_document()
    app.definitions.get(config.kind)

    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExecutionError(f"Creating directory {root}: {exc}") from exc
    saved = config.save(root)
    print_debug(f"saved config {saved}")

    if config.kind == "website" and fetch_upstream:
        template = react_router_template_name(config)
        refresh = ref.lower() in ("main", "latest")
        upstream = fetch_react_router_template(
            ref, template, app.settings.cache_dir, refresh=refresh
        )
        copy_template(upstream, root)
        print_info(f"Fetched upstream template [bold]{template}[/bold] ({ref})")

    apply_package_preferences(root, config)

    report = resolve_and_render(app, root, config=config)

    if install:
        install_dependencies(app, root, config)

    return config, report


def install_dependencies(app: AppContext, project_dir: Path, config: Config) -> None:
    """Install the definition's dependencies, tagged by deployment target."""
    definition = app.definitions.get(config.kind)
    tags = [config.deployment_target] if config.deployment_target else []
    packages = app.package_manager(project_dir)
    runtime = definition.dependencies.all_deps(*tags)
    dev = definition.dependencies.all_dev_deps(*tags)
    if runtime:
        packages.add(runtime, label="Installing dependencies")
    if dev:
        packages.add(dev, dev=True, label="Installing dev dependencies")
