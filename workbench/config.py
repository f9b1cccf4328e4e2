"""Workbench project configuration.

Typed model of ``.workbench/config.jsonc`` plus the defaulting cascade that
keeps every persisted document self-consistent.  All sections use Pydantic v2
models with camelCase aliases so the on-disk keys match the documented file
format while Python code works with snake_case attributes.

Defaulting is *merge-fill*: a leaf is only written when it is empty (``None``
or ``""``).  Values a user has set, including explicit ``false``, survive
every load/save cycle.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ExecutionError,
    InvalidValueError,
    MissingFieldError,
)

CONFIG_DIR = ".workbench"
CONFIG_FILE = "config.jsonc"

SCHEMA_VERSION = "2"

KINDS: tuple[str, ...] = ("website", "tui", "ios", "monorepo")
DEPLOYMENT_TARGETS: tuple[str, ...] = ("cloudflare", "railway")


class _Section(BaseModel):
    """Base for every config section: camelCase on disk, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------


class ProjectConfig(_Section):
    """Canonical project metadata mirrored from the legacy top-level fields."""

    kind: str = ""
    name: str = ""
    template_ref: str | None = None


# ---------------------------------------------------------------------------
# Website
# ---------------------------------------------------------------------------


class ReactRouterConfig(_Section):
    future_flags: dict[str, bool] | None = None


class CloudflareLogsConfig(_Section):
    """Observability settings for Cloudflare Workers."""

    enabled: bool | None = None
    sampling: float | None = None
    invocation: bool | None = None
    persist: bool | None = None


class CloudflareConfig(_Section):
    compatibility_date: str | None = None
    compatibility_flags: list[str] | None = None
    workers_dev: bool | None = None
    assets_dir: str | None = None
    logs: CloudflareLogsConfig | None = None


class WebDeploymentConfig(_Section):
    """Deployment target plus target-specific sub-configuration."""

    target: str | None = None
    cloudflare: CloudflareConfig | None = None
    railway: dict[str, Any] | None = None


class WebsiteConfig(_Section):
    """Website-specific options (framework, rendering mode, deployment)."""

    framework: str | None = None
    rendering: str | None = None
    route_map: bool | None = None
    react_router: ReactRouterConfig = Field(default_factory=ReactRouterConfig)
    deployment: WebDeploymentConfig = Field(default_factory=WebDeploymentConfig)

    @field_validator("react_router", "deployment", mode="before")
    @classmethod
    def _null_section(cls, value: Any) -> Any:
        return {} if value is None else value


# ---------------------------------------------------------------------------
# Data / UI / tooling / agents
# ---------------------------------------------------------------------------


class DrizzleConfig(_Section):
    driver: str | None = None
    schema_path: str | None = None
    migrations_dir: str | None = None


class DataConfig(_Section):
    """Backend and storage choices."""

    backend: str | None = None
    drizzle: DrizzleConfig | None = None
    cloudflare: dict[str, Any] | None = None


class TailwindConfig(_Section):
    css_path: str | None = None
    base_color: str | None = None


class ShadcnConfig(_Section):
    style: str | None = None
    rsc: bool | None = None
    icon_library: str | None = None


class UIConfig(_Section):
    tailwind: TailwindConfig = Field(default_factory=TailwindConfig)
    shadcn: ShadcnConfig = Field(default_factory=ShadcnConfig)

    @field_validator("tailwind", "shadcn", mode="before")
    @classmethod
    def _null_section(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolingConfig(_Section):
    """Toolchain versions and formatter/linter choices."""

    node: str | None = None
    pnpm: str | None = None
    tasks: dict[str, Any] | None = None
    formatter: str | None = None
    linter: str | None = None


class AgentsConfig(_Section):
    """Controls synthesized agent documentation (AGENTS.md bundling)."""

    bundle: bool | None = None
    sources: list[str] | None = None
    output: str | None = None
    include_by_mode: dict[str, list[str]] | None = None


class TUIConfig(_Section):
    libs: list[str] | None = None


class IOSConfig(_Section):
    tuist: bool | None = None
    data_backend: str | None = None


# ---------------------------------------------------------------------------
# Literal defaults
# ---------------------------------------------------------------------------


def default_website_config() -> WebsiteConfig:
    """Return a fully-populated website section."""
    return WebsiteConfig(
        framework="react-router",
        rendering="ssr",
        route_map=True,
        react_router=ReactRouterConfig(
            future_flags={
                "v8_viteEnvironmentApi": True,
                "v8_middleware": True,
                "v8_splitRouteModules": True,
            }
        ),
        deployment=WebDeploymentConfig(
            target="cloudflare",
            cloudflare=CloudflareConfig(
                compatibility_date="2026-01-20",
                compatibility_flags=["nodejs_als"],
                workers_dev=True,
                assets_dir="./build/client",
                logs=CloudflareLogsConfig(
                    enabled=True,
                    sampling=1.0,
                    invocation=True,
                    persist=True,
                ),
            ),
        ),
    )


def default_data_config() -> DataConfig:
    return DataConfig(
        backend="drizzle",
        drizzle=DrizzleConfig(
            driver="sqlite",
            schema_path="./app/lib/db/schema.ts",
            migrations_dir="./drizzle/migrations",
        ),
    )


def default_ui_config() -> UIConfig:
    return UIConfig(
        tailwind=TailwindConfig(css_path="app/styles/app.css", base_color="neutral"),
        shadcn=ShadcnConfig(style="new-york", rsc=True, icon_library="lucide"),
    )


def default_tooling_config() -> ToolingConfig:
    return ToolingConfig(node="24", pnpm="latest", formatter="prettier", linter="oxlint")


def default_agents_config() -> AgentsConfig:
    return AgentsConfig(bundle=True, output="AGENTS.md")


def default_tui_config() -> TUIConfig:
    return TUIConfig(libs=["bubbletea", "bubbles", "lipgloss"])


def default_ios_config() -> IOSConfig:
    return IOSConfig(tuist=True, data_backend="sqlite")


# ---------------------------------------------------------------------------
# Merge-fill helpers
# ---------------------------------------------------------------------------


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _merge_fill(target: BaseModel, defaults: BaseModel) -> None:
    """Fill every empty leaf of *target* from *defaults*, recursing into sections."""
    for field_name in type(target).model_fields:
        current = getattr(target, field_name)
        default = getattr(defaults, field_name)
        if _is_empty(current):
            if default is not None:
                setattr(target, field_name, _clone(default))
        elif isinstance(current, BaseModel) and isinstance(default, BaseModel):
            _merge_fill(current, default)


def _clone(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    if isinstance(value, (list, dict)):
        return json.loads(json.dumps(value))
    return value


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if not _is_empty(value):
            return value
    return None


# ---------------------------------------------------------------------------
# JSONC
# ---------------------------------------------------------------------------


def strip_jsonc_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments from JSONC.

    Comment markers inside string literals (``"https://example.com"``) are
    left alone.  Newlines are preserved so JSON error positions still point
    at the right line.
    """
    out: list[str] = []
    i = 0
    length = len(text)
    in_string = False

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            block = text[i:] if end == -1 else text[i : end + 2]
            out.append("\n" * block.count("\n"))
            i = length if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1

    return "".join(out)


# ---------------------------------------------------------------------------
# Config document
# ---------------------------------------------------------------------------


def config_path(directory: str | Path) -> Path:
    """Return ``<directory>/.workbench/config.jsonc``."""
    return Path(directory) / CONFIG_DIR / CONFIG_FILE


def config_exists(directory: str | Path) -> bool:
    return config_path(directory).is_file()


class Config(_Section):
    """Versioned per-project configuration document.

    ``kind``, ``name`` and ``template_ref`` are legacy top-level fields kept
    for compatibility; the canonical values live under ``project``.  Both
    sides are reconciled by :meth:`apply_defaults` before every read and
    every write.
    """

    version: str = ""
    kind: str = ""
    name: str = ""
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    features: list[str] = Field(default_factory=list)
    template_ref: str | None = None

    website: WebsiteConfig | None = None
    data: DataConfig | None = None
    ui: UIConfig | None = None
    tooling: ToolingConfig | None = None
    agents: AgentsConfig | None = None
    tui: TUIConfig | None = None
    ios: IOSConfig | None = None

    # Used during init only; never persisted.
    path: str | None = Field(default=None, exclude=True)

    @field_validator("features", mode="before")
    @classmethod
    def _dedupe_features(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return list(dict.fromkeys(value))
        return value

    # -- Construction ------------------------------------------------------

    @classmethod
    def new(cls, name: str, kind: str) -> Config:
        """Create a fresh document for a new project, with defaults applied."""
        cfg = cls(
            version=SCHEMA_VERSION,
            kind=kind,
            name=name,
            project=ProjectConfig(kind=kind, name=name),
            features=[],
        )
        return cfg.apply_defaults()

    # -- Feature set -------------------------------------------------------

    def has_feature(self, name: str) -> bool:
        return name in self.features

    def add_feature(self, name: str) -> None:
        """Append *name* unless it is already enabled."""
        if not self.has_feature(name):
            self.features.append(name)

    def remove_feature(self, name: str) -> None:
        self.features = [f for f in self.features if f != name]

    @property
    def deployment_target(self) -> str:
        """The website deployment target, or ``""`` for non-website documents."""
        if self.website is None:
            return ""
        return self.website.deployment.target or ""

    # -- Defaulting cascade ------------------------------------------------

    def apply_defaults(self) -> Config:
        """Populate empty fields with literal defaults.  Idempotent.

        Steps, in order:

        1. default the schema version;
        2. reconcile legacy top-level fields with ``project.*``;
        3. materialize and merge-fill the sections relevant to ``kind``;
        4. default the ``agents`` section regardless of kind.
        """
        if _is_empty(self.version):
            self.version = SCHEMA_VERSION

        _reconcile_project_fields(self)

        if self.kind == "website":
            self.website = self.website or WebsiteConfig()
            if self.version == "1" and self.website.route_map is not True:
                self.website.route_map = True
            _apply_website_defaults(self.website)

            self.data = self.data or DataConfig()
            _merge_fill(self.data, default_data_config())
            self.ui = self.ui or UIConfig()
            _merge_fill(self.ui, default_ui_config())
            self.tooling = self.tooling or ToolingConfig()
            _merge_fill(self.tooling, default_tooling_config())
        elif self.kind == "tui":
            self.tui = self.tui or TUIConfig()
            _merge_fill(self.tui, default_tui_config())
        elif self.kind == "ios":
            self.ios = self.ios or IOSConfig()
            _merge_fill(self.ios, default_ios_config())
        elif self.kind == "monorepo":
            self.tooling = self.tooling or ToolingConfig()
            _merge_fill(self.tooling, default_tooling_config())

        self.agents = self.agents or AgentsConfig()
        _merge_fill(self.agents, default_agents_config())
        return self

    # -- Validation --------------------------------------------------------

    def validate_document(self) -> None:
        """Check required fields and enumerated values.

        Raises:
            MissingFieldError: ``version``, ``kind`` or ``name`` is empty.
            InvalidValueError: ``kind`` is unknown, or a website deployment
                target is set to something other than a known target.
        """
        self.apply_defaults()

        if _is_empty(self.version):
            raise MissingFieldError("version")
        if _is_empty(self.kind):
            raise MissingFieldError("kind")
        if self.kind not in KINDS:
            raise InvalidValueError("kind", self.kind, KINDS)
        if _is_empty(self.name):
            raise MissingFieldError("name")

        if self.kind == "website" and self.website is not None:
            target = self.website.deployment.target
            if not _is_empty(target) and target not in DEPLOYMENT_TARGETS:
                raise InvalidValueError("deployment", target, DEPLOYMENT_TARGETS)

    # -- Serialisation -----------------------------------------------------

    def to_json(self) -> str:
        """Serialise with stable key ordering (declaration order, camelCase)."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2) + "\n"

    def save(self, directory: str | Path) -> Path:
        """Apply defaults and write the document to ``.workbench/config.jsonc``.

        The write is not atomic: a crash mid-write can leave a truncated file.

        Returns:
            The path written.
        """
        self.apply_defaults()
        target = config_path(directory)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.to_json(), encoding="utf-8")
        except OSError as exc:
            raise ExecutionError(f"Writing config {target}: {exc}") from exc
        return target

    @classmethod
    def parse(cls, text: str, source: Path | None = None) -> Config:
        """Parse JSONC *text* into a defaulted document."""
        origin = source or Path("<string>")
        try:
            data = json.loads(strip_jsonc_comments(text))
        except json.JSONDecodeError as exc:
            raise ConfigParseError(origin, str(exc)) from exc
        try:
            cfg = cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigParseError(origin, str(exc)) from exc
        return cfg.apply_defaults()

    @classmethod
    def load(cls, directory: str | Path) -> Config:
        """Read, strip comments from, parse and default a project's config.

        Raises:
            ConfigNotFoundError: The config file does not exist.
            ConfigParseError: The file is not valid UTF-8 JSON or does not
                match the schema.
        """
        path = config_path(directory)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(path) from exc
        except UnicodeDecodeError as exc:
            raise ConfigParseError(path, str(exc)) from exc
        except OSError as exc:
            raise ExecutionError(f"Reading config {path}: {exc}") from exc
        return cls.parse(raw, source=path)


def load_config(directory: str | Path) -> Config:
    return Config.load(directory)


def save_config(directory: str | Path, config: Config) -> Path:
    return config.save(directory)


def validate_config(config: Config) -> None:
    config.validate_document()


def _reconcile_project_fields(cfg: Config) -> None:
    """Mirror legacy top-level fields and ``project.*``; first non-empty side wins."""
    kind = _first_non_empty(cfg.kind, cfg.project.kind) or ""
    cfg.kind = kind
    cfg.project.kind = kind

    name = _first_non_empty(cfg.name, cfg.project.name) or ""
    cfg.name = name
    cfg.project.name = name

    ref = _first_non_empty(cfg.template_ref, cfg.project.template_ref)
    cfg.template_ref = ref
    cfg.project.template_ref = ref


def _apply_website_defaults(website: WebsiteConfig) -> None:
    if _is_empty(website.deployment.target):
        website.deployment.target = "cloudflare"

    defaults = default_website_config()
    if website.deployment.target != "cloudflare":
        # Cloudflare options only materialize for the cloudflare target.
        defaults.deployment.cloudflare = None
    _merge_fill(website, defaults)


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------


def _default_cache_dir() -> Path:
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "workbench"


class Settings(BaseModel):
    """Process-level settings for the Workbench CLI itself.

    Instances are created once by the CLI entry point and passed through the
    :class:`~workbench.commands.AppContext`.
    """

    package_manager: str = Field(default="pnpm", description="Package-manager binary")
    cache_dir: Path = Field(default_factory=_default_cache_dir)
    template_ref: str = Field(default="main", description="Default upstream template ref")
    verbose: bool = Field(default=False)

    @classmethod
    def from_env(cls) -> Settings:
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            WB_PACKAGE_MANAGER, WB_CACHE_DIR, WB_TEMPLATE_REF, WB_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("WB_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["WB_PACKAGE_MANAGER"]
        if os.environ.get("WB_CACHE_DIR"):
            kwargs["cache_dir"] = Path(os.environ["WB_CACHE_DIR"])
        if os.environ.get("WB_TEMPLATE_REF"):
            kwargs["template_ref"] = os.environ["WB_TEMPLATE_REF"]
        verbose = os.environ.get("WB_VERBOSE", "").strip().lower()
        if verbose in ("1", "true", "yes", "on"):
            kwargs["verbose"] = True
        return cls(**kwargs)
