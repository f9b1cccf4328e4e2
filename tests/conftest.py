"""Shared pytest fixtures for the Workbench test suite.

Provides reusable fixtures for:
- Temporary project directories with a saved config
- A throwaway definitions directory with a ``demo`` kind
- A mocked package manager that records calls instead of running pnpm
- Directory snapshots for dry-run assertions
"""

from __future__ import annotations

import hashlib
import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from workbench.config import Config
from workbench.features import FeatureContext
from workbench.projectdef import DefinitionRegistry
from workbench.shell import PackageManager


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for a project (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def website_project(tmp_project_dir: Path) -> Path:
    """A project directory holding a saved website config."""
    Config.new("test-project", "website").save(tmp_project_dir)
    return tmp_project_dir


@pytest.fixture
def demo_project(tmp_project_dir: Path) -> Path:
    """A project directory holding a saved config of kind ``demo``."""
    Config.new("demo-app", "demo").save(tmp_project_dir)
    return tmp_project_dir


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

DEMO_DEFINITION = textwrap.dedent(
    """\
    [project]
    kind = "demo"
    description = "Demo project"

    [dependencies]
    runtime = ["base-runtime"]
    dev = ["base-dev"]

    [dependencies.when.cloudflare]
    runtime = ["cf-runtime"]
    dev = ["cf-dev"]

    [templates]
    "README.md" = "readme.j2"

    [templates.when.x]
    "x.txt" = "x.j2"

    [features.x]
    description = "Feature x"
    packages = ["pkgA"]

    [features.x.remove]
    packages = ["pkgA"]
    directories = ["xdir"]
    """
)


@pytest.fixture
def defs_dir(tmp_path: Path) -> Path:
    """Definitions directory containing only ``demo.toml``."""
    directory = tmp_path / "defs"
    directory.mkdir()
    (directory / "demo.toml").write_text(DEMO_DEFINITION, encoding="utf-8")
    return directory


@pytest.fixture
def demo_definitions(defs_dir: Path) -> DefinitionRegistry:
    return DefinitionRegistry.load(defs_dir)


@pytest.fixture
def builtin_definitions() -> DefinitionRegistry:
    """Definitions shipped with the package."""
    return DefinitionRegistry.load()


# ---------------------------------------------------------------------------
# Mock package manager
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_packages() -> MagicMock:
    """A ``PackageManager`` double that records add/remove calls."""
    return MagicMock(spec=PackageManager)


@pytest.fixture
def make_ctx(mock_packages: MagicMock):
    """Factory building a ``FeatureContext`` for a project directory."""

    def _make(project_dir: Path, dry_run: bool = False) -> FeatureContext:
        return FeatureContext(
            project_dir=project_dir,
            config=Config.load(project_dir),
            dry_run=dry_run,
            packages=mock_packages,
        )

    return _make


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

def snapshot_tree(root: Path) -> dict[str, str]:
    """Map every path under *root* to a content hash ("dir" for directories)."""
    snapshot: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if path.is_dir():
            snapshot[rel] = "dir"
        else:
            snapshot[rel] = hashlib.sha256(path.read_bytes()).hexdigest()
    return snapshot


@pytest.fixture
def snapshot():
    return snapshot_tree
