"""Base classes and types for the feature system.

Features are optional units of functionality that can be added to or
removed from a project via ``workbench add <name>`` / ``workbench rm <name>``.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..config import Config
from ..errors import ExecutionError
from ..shell import PackageManager


@dataclass
class FeatureContext:
    """Per-invocation state handed to :meth:`Feature.apply` / :meth:`Feature.remove`.

    Attributes:
        project_dir: Project root directory.
        config: The live configuration document; features mutate it in place.
        dry_run: When set, features only print what they would do.
        packages: Package-manager collaborator bound to ``project_dir``.
    """

    project_dir: Path
    config: Config
    dry_run: bool = False
    packages: PackageManager | None = None

    def __post_init__(self) -> None:
        self.project_dir = Path(self.project_dir)
        if self.packages is None:
            self.packages = PackageManager(self.project_dir)


class Feature(ABC):
    """Abstract base class for Workbench features.

    Each feature must implement:
    - name: CLI-facing identifier
    - description: Short description for help text
    - applies(): Whether the feature supports a project's kind
    - apply(): Add the feature to a project
    - remove(): Remove the feature from a project

    Both ``apply`` and ``remove`` must honour ``ctx.dry_run``: print an
    intention summary and perform no file writes, subprocess calls or config
    persistence.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """CLI-facing identifier (e.g. ``"convex"``)."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @abstractmethod
    def applies(self, config: Config) -> bool:
        """Return True if this feature can be added to *config*'s project."""
        ...

    @abstractmethod
    def apply(self, ctx: FeatureContext) -> None:
        ...

    @abstractmethod
    def remove(self, ctx: FeatureContext) -> None:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def remove_directory(project_dir: Path, relative: str) -> bool:
    """Delete ``project_dir / relative`` recursively.

    A missing directory is not an error, so repeated removals succeed.

    Returns:
        True if something was deleted.

    Raises:
        ExecutionError: The directory exists but could not be deleted.
    """
    target = project_dir / relative
    if not target.exists():
        return False
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
    except OSError as exc:
        raise ExecutionError(f"Removing {relative} directory: {exc}") from exc
    return True


def persist(ctx: FeatureContext) -> None:
    """Save the live config back to the project directory."""
    ctx.config.save(ctx.project_dir)
