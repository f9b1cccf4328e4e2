"""Exception hierarchy for Workbench.

Every error raised by the engine derives from :class:`WorkbenchError` so the
CLI can turn any abort-class failure into a non-zero exit.  Categories:

* :class:`NotFoundError` -- config file, project definition, or feature absent.
* :class:`ConfigValidationError` -- malformed or invalid configuration values.
* :class:`NotApplicableError` -- a feature does not apply to the project kind.
* :class:`ExecutionError` -- a subprocess or file-system operation failed.
* :class:`AdvisoryError` -- a single template failed to render; collected and
  reported, never raised out of the resolver.
"""

from __future__ import annotations

from pathlib import Path


class WorkbenchError(Exception):
    """Base class for every Workbench error."""


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class NotFoundError(WorkbenchError):
    """Raised when a config, definition, or feature cannot be located."""


class ConfigNotFoundError(NotFoundError):
    """Raised when ``.workbench/config.jsonc`` does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config not found: {path}")


class UnknownKindError(NotFoundError):
    """Raised when no project definition is registered for a kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown project kind: {kind}")


class UnknownFeatureError(NotFoundError):
    """Raised when a feature name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown feature: {name}")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ConfigValidationError(WorkbenchError):
    """Raised when configuration content is malformed or holds a bad value."""


class ConfigParseError(ConfigValidationError):
    """Raised when the config file cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Parsing config {path}: {reason}")


class MissingFieldError(ConfigValidationError):
    """Raised when a required config field is empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Config {field} is required")


class InvalidValueError(ConfigValidationError):
    """Raised when a config field holds a value outside its allowed set."""

    def __init__(self, field: str, value: str, allowed: tuple[str, ...]) -> None:
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid {field}: {value} (must be one of {', '.join(allowed)})"
        )


# ---------------------------------------------------------------------------
# Applicability / execution / advisory
# ---------------------------------------------------------------------------


class NotApplicableError(WorkbenchError):
    """Raised when a feature is applied to a project kind it does not support."""

    def __init__(self, feature: str, kind: str) -> None:
        self.feature = feature
        self.kind = kind
        super().__init__(f"Feature {feature} does not apply to {kind or 'untyped'} projects")


class ExecutionError(WorkbenchError):
    """Raised when a subprocess or file-system operation fails."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class AdvisoryError(WorkbenchError):
    """A non-fatal failure to render one template."""

    def __init__(self, template: str, destination: str, reason: str) -> None:
        self.template = template
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to render {template} -> {destination}: {reason}")
