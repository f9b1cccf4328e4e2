"""Registry of project definitions loaded from TOML."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import ValidationError

from ..errors import UnknownKindError
from ..utils import print_debug, print_warning
from .models import Definition

_DEFAULT_DEFS_DIR = Path(__file__).parent / "defs"


class DefinitionRegistry:
    """Immutable index of :class:`Definition` objects keyed by project kind.

    Built once at process start by :meth:`load` and then passed by reference
    to every command.  Files that fail to parse are skipped with a warning;
    a broken definition therefore silently removes its kind from the
    registry.
    """

    def __init__(self, definitions: dict[str, Definition] | None = None) -> None:
        self._definitions: dict[str, Definition] = dict(definitions or {})

    @classmethod
    def load(cls, directory: str | Path | None = None) -> DefinitionRegistry:
        """Load every ``*.toml`` definition under *directory*.

        Args:
            directory: Definitions directory.  Defaults to the ``defs/``
                folder shipped with the package.
        """
        defs_dir = Path(directory) if directory is not None else _DEFAULT_DEFS_DIR
        registry = cls()
        if not defs_dir.is_dir():
            return registry

        for path in sorted(defs_dir.glob("*.toml")):
            definition = _parse_definition(path)
            if definition is None:
                continue
            registry._definitions[definition.kind] = definition
            print_debug(f"loaded definition {definition.kind} from {path.name}")
        return registry

    def get(self, kind: str) -> Definition:
        """Return the definition for *kind*.

        Raises:
            UnknownKindError: No definition declares that kind.
        """
        try:
            return self._definitions[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def list(self) -> list[str]:
        """Return every loaded kind, sorted."""
        return sorted(self._definitions)

    def __contains__(self, kind: object) -> bool:
        return kind in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def _parse_definition(path: Path) -> Definition | None:
    try:
        with path.open("rb") as fh:
            raw = tomllib.load(fh)
        definition = Definition.model_validate(raw)
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
        print_warning(f"Skipping project definition {path.name}: {exc}")
        return None

    if not definition.kind:
        print_warning(f"Skipping project definition {path.name}: project.kind is empty")
        return None
    return definition
