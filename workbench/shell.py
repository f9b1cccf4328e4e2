"""Package-manager collaborator.

Wraps the ``pnpm`` CLI (or any binary with compatible ``add`` / ``add -D`` /
``remove`` subcommands).  Every call is a single blocking subprocess run in
the project directory; the spinner shown around it is presentation only.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .errors import ExecutionError
from .utils import print_debug, run_with_spinner


def run(
    args: Sequence[str],
    cwd: str | Path,
    env: dict[str, str] | None = None,
) -> str:
    """Run a command to completion and return its stripped stdout.

    Raises:
        ExecutionError: The binary is missing or the command exits non-zero.
            The error carries the command line and captured stderr.
    """
    cmd = list(args)
    cmd_str = " ".join(cmd)
    merged_env = {**os.environ, **env} if env else None
    print_debug(f"running: {cmd_str} (cwd={cwd})")

    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=merged_env,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ExecutionError(f"Command not found: {cmd[0]}", command=cmd_str) from exc
    except OSError as exc:
        raise ExecutionError(f"{cmd_str}: {exc}", command=cmd_str) from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        message = f"{cmd_str}: exit status {result.returncode}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise ExecutionError(message, command=cmd_str, stderr=stderr)

    return (result.stdout or "").strip()


class PackageManager:
    """Blocking ``add`` / ``remove`` calls against a JS package manager."""

    def __init__(self, project_dir: str | Path, binary: str = "pnpm") -> None:
        self.project_dir = Path(project_dir)
        self.binary = binary

    def add(self, packages: Sequence[str], *, dev: bool = False, label: str = "") -> None:
        """Install *packages* with one ``add`` call (``add -D`` when *dev*)."""
        if not packages:
            return
        args = [self.binary, "add"]
        if dev:
            args.append("-D")
        args.extend(packages)
        message = label or f"Installing {', '.join(packages)}"
        run_with_spinner(message, lambda: run(args, cwd=self.project_dir))

    def remove(self, packages: Sequence[str], *, label: str = "") -> None:
        """Uninstall *packages* with one ``remove`` call."""
        if not packages:
            return
        args = [self.binary, "remove", *packages]
        message = label or f"Removing {', '.join(packages)}"
        run_with_spinner(message, lambda: run(args, cwd=self.project_dir))
