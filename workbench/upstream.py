"""Upstream React Router templates for website projects.

Website projects start from one of the official
``remix-run/react-router-templates`` directories.  The repository tarball is
downloaded from codeload, unpacked into the user cache, and the selected
template directory is copied into the new project before Workbench renders
its own templates on top.
"""

from __future__ import annotations

import io
import shutil
import tarfile
from pathlib import Path

import httpx

from .config import Config
from .errors import ExecutionError
from .utils import print_debug

REACT_ROUTER_REPO = "remix-run/react-router-templates"
CODELOAD_URL = "https://codeload.github.com/{repo}/tar.gz/{ref}"

_SKIPPED_DIRS = {".git", ".github"}


def react_router_template_name(config: Config) -> str:
    """Pick the upstream template matching the deployment target."""
    if config.deployment_target.lower() == "cloudflare":
        return "cloudflare"
    return "default"


def template_cache_dir(cache_root: Path, ref: str) -> Path:
    return cache_root / "templates" / "react-router" / ref


def fetch_react_router_template(
    ref: str,
    template: str,
    cache_root: Path,
    *,
    refresh: bool = False,
    client: httpx.Client | None = None,
) -> Path:
    """Return the path of *template* inside the cached upstream archive.

    Args:
        ref: Git ref of the templates repository.  ``""`` and ``"latest"``
            mean ``main`` and always refresh.
        template: Template directory name (``"cloudflare"``, ``"default"``).
        cache_root: Root of the Workbench cache directory.
        refresh: Re-download even when a cached copy exists.
        client: Optional preconfigured ``httpx.Client``.

    Raises:
        ExecutionError: Download, extraction, or lookup failed.
    """
    if not ref or ref.lower() == "latest":
        ref = "main"
        refresh = True

    cache_dir = template_cache_dir(cache_root, ref)
    if not refresh:
        cached = _find_template_dir(cache_dir, template)
        if cached is not None:
            print_debug(f"using cached template {cached}")
            return cached

    if refresh and cache_dir.exists():
        shutil.rmtree(cache_dir, ignore_errors=True)
    cache_dir.mkdir(parents=True, exist_ok=True)

    url = CODELOAD_URL.format(repo=REACT_ROUTER_REPO, ref=ref)
    print_debug(f"downloading {url}")
    own_client = client is None
    http = client or httpx.Client(timeout=httpx.Timeout(60.0, connect=10.0), follow_redirects=True)
    try:
        response = http.get(url)
    except httpx.HTTPError as exc:
        raise ExecutionError(f"Downloading templates: {exc}", command=f"GET {url}") from exc
    finally:
        if own_client:
            http.close()

    if response.status_code != 200:
        raise ExecutionError(
            f"Download failed: HTTP {response.status_code}",
            command=f"GET {url}",
        )

    root = _extract_tarball(response.content, cache_dir)
    template_path = root / template
    if not template_path.is_dir():
        raise ExecutionError(f"Template {template} not found in upstream archive ({ref})")
    return template_path


def copy_template(src: Path, dst: Path) -> list[Path]:
    """Copy an upstream template into *dst*, skipping git metadata.

    Returns:
        Destination paths of the copied files.
    """
    copied: list[Path] = []
    try:
        for path in sorted(src.rglob("*")):
            rel = path.relative_to(src)
            if any(part in _SKIPPED_DIRS for part in rel.parts):
                continue
            target = dst / rel
            if path.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            copied.append(target)
    except OSError as exc:
        raise ExecutionError(f"Copying upstream template: {exc}") from exc
    return copied


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_template_dir(base: Path, template: str) -> Path | None:
    if not base.is_dir():
        return None
    for entry in sorted(base.iterdir()):
        candidate = entry / template
        if entry.is_dir() and candidate.is_dir():
            return candidate
    return None


def _extract_tarball(data: bytes, dest: Path) -> Path:
    """Unpack a gzipped tarball into *dest* and return its top-level directory."""
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            members = archive.getmembers()
            if not members:
                raise ExecutionError("No root directory found in archive")
            root = members[0].name.split("/", 1)[0]
            archive.extractall(dest, filter="data")
    except (tarfile.TarError, OSError) as exc:
        raise ExecutionError(f"Extracting templates: {exc}") from exc
    return dest / root
