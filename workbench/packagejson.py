"""Workbench preferences merged into a website project's ``package.json``.

The upstream React Router template ships its own ``package.json``.  After it
is copied, Workbench takes ownership of the package identity, the npm scripts
and the pinned versions of the base stack, while leaving any other upstream
keys in place.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .config import Config
from .errors import ExecutionError
from .utils import print_debug, print_warning, sanitize_name

PACKAGE_FILE = "package.json"

REACT_ROUTER_VERSION = "7.12.0"
VITE_VERSION = "8.0.0-beta.8"
ROUTE_MAP_PACKAGE = "@withsprinkles/react-router-route-map"

BASE_RUNTIME_DEPS: dict[str, str] = {
    "isbot": "^5.1.31",
    "react": "^19.2.3",
    "react-dom": "^19.2.3",
    "react-router": REACT_ROUTER_VERSION,
    "cva": "1.0.0-beta.4",
    "react-concurrent-store": "^0.0.1",
    "drizzle-orm": "^0.44.6",
    "drizzle-zod": "^0.8.3",
    "zod": "^4.1.13",
    ROUTE_MAP_PACKAGE: "^0.1.0",
}

BASE_DEV_DEPS: dict[str, str] = {
    "@babel/core": "^7.26.7",
    "@babel/preset-typescript": "^7.26.0",
    "@prettier/plugin-oxc": "^0.1.3",
    "@react-router/dev": REACT_ROUTER_VERSION,
    "@tailwindcss/vite": "^4.1.13",
    "@types/node": "^24.10.1",
    "@types/react": "^19.2.7",
    "@types/react-dom": "^19.2.3",
    "drizzle-kit": "^0.31.5",
    "oxlint": "^1.41.0",
    "prettier": "^3.8.0",
    "prettier-plugin-pkg": "^0.21.2",
    "prettier-plugin-sh": "^0.18.0",
    "prettier-plugin-sort-imports": "^1.8.9",
    "prettier-plugin-tailwindcss": "^0.7.2",
    "prettier-plugin-toml": "^2.0.6",
    "tailwindcss": "^4.1.13",
    "typescript": "^5.9.2",
    "babel-plugin-react-compiler": "^1.0.0",
    "vite": VITE_VERSION,
    "vite-plugin-babel": "^1.4.1",
    "vite-plugin-devtools-json": "1.0.0",
}

CLOUDFLARE_DEV_DEPS: dict[str, str] = {
    "@cloudflare/vite-plugin": "^1.13.11",
    "wrangler": "^4.42.1",
}

# Node server packages; the Cloudflare template runs on workers instead.
NODE_SERVER_DEPS: dict[str, str] = {
    "@react-router/node": REACT_ROUTER_VERSION,
    "@react-router/serve": REACT_ROUTER_VERSION,
}

COMMON_SCRIPTS: dict[str, str] = {
    "typecheck": "react-router typegen && tsc",
    "lint": "oxlint",
    "fmt": "prettier --write .",
    "fix": "pnpm fmt && pnpm lint",
}

CLOUDFLARE_SCRIPTS: dict[str, str] = {
    "dev": "react-router dev",
    "build": "react-router build",
    "preview": "npm run build && vite preview",
    "deploy": "npm run build && wrangler deploy",
    "cf-typegen": "wrangler types",
    "typecheck": "npm run cf-typegen && react-router typegen && tsc -b",
    "postinstall": "npm run cf-typegen",
}

DEFAULT_SCRIPTS: dict[str, str] = {
    "build": "react-router build",
    "dev": "react-router dev",
    "start": "react-router-serve ./build/server/index.js",
    "preview": "npm run build && vite preview",
}


def _string_map(pkg: dict[str, Any], key: str) -> dict[str, str]:
    """Return ``pkg[key]`` as a string map, dropping non-string values."""
    raw = pkg.get(key)
    if not isinstance(raw, dict):
        return {}
    return {k: v for k, v in raw.items() if isinstance(v, str)}


def _read_package(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ExecutionError(f"Reading {path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        print_warning(f"Ignoring unreadable {path.name}: {exc}")
        return {}
    if not isinstance(data, dict):
        print_warning(f"Ignoring {path.name}: top level is not an object")
        return {}
    return data


def merge_scripts(scripts: dict[str, str], target: str) -> dict[str, str]:
    """Overlay the common scripts and the deployment-specific scripts."""
    scripts.update(COMMON_SCRIPTS)
    if target == "cloudflare":
        scripts.update(CLOUDFLARE_SCRIPTS)
    else:
        scripts.update(DEFAULT_SCRIPTS)
    return scripts


def merge_dependencies(
    deps: dict[str, str],
    dev_deps: dict[str, str],
    target: str,
    route_map: bool,
) -> None:
    """Pin the base stack and add the packages the deployment target needs."""
    deps.update(BASE_RUNTIME_DEPS)
    if not route_map:
        deps.pop(ROUTE_MAP_PACKAGE, None)
    dev_deps.update(BASE_DEV_DEPS)

    if target == "cloudflare":
        dev_deps.update(CLOUDFLARE_DEV_DEPS)
        for name in NODE_SERVER_DEPS:
            deps.pop(name, None)
    else:
        deps.update(NODE_SERVER_DEPS)


def apply_package_preferences(project_dir: str | Path, config: Config) -> Path | None:
    """Merge Workbench defaults into the project's ``package.json``.

    A missing or unparseable file is replaced by a fresh document.  Keys the
    merge does not own are kept as they were.  Non-website projects are left
    alone.

    Returns:
        The path written, or ``None`` when *config* is not a website.

    Raises:
        ExecutionError: The file cannot be read or written.
    """
    if config.kind.lower() != "website" or config.website is None:
        return None

    path = Path(project_dir) / PACKAGE_FILE
    pkg = _read_package(path)
    target = config.deployment_target.lower()

    pkg["name"] = sanitize_name(config.project.name or config.name or "") or "app"
    pkg["private"] = True
    pkg["type"] = "module"
    pkg["sideEffects"] = False

    pkg["scripts"] = merge_scripts(_string_map(pkg, "scripts"), target)

    deps = _string_map(pkg, "dependencies")
    dev_deps = _string_map(pkg, "devDependencies")
    merge_dependencies(deps, dev_deps, target, config.website.route_map is not False)
    pkg["dependencies"] = dict(sorted(deps.items()))
    pkg["devDependencies"] = dict(sorted(dev_deps.items()))

    pnpm = pkg.get("pnpm") if isinstance(pkg.get("pnpm"), dict) else {}
    overrides = _string_map(pnpm, "overrides")
    overrides["vite"] = VITE_VERSION
    pnpm["overrides"] = overrides
    pkg["pnpm"] = pnpm

    content = json.dumps(pkg, indent=2, ensure_ascii=False) + "\n"
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ExecutionError(f"Writing {path}: {exc}") from exc
    print_debug(f"merged package preferences into {path}")
    return path
