"""Tests for project-definition loading (workbench.projectdef).

Covers:
- Loading definitions from a directory
- Skipping unparseable definitions with a warning
- Lookup of known and unknown kinds
- Dependency aggregation by condition tag
- Static / conditional template tables
- The definitions shipped with the package
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from workbench.errors import NotFoundError, UnknownKindError
from workbench.projectdef import Definition, DefinitionRegistry, Dependencies
from workbench.projectdef.models import ConditionalDeps, Templates
from workbench.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoad:
    def test_loads_demo(self, demo_definitions: DefinitionRegistry):
        assert demo_definitions.list() == ["demo"]
        assert "demo" in demo_definitions
        assert len(demo_definitions) == 1

        definition = demo_definitions.get("demo")
        assert definition.kind == "demo"
        assert definition.description == "Demo project"

    def test_feature_spec(self, demo_definitions: DefinitionRegistry):
        spec = demo_definitions.get("demo").features["x"]
        assert spec.description == "Feature x"
        assert spec.packages == ["pkgA"]
        assert spec.dev_packages == []
        assert spec.remove.packages == ["pkgA"]
        assert spec.remove.directories == ["xdir"]

    def test_templates_split(self, demo_definitions: DefinitionRegistry):
        templates = demo_definitions.get("demo").templates
        assert templates.static == {"README.md": "readme.j2"}
        assert templates.when == {"x": {"x.txt": "x.j2"}}

    def test_broken_file_is_skipped(self, defs_dir: Path, capsys):
        (defs_dir / "broken.toml").write_text("[project\nkind=", encoding="utf-8")
        registry = DefinitionRegistry.load(defs_dir)
        assert registry.list() == ["demo"]
        assert "broken.toml" in capsys.readouterr().out

    def test_missing_kind_is_skipped(self, defs_dir: Path):
        (defs_dir / "nokind.toml").write_text('[project]\ndescription = "x"\n', encoding="utf-8")
        assert DefinitionRegistry.load(defs_dir).list() == ["demo"]

    def test_schema_mismatch_is_skipped(self, defs_dir: Path):
        (defs_dir / "bad.toml").write_text(
            '[project]\nkind = "bad"\n[dependencies]\nruntime = 5\n', encoding="utf-8"
        )
        assert "bad" not in DefinitionRegistry.load(defs_dir)

    def test_non_toml_files_are_ignored(self, defs_dir: Path):
        (defs_dir / "notes.txt").write_text("hello", encoding="utf-8")
        assert len(DefinitionRegistry.load(defs_dir)) == 1

    def test_missing_directory_gives_empty_registry(self, tmp_path: Path):
        assert len(DefinitionRegistry.load(tmp_path / "nope")) == 0


class TestLookup:
    def test_unknown_kind(self, demo_definitions: DefinitionRegistry):
        with pytest.raises(UnknownKindError) as exc_info:
            demo_definitions.get("android")
        assert exc_info.value.kind == "android"

    def test_unknown_kind_is_not_found(self, demo_definitions: DefinitionRegistry):
        with pytest.raises(NotFoundError):
            demo_definitions.get("android")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class TestDependencies:
    def test_without_tags(self, demo_definitions: DefinitionRegistry):
        deps = demo_definitions.get("demo").dependencies
        assert deps.all_deps() == ["base-runtime"]
        assert deps.all_dev_deps() == ["base-dev"]

    def test_with_tag(self, demo_definitions: DefinitionRegistry):
        deps = demo_definitions.get("demo").dependencies
        assert deps.all_deps("cloudflare") == ["base-runtime", "cf-runtime"]
        assert deps.all_dev_deps("cloudflare") == ["base-dev", "cf-dev"]

    def test_unknown_tag_is_ignored(self, demo_definitions: DefinitionRegistry):
        deps = demo_definitions.get("demo").dependencies
        assert deps.all_deps("railway") == ["base-runtime"]

    def test_tag_order_and_no_dedupe(self):
        deps = Dependencies(
            runtime=["a"],
            when={
                "one": ConditionalDeps(runtime=["b", "a"]),
                "two": ConditionalDeps(runtime=["c"]),
            },
        )
        assert deps.all_deps("two", "one") == ["a", "c", "b", "a"]

    def test_result_is_a_copy(self):
        deps = Dependencies(runtime=["a"])
        deps.all_deps().append("z")
        assert deps.runtime == ["a"]


class TestTemplatesModel:
    def test_empty_table(self):
        templates = Templates.model_validate({})
        assert templates.static == {}
        assert templates.when == {}

    def test_definition_is_frozen(self):
        definition = Definition.model_validate({"project": {"kind": "k"}})
        with pytest.raises(ValidationError):
            definition.project = None


# ---------------------------------------------------------------------------
# Shipped definitions
# ---------------------------------------------------------------------------


class TestBuiltinDefinitions:
    def test_all_kinds_present(self, builtin_definitions: DefinitionRegistry):
        assert builtin_definitions.list() == ["ios", "monorepo", "tui", "website"]

    def test_website_deployment_deps(self, builtin_definitions: DefinitionRegistry):
        deps = builtin_definitions.get("website").dependencies
        assert "@cloudflare/vite-plugin" in deps.all_deps("cloudflare")
        assert "wrangler" in deps.all_dev_deps("cloudflare")
        assert "@react-router/serve" in deps.all_deps("railway")
        assert "wrangler" not in deps.all_dev_deps("railway")

    def test_every_template_exists(self, builtin_definitions: DefinitionRegistry):
        available = set(TemplateRenderer().list_templates())
        for kind in builtin_definitions.list():
            templates = builtin_definitions.get(kind).templates
            ids = list(templates.static.values())
            for mapping in templates.when.values():
                ids.extend(mapping.values())
            missing = [t for t in ids if t not in available]
            assert not missing, f"{kind}: {missing}"
