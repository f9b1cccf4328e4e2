"""Tests for template resolution and best-effort rendering.

Covers:
- Static + feature-conditional destination maps
- Collision order between features
- The Cloudflare-only wrangler.jsonc destination
- Advisory failures that do not abort rendering
- RenderContext derivation from a config document
- Rendering the shipped templates for every kind
"""

from __future__ import annotations

from pathlib import Path

import pytest

from workbench.config import Config, WebDeploymentConfig, WebsiteConfig
from workbench.errors import AdvisoryError
from workbench.projectdef.models import Templates
from workbench.templates import (
    RenderContext,
    TemplateRenderer,
    TemplateResolver,
    WebsiteContext,
    resolve_templates,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def resolver(tmp_path: Path) -> TemplateResolver:
    directory = tmp_path / "tpl"
    directory.mkdir()
    (directory / "a.j2").write_text("A {{ name }}", encoding="utf-8")
    (directory / "b.j2").write_text("B", encoding="utf-8")
    (directory / "c.j2").write_text("C", encoding="utf-8")
    (directory / "bad.j2").write_text("{{ does_not_exist }}", encoding="utf-8")
    return TemplateResolver(TemplateRenderer(directory))


def _ctx(features: list[str] | None = None, deployment: str | None = None) -> RenderContext:
    website = WebsiteContext(deployment=deployment) if deployment is not None else None
    return RenderContext(name="demo", kind="website", features=features or [], website=website)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveTemplates:
    def test_static_only(self):
        templates = Templates(static={"a.txt": "a.j2"})
        assert resolve_templates(templates, _ctx()) == {"a.txt": "a.j2"}

    def test_disabled_feature_is_ignored(self):
        templates = Templates(static={"a.txt": "a.j2"}, when={"p": {"p.txt": "b.j2"}})
        assert resolve_templates(templates, _ctx()) == {"a.txt": "a.j2"}

    def test_enabled_feature_adds_and_overrides(self):
        templates = Templates(
            static={"a.txt": "a.j2"},
            when={"p": {"a.txt": "b.j2", "p.txt": "c.j2"}},
        )
        assert resolve_templates(templates, _ctx(["p"])) == {"a.txt": "b.j2", "p.txt": "c.j2"}

    def test_later_enabled_feature_wins(self):
        templates = Templates(
            static={"f.txt": "a.j2"},
            when={"p": {"f.txt": "b.j2"}, "q": {"f.txt": "c.j2"}},
        )
        assert resolve_templates(templates, _ctx(["q", "p"]))["f.txt"] == "b.j2"
        assert resolve_templates(templates, _ctx(["p", "q"]))["f.txt"] == "c.j2"

    @pytest.mark.parametrize(
        ("deployment", "kept"),
        [
            ("cloudflare", True),
            ("Cloudflare", True),
            ("railway", False),
            ("", False),
            (None, False),
        ],
    )
    def test_wrangler_only_for_cloudflare(self, deployment, kept):
        templates = Templates(static={"wrangler.jsonc": "w.j2", "a.txt": "a.j2"})
        resolved = resolve_templates(templates, _ctx(deployment=deployment))
        assert ("wrangler.jsonc" in resolved) is kept
        assert "a.txt" in resolved

    def test_source_maps_are_not_mutated(self):
        templates = Templates(static={"wrangler.jsonc": "w.j2"}, when={"p": {"x": "b.j2"}})
        resolve_templates(templates, _ctx(["p"], deployment="railway"))
        assert templates.static == {"wrangler.jsonc": "w.j2"}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderAll:
    def test_writes_files(self, resolver, tmp_path: Path):
        out = tmp_path / "project"
        templates = Templates(static={"one.txt": "a.j2", "sub/two.txt": "b.j2"})
        report = resolver.render_all(templates, _ctx(), out)

        assert report.ok
        assert (out / "one.txt").read_text(encoding="utf-8") == "A demo"
        assert (out / "sub" / "two.txt").read_text(encoding="utf-8") == "B"
        assert sorted(p.name for p in report.written) == ["one.txt", "two.txt"]

    def test_failure_is_advisory(self, resolver, tmp_path: Path, capsys):
        out = tmp_path / "project"
        templates = Templates(
            static={"one.txt": "a.j2", "broken.txt": "bad.j2", "gone.txt": "missing.j2", "two.txt": "b.j2"}
        )
        report = resolver.render_all(templates, _ctx(), out)

        assert not report.ok
        assert len(report.failures) == 2
        assert all(isinstance(f, AdvisoryError) for f in report.failures)
        assert {f.destination for f in report.failures} == {"broken.txt", "gone.txt"}
        assert (out / "one.txt").exists()
        assert (out / "two.txt").exists()
        assert not (out / "broken.txt").exists()
        assert "Failed to render" in capsys.readouterr().out

    def test_write_failure_is_advisory(self, resolver, tmp_path: Path):
        out = tmp_path / "project"
        out.mkdir()
        (out / "blocker").write_text("file, not a dir", encoding="utf-8")
        templates = Templates(static={"blocker/inner.txt": "b.j2", "ok.txt": "b.j2"})
        report = resolver.render_all(templates, _ctx(), out)

        assert [f.destination for f in report.failures] == ["blocker/inner.txt"]
        assert (out / "ok.txt").exists()


# ---------------------------------------------------------------------------
# Render context
# ---------------------------------------------------------------------------


class TestRenderContext:
    def test_from_website_config(self):
        cfg = Config.new("My Site", "website")
        cfg.add_feature("convex")
        ctx = RenderContext.from_config(cfg)

        assert ctx.kind == "website"
        assert ctx.deployment_target == "cloudflare"
        assert ctx.package_name == "my-site"
        assert ctx.website.convex is True
        assert ctx.website.route_map is True
        assert ctx.website.future_flags["v8_middleware"] is True
        assert ctx.tui is None
        assert ctx.agents.bundle is True

    def test_from_tui_config(self):
        ctx = RenderContext.from_config(Config.new("cli", "tui"))
        assert ctx.website is None
        assert ctx.deployment_target == ""
        assert ctx.tui.libs == ["bubbletea", "bubbles", "lipgloss"]

    def test_template_vars(self):
        variables = RenderContext.from_config(Config.new("cli", "tui")).as_template_vars()
        assert variables["name"] == "cli"
        assert variables["package_name"] == "cli"
        assert variables["website"] is None
        assert variables["has_feature"]("anything") is False


# ---------------------------------------------------------------------------
# Shipped templates
# ---------------------------------------------------------------------------


class TestBuiltinTemplates:
    @pytest.mark.parametrize("kind", ["website", "tui", "ios", "monorepo"])
    def test_every_kind_renders_cleanly(self, kind, builtin_definitions, tmp_path: Path):
        cfg = Config.new("demo-app", kind)
        definition = builtin_definitions.get(kind)
        for name in definition.templates.when:
            cfg.add_feature(name)

        report = TemplateResolver().render_all(
            definition.templates, RenderContext.from_config(cfg), tmp_path
        )
        assert report.ok, [str(f) for f in report.failures]
        assert "# demo-app" in (tmp_path / "AGENTS.md").read_text(encoding="utf-8")

    def test_website_cloudflare(self, builtin_definitions, tmp_path: Path):
        cfg = Config.new("site", "website")
        TemplateResolver().render_all(
            builtin_definitions.get("website").templates, RenderContext.from_config(cfg), tmp_path
        )
        assert '"name": "site"' in (tmp_path / "wrangler.jsonc").read_text(encoding="utf-8")
        assert "wrangler deploy" in (tmp_path / "mise.toml").read_text(encoding="utf-8")
        assert ".wrangler/" in (tmp_path / ".gitignore").read_text(encoding="utf-8")
        assert "v8_middleware: true" in (tmp_path / "react-router.config.ts").read_text(
            encoding="utf-8"
        )

    def test_website_railway_skips_wrangler(self, builtin_definitions, tmp_path: Path):
        cfg = Config(
            kind="website",
            name="site",
            website=WebsiteConfig(deployment=WebDeploymentConfig(target="railway")),
        ).apply_defaults()
        TemplateResolver().render_all(
            builtin_definitions.get("website").templates, RenderContext.from_config(cfg), tmp_path
        )
        assert not (tmp_path / "wrangler.jsonc").exists()
        assert "wrangler" not in (tmp_path / "mise.toml").read_text(encoding="utf-8")
