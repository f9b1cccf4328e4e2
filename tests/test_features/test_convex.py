"""Tests for the native Convex feature."""

from __future__ import annotations

from pathlib import Path

import pytest

from workbench.config import Config
from workbench.errors import ExecutionError
from workbench.features import ConvexFeature


pytestmark = pytest.mark.unit


@pytest.fixture
def convex() -> ConvexFeature:
    return ConvexFeature()


class TestConvexFeature:
    def test_identity(self, convex):
        assert convex.name == "convex"
        assert convex.description
        assert repr(convex) == "ConvexFeature(name='convex')"

    def test_applies_to_websites_only(self, convex):
        assert convex.applies(Config.new("s", "website"))
        assert not convex.applies(Config.new("t", "tui"))

    def test_apply(self, convex, website_project: Path, make_ctx, mock_packages, capsys):
        convex.apply(make_ctx(website_project))

        assert mock_packages.add.call_args.args[0] == ["convex"]
        assert Config.load(website_project).features == ["convex"]
        assert "convex dev" in capsys.readouterr().out

    def test_remove(self, convex, website_project: Path, make_ctx, mock_packages):
        convex.apply(make_ctx(website_project))
        (website_project / "convex").mkdir()
        (website_project / "convex" / "schema.ts").write_text("//", encoding="utf-8")

        convex.remove(make_ctx(website_project))

        assert not (website_project / "convex").exists()
        assert mock_packages.remove.call_args.args[0] == ["convex"]
        assert Config.load(website_project).features == []

    def test_remove_tolerates_uninstall_failure(
        self, convex, website_project: Path, make_ctx, mock_packages
    ):
        convex.apply(make_ctx(website_project))
        mock_packages.remove.side_effect = ExecutionError("not installed")
        convex.remove(make_ctx(website_project))
        assert Config.load(website_project).features == []

    def test_dry_run(self, convex, website_project: Path, make_ctx, mock_packages, snapshot, capsys):
        before = snapshot(website_project)
        convex.apply(make_ctx(website_project, dry_run=True))
        convex.remove(make_ctx(website_project, dry_run=True))

        assert snapshot(website_project) == before
        mock_packages.add.assert_not_called()
        mock_packages.remove.assert_not_called()
        out = capsys.readouterr().out
        assert "Would add Convex" in out
        assert "Would remove Convex" in out
