"""Tests for shimmake.workspace."""

from __future__ import annotations

import pytest

from shimmake.config import ShimConfig
from shimmake.context import Context
from shimmake.errors import ConfigError
from shimmake.hcl import loads
from shimmake.projects import Project
from shimmake.requirement import Requirement, _requirement_registry
from shimmake.strategy import Absent, Ensure, Present
from shimmake.workspace import Workspace


class TrackingRequirement(Requirement["ShimConfig"]):
    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return False

    def apply(self, ctx: Context[ShimConfig]) -> None:
        pass


class StrictRequirement(TrackingRequirement):
    def __init__(self, color: str):
        super().__init__(color=color)


@pytest.fixture(autouse=True)
def _clean_registry():
    saved = _requirement_registry.copy()
    _requirement_registry.clear()
    _requirement_registry["widget"] = TrackingRequirement
    _requirement_registry["strict"] = StrictRequirement
    yield
    _requirement_registry.clear()
    _requirement_registry.update(saved)


def _workspace(text: str) -> Workspace:
    ws = Workspace()
    ws.load(loads(text))
    return ws


class TestWorkspaceConstruction:
    def test_empty_workspace(self):
        ws = Workspace()
        assert len(ws) == 0
        assert list(ws) == []
        assert "anything" not in ws

    def test_getitem_empty_raises(self):
        with pytest.raises(KeyError):
            Workspace()["missing"]

    def test_get_empty_returns_none(self):
        assert Workspace().get("missing") is None

    def test_repr(self):
        assert repr(Workspace()) == "Workspace(blueprints=0, projects=0)"


class TestWorkspaceLoad:
    def test_project_with_description(self):
        ws = _workspace('project "setup" { description = "test" }')
        assert "setup" in ws
        proj = ws["setup"]
        assert isinstance(proj, Project)
        assert proj.description == "test"

    def test_project_uses_blueprints_in_order(self):
        ws = _workspace(
            """
            blueprint "a" {
                present "widget" { id = "1" }
            }
            blueprint "b" {
                ensure "widget" { id = "2" }
            }
            project "setup" {
                use = ["b", "a"]
            }
        """
        )
        assert [bp.name for bp in ws["setup"].blueprints] == ["b", "a"]

    def test_strategies_decoded(self):
        ws = _workspace(
            """
            blueprint "bp" {
                present "widget" { id = "1" }
                ensure "widget" { id = "2" }
                absent "widget" { id = "3" }
            }
            project "setup" { use = ["bp"] }
        """
        )
        ops = ws["setup"].blueprints[0].ops
        assert [type(op) for op in ops] == [Present, Ensure, Absent]
        assert [op.requirement.kwargs["id"] for op in ops] == ["1", "2", "3"]

    def test_repeated_blocks_keep_order(self):
        ws = _workspace(
            """
            blueprint "bp" {
                ensure "widget" { id = "1" }
                ensure "widget" { id = "2" }
            }
            project "setup" { use = ["bp"] }
        """
        )
        ops = ws["setup"].blueprints[0].ops
        assert [op.requirement.kwargs["id"] for op in ops] == ["1", "2"]

    def test_inline_ops_become_blueprint(self):
        ws = _workspace(
            """
            project "setup" {
                present "widget" { id = "1" }
            }
        """
        )
        assert ws["setup"].blueprints[0].name == "setup:inline"

    def test_includes_resolved_first(self):
        ws = _workspace(
            """
            blueprint "base" {
                present "widget" { id = "base" }
            }
            blueprint "full" {
                include = ["base"]
                present "widget" { id = "full" }
            }
            project "setup" { use = ["full"] }
        """
        )
        ops = ws["setup"].blueprints[0].ops
        assert [op.requirement.kwargs["id"] for op in ops] == ["base", "full"]

    def test_duplicate_blueprint_raises(self):
        ws = _workspace('blueprint "a" {}')
        with pytest.raises(ConfigError, match="Duplicate blueprint"):
            ws.load(loads('blueprint "a" {}'))

    def test_duplicate_project_raises(self):
        ws = _workspace('project "p" {}')
        with pytest.raises(ConfigError, match="Duplicate project"):
            ws.load(loads('project "p" {}'))


class TestWorkspaceErrors:
    def test_unknown_requirement_type(self):
        ws = _workspace(
            """
            project "setup" {
                present "gizmo" { id = "1" }
            }
        """
        )
        with pytest.raises(ConfigError, match="Unknown requirement type"):
            ws["setup"]

    def test_invalid_attributes(self):
        ws = _workspace(
            """
            project "setup" {
                present "strict" { size = "1" }
            }
        """
        )
        with pytest.raises(ConfigError, match="Invalid 'strict' block"):
            ws["setup"]

    def test_unknown_blueprint(self):
        ws = _workspace('project "setup" { use = ["nope"] }')
        with pytest.raises(ConfigError, match="unknown blueprint"):
            ws["setup"]

    def test_circular_include(self):
        ws = _workspace(
            """
            blueprint "a" { include = ["b"] }
            blueprint "b" { include = ["a"] }
            project "setup" { use = ["a"] }
        """
        )
        with pytest.raises(ConfigError, match="Circular include"):
            ws["setup"]

    def test_config_error_is_value_error(self):
        ws = _workspace('project "setup" { use = ["nope"] }')
        with pytest.raises(ValueError):
            ws["setup"]
