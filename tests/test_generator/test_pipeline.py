"""Tests for specgen.generator.pipeline -- stage order, emit and plan rows."""

from __future__ import annotations

import pytest

from specgen.exceptions import ParameterLookupError
from specgen.generator import Renderer, emit, new_state, plan_rows, run
from specgen.generator.pipeline import STAGES
from specgen.models import FileUnit, GeneratorConfig, ModuleName
from specgen.processor import DefaultTypeEncoder, Processor


class _Listing(Renderer):
    """Renders a unit as its qualified module name and function names."""

    def render(self, module: ModuleName, unit: FileUnit) -> str:
        functions = ", ".join(op.function_name for op in unit.operations)
        return f"{module.dotted}: {functions}"


class _Failing(Renderer):
    def render(self, module: ModuleName, unit: FileUnit) -> str:
        if unit.is_behaviour or unit.operations:
            raise RuntimeError(f"cannot render {module}")
        return ""


class TestNewState:
    def test_defaults(self, widgets_spec) -> None:
        state = new_state(widgets_spec)
        assert state.config == GeneratorConfig()
        assert type(state.processor) is Processor
        assert isinstance(state.typing, DefaultTypeEncoder)
        assert state.operations == ()
        assert state.files == {}


class TestRun:
    def test_stage_order(self) -> None:
        assert [stage.__name__ for stage in STAGES] == [
            "discover_schemas",
            "process_schemas",
            "process_operations",
            "collect_schema_files",
            "collect_operation_files",
            "collect_interface_files",
            "reconcile_files",
        ]

    def test_run_returns_files(self, widgets_spec) -> None:
        files = run(widgets_spec)
        assert len(files) == 9
        assert all(isinstance(unit, FileUnit) for unit in files.values())

    def test_deterministic(self, widgets_spec) -> None:
        first = run(widgets_spec)
        second = run(widgets_spec)
        assert list(first) == list(second)
        assert [u.model_dump() for u in first.values()] == [u.model_dump() for u in second.values()]

    def test_lookup_failure_yields_no_files(self, document, make_state) -> None:
        raw = document({"/x/{id}": {"get": {"operationId": "getX", "responses": {}}}})
        spec = make_state(raw).spec
        with pytest.raises(ParameterLookupError):
            run(spec)


class TestEmit:
    def test_base_module_applied_at_render(self, widgets_spec) -> None:
        config = GeneratorConfig(base_module="Acme.Widgets")
        files = run(widgets_spec, config)
        rendered = emit(files, _Listing(), config)

        assert rendered["lib/admin"] == "Acme.Widgets.Admin: widget_create"
        assert rendered["lib/widget"].startswith("Acme.Widgets.Widget: list_widgets")
        # Module identities in the IR stay unqualified.
        assert all(not module.qualified for module in files)

    def test_one_entry_per_unit(self, widgets_spec) -> None:
        files = run(widgets_spec)
        rendered = emit(files, _Listing())
        assert sorted(rendered) == sorted(unit.name for unit in files.values())

    def test_renderer_failure_propagates(self, widgets_spec) -> None:
        files = run(widgets_spec)
        with pytest.raises(RuntimeError, match="cannot render"):
            emit(files, _Failing())


class TestQualify:
    def test_qualify_once(self) -> None:
        module = ModuleName(segments=("Repos",)).qualify("GitHub")
        assert module.dotted == "GitHub.Repos"
        assert module.qualify("GitHub").dotted == "GitHub.Repos"

    def test_empty_base_module(self) -> None:
        assert ModuleName(segments=("Repos",)).qualify("").dotted == "Repos"


class TestPlanRows:
    def test_rows(self, widgets_spec) -> None:
        config = GeneratorConfig(base_module="Acme", default_client="Acme.Client")
        rows = plan_rows(run(widgets_spec, config), config)
        assert rows[0] == ["Acme.Widget", "lib/widget", "4", "1", "Acme.Client", ""]
        user_row = next(row for row in rows if row[0] == "Acme.User")
        assert user_row == ["Acme.User", "lib/user", "0", "1", "-", ""]

    def test_behaviour_column(self, widgets_spec) -> None:
        config = GeneratorConfig(operation_interfaces=True)
        rows = plan_rows(run(widgets_spec, config), config)
        assert ["Widget.Interface", "lib/widget.interface", "4", "0", "-", "yes"] in rows
