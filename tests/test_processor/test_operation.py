"""Tests for specgen.processor.operation -- Operation IR assembly.

Covers:
- Request bodies sorted by content type
- Response typing: no content, application/json, everything else
- Multi-homing: one record per tag
- Default module for operations without a module path
- Docstrings with options and resources
- Custom Processor hooks
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import pytest

from specgen.exceptions import ParameterLookupError
from specgen.models import (
    BINARY,
    HTTPMethod,
    MediaSpec,
    ModuleName,
    ResponseSpec,
    TypeDescriptor,
)
from specgen.processor import Processor
from specgen.processor.operation import process_operations, response_type
from specgen.processor.schemas import discover_schemas, process_schemas

_STRING = TypeDescriptor.primitive("string")


def _built(state):  # noqa: ANN001, ANN202
    return process_operations(process_schemas(discover_schemas(state)))


def _by_function(state) -> dict[str, Any]:  # noqa: ANN001
    return {(op.module.dotted, op.function_name): op for op in state.operations}


def _response(content: Optional[dict[str, dict[str, Any]]]) -> ResponseSpec:
    return ResponseSpec(
        status="200",
        content=(
            None
            if content is None
            else {ct: MediaSpec(content_type=ct, schema=schema) for ct, schema in content.items()}
        ),
    )


# ------------------------------------------------------------------ #
# Response typing
# ------------------------------------------------------------------ #


class TestResponseType:
    def test_no_content(self, widgets_state) -> None:
        assert response_type(widgets_state, _response(None)) is None

    def test_empty_content(self, widgets_state) -> None:
        assert response_type(widgets_state, _response({})) is None

    def test_json(self, widgets_state) -> None:
        response = _response({"application/json": {"type": "string"}})
        assert response_type(widgets_state, response) == _STRING

    def test_json_wins_over_other_types(self, widgets_state) -> None:
        response = _response(
            {"text/plain": {"type": "integer"}, "application/json": {"type": "string"}}
        )
        assert response_type(widgets_state, response) == _STRING

    @pytest.mark.parametrize(
        "content_type",
        [
            "text/plain",
            "text/csv",
            "image/png",
            "application/problem+json",
            "application/vnd.github+json",
            "application/json; charset=utf-8",
        ],
    )
    def test_non_json_is_binary(self, widgets_state, content_type: str) -> None:
        response = _response({content_type: {"type": "string"}})
        assert response_type(widgets_state, response) == BINARY


# ------------------------------------------------------------------ #
# Operations built from the widgets document
# ------------------------------------------------------------------ #


class TestWidgetOperations:
    def test_processing_order(self, widgets_state) -> None:
        state = _built(widgets_state)
        assert [(op.module.dotted, op.function_name) for op in state.operations] == [
            ("Widget", "list_widgets"),
            ("Widget", "create"),
            ("Admin", "widget_create"),
            ("Widget", "get_widget"),
            ("Widget", "delete_widget"),
            ("Widget.Image", "download"),
            ("Users", "get_user_post"),
            ("Operations", "get_reports"),
        ]

    def test_multi_homed_records_share_shape(self, widgets_state) -> None:
        ops = _by_function(_built(widgets_state))
        in_widget = ops[("Widget", "create")]
        in_admin = ops[("Admin", "widget_create")]
        assert in_widget.path == in_admin.path == "/widgets"
        assert in_widget.method == in_admin.method == HTTPMethod.POST
        assert in_widget.request_body == in_admin.request_body
        assert in_widget.responses == in_admin.responses

    def test_request_body_sorted_by_content_type(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "create")]
        assert op.request_body == [
            ("application/json", TypeDescriptor.schema_ref("NewWidget")),
            ("application/xml", TypeDescriptor.schema_ref("Widget")),
        ]

    def test_response_component_ref_followed(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "create")]
        assert op.responses == {"201": TypeDescriptor.schema_ref("Widget")}

    def test_list_responses(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "list_widgets")]
        assert op.responses == {
            "200": TypeDescriptor.array_of(TypeDescriptor.schema_ref("Widget")),
            "404": None,
        }

    def test_problem_json_default_response_is_binary(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "get_widget")]
        assert op.responses == {
            "200": TypeDescriptor.schema_ref("Widget"),
            "default": BINARY,
        }

    def test_binary_responses(self, widgets_state) -> None:
        ops = _by_function(_built(widgets_state))
        assert ops[("Widget.Image", "download")].responses == {"200": BINARY}
        assert ops[("Operations", "get_reports")].responses == {"200": BINARY}

    def test_inline_titled_response(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Users", "get_user_post")]
        assert op.responses == {"200": TypeDescriptor.schema_ref("PostSummary")}

    def test_path_item_parameters_apply(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "get_widget")]
        assert [p.name for p in op.path_params] == ["widget_id"]
        assert op.path_params[0].description == "Widget identifier"

    def test_path_params_in_template_order(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Users", "get_user_post")]
        assert [p.name for p in op.path_params] == ["user_id", "post_id"]
        assert [p.name for p in op.query_params] == ["expand"]

    def test_parameter_component_ref_followed(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "list_widgets")]
        assert [p.name for p in op.query_params] == ["limit", "cursor"]
        assert op.query_params[0].type == TypeDescriptor.primitive("integer", "int32")

    def test_deprecated_carried(self, widgets_state) -> None:
        ops = _by_function(_built(widgets_state))
        assert ops[("Widget", "delete_widget")].deprecated is True
        assert ops[("Widget", "get_widget")].deprecated is False

    def test_operation_without_id_or_tags(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Operations", "get_reports")]
        assert op.module == ModuleName(segments=("Operations",))
        assert op.operation_id is None


class TestHomingTargets:
    def test_one_record_per_tag(self, document, make_state) -> None:
        raw = document(
            {
                "/repos/{repo}/issues": {
                    "parameters": [
                        {"name": "repo", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "get": {
                        "operationId": "list_repo_issues",
                        "tags": ["issues", "repos"],
                        "responses": {},
                    },
                }
            }
        )
        state = _built(make_state(raw))
        assert [(op.module.dotted, op.function_name) for op in state.operations] == [
            ("Issues", "list_repo_issues"),
            ("Repos", "list_repo_issues"),
        ]

    def test_tags_differing_in_case_yield_one_record(self, document, make_state) -> None:
        raw = document(
            {
                "/issues": {
                    "get": {
                        "operationId": "listIssues",
                        "tags": ["issues", "Issues"],
                        "responses": {},
                    }
                }
            }
        )
        state = _built(make_state(raw))
        assert [(op.module.dotted, op.function_name) for op in state.operations] == [
            ("Issues", "list_issues")
        ]

    @pytest.mark.parametrize("operation_id", ["widgets/", "//"])
    def test_id_without_function_name_falls_back(
        self, document, make_state, caplog, operation_id: str
    ) -> None:
        raw = document({"/widgets": {"get": {"operationId": operation_id, "responses": {}}}})
        with caplog.at_level(logging.WARNING, logger="specgen"):
            state = _built(make_state(raw))
        (op,) = state.operations
        assert op.module == ModuleName(segments=("Operations",))
        assert op.function_name == "get_widgets"
        assert "yields no function name" in caplog.text


class TestDocstring:
    def test_full_docstring(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "list_widgets")]
        assert op.docstring == (
            "List widgets\n"
            "\n"
            "Returns every widget visible to the caller.\n"
            "\n"
            "## Options\n"
            "\n"
            "  * `limit`: Maximum number of results\n"
            "  * `cursor`\n"
            "\n"
            "## Resources\n"
            "\n"
            "  * [List widgets docs](https://docs.example.com/widgets#list)"
        )

    def test_summary_only(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Operations", "get_reports")]
        assert op.docstring == "Download the usage report"

    def test_empty_when_undocumented(self, widgets_state) -> None:
        op = _by_function(_built(widgets_state))[("Widget", "delete_widget")]
        assert op.docstring == ""


# ------------------------------------------------------------------ #
# Configuration
# ------------------------------------------------------------------ #


class TestNamingModes:
    def test_no_tags_mode_single_record(self, widgets_spec, make_state) -> None:
        state = _built(make_state(widgets_spec, operation_use_tags=False))
        assert len(state.operations) == 7
        names = [(op.module.dotted, op.function_name) for op in state.operations]
        assert ("Operations", "widget_create") in names
        assert ("Operations", "list_widgets") in names
        assert ("Widget.Image", "download") in names

    def test_default_module_configurable(self, widgets_spec, make_state) -> None:
        state = _built(make_state(widgets_spec, operation_default_module="Api.Misc"))
        op = state.operations[-1]
        assert op.module == ModuleName(segments=("Api", "Misc"))

    def test_ignore_by_method_and_path(self, widgets_spec, make_state) -> None:
        state = _built(make_state(widgets_spec, ignore=["DELETE /widgets/{widget_id}"]))
        assert all(op.method != HTTPMethod.DELETE for op in state.operations)
        assert len(state.operations) == 7

    def test_ignore_by_path_prefix(self, widgets_spec, make_state) -> None:
        state = _built(make_state(widgets_spec, ignore=["/widgets"]))
        assert [op.path for op in state.operations] == [
            "/users/{user_id}/posts/{post_id}",
            "/reports",
        ]

    def test_ignore_by_regex(self, widgets_spec, make_state) -> None:
        state = _built(make_state(widgets_spec, ignore=[r"get(Widget|UserPost)"]))
        ids = [op.operation_id for op in state.operations]
        assert "getWidget" not in ids and "getUserPost" not in ids
        assert "listWidgets" in ids


class TestProcessorHooks:
    def test_custom_function_names(self, widgets_spec, make_state) -> None:
        class ShortNames(Processor):
            def operation_function_name(self, state, operation, module, function):  # noqa: ANN001, ANN201
                return function.removeprefix("get_")

        state = _built(make_state(widgets_spec, processor=ShortNames()))
        functions = [op.function_name for op in state.operations]
        assert "widget" in functions
        assert "reports" in functions

    def test_custom_request_method(self, document, make_state) -> None:
        class PostOnly(Processor):
            def operation_request_method(self, state, operation):  # noqa: ANN001, ANN201
                return HTTPMethod.POST

        raw = document({"/q": {"get": {"operationId": "query", "responses": {}}}})
        state = _built(make_state(raw, processor=PostOnly()))
        assert state.operations[0].method == HTTPMethod.POST


class TestFailures:
    def test_missing_path_parameter_aborts(self, document, make_state) -> None:
        raw = document(
            {"/things/{thing_id}": {"get": {"operationId": "getThing", "responses": {}}}}
        )
        with pytest.raises(ParameterLookupError) as exc_info:
            _built(make_state(raw))
        assert exc_info.value.placeholder == "thing_id"
        assert exc_info.value.operation_id == "getThing"

    def test_input_state_not_mutated(self, widgets_state) -> None:
        before = widgets_state.operations
        _built(widgets_state)
        assert widgets_state.operations == before == ()
