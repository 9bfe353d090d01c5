"""Tests for DSC output classification."""

import json
from datetime import timedelta

import pytest

from dsc_runner.classifier import classify_output, classify_resource
from dsc_runner.models.result import ExecutionMode, ResourceResult, ResourceState
from dsc_runner.testing.payloads import dsc_output, dsc_resource


class TestClassifyOutput:
    """Tests for classify_output."""

    @pytest.mark.parametrize("output", ["", "   ", "\n\t \r\n"])
    @pytest.mark.parametrize("mode", list(ExecutionMode))
    def test_returns_empty_for_blank_output(
        self, output: str, mode: ExecutionMode
    ) -> None:
        """Returns no results for empty or whitespace-only output."""
        assert classify_output(output, mode) == []

    @pytest.mark.parametrize(
        "output",
        [
            "not json at all",
            "{ broken",
            "ERROR: configuration file not found",
            "[1, 2, 3]",
            '"just a string"',
            "42",
            "null",
        ],
    )
    def test_returns_parse_error_for_unstructured_output(self, output: str) -> None:
        """Returns a single failed parse-error result for non-object output."""
        results = classify_output(output, ExecutionMode.TEST)

        assert results == [
            ResourceResult(
                name="output",
                type="parse-error",
                state=ResourceState.FAILED,
                error_message="Failed to parse output as JSON",
            )
        ]

    @pytest.mark.parametrize(
        "output",
        [
            "[" * 100_000 + "]" * 100_000,
            '{"results": [' * 50_000 + "]}" * 50_000,
            '{"results":[{"name":"x","type":"y","result":{"inDesiredState":'
            + "1" * 5000
            + "}}]}",
            "1" * 5000,
        ],
        ids=["deep-array", "deep-object", "huge-nested-integer", "huge-integer"],
    )
    def test_returns_parse_error_when_decoder_limits_hit(self, output: str) -> None:
        """Treats output beyond the decoder's nesting or digit limits as unparsable."""
        results = classify_output(output, ExecutionMode.TEST)

        assert [(r.type, r.error_message) for r in results] == [
            ("parse-error", "Failed to parse output as JSON")
        ]

    def test_returns_empty_when_results_missing(self) -> None:
        """Returns no results when the document has no results array."""
        assert classify_output('{"messages": []}', ExecutionMode.APPLY) == []

    def test_returns_empty_when_results_not_array(self) -> None:
        """Returns no results when results is not an array."""
        assert classify_output('{"results": {"name": "x"}}', ExecutionMode.TEST) == []

    def test_classifies_non_compliant_package(self) -> None:
        """Classifies a package not in desired state as non-compliant."""
        output = (
            '{"results":[{"name":"Install Git","type":"Microsoft.WinGet/Package",'
            '"result":{"inDesiredState":false}}]}'
        )

        results = classify_output(output, ExecutionMode.TEST)

        assert results == [
            ResourceResult(
                name="Install Git",
                type="Microsoft.WinGet/Package",
                state=ResourceState.NON_COMPLIANT,
                status_text="not in desired state",
            )
        ]

    def test_preserves_resource_order(self) -> None:
        """Returns results in the order DSC reported them."""
        output = dsc_output(
            dsc_resource(name="first", in_desired_state=True),
            dsc_resource(name="second", in_desired_state=False),
            dsc_resource(name="third", include_result=False),
        )

        results = classify_output(output, ExecutionMode.TEST)

        assert [r.name for r in results] == ["first", "second", "third"]
        assert [r.state for r in results] == [
            ResourceState.COMPLIANT,
            ResourceState.NON_COMPLIANT,
            ResourceState.FAILED,
        ]

    def test_non_object_elements_fail_individually(self) -> None:
        """Elements that are not objects fail without affecting the batch."""
        output = json.dumps(
            {"results": ["garbage", dsc_resource(name="ok", in_desired_state=True)]}
        )

        results = classify_output(output, ExecutionMode.TEST)

        assert results[0].name == "unknown"
        assert results[0].state == ResourceState.FAILED
        assert results[0].error_message == "No result in output"
        assert results[1].state == ResourceState.COMPLIANT


class TestClassifyResource:
    """Tests for classify_resource."""

    def test_defaults_name_and_type_to_unknown(self) -> None:
        """Uses 'unknown' for absent, empty or non-string name and type."""
        missing = classify_resource({"result": {}}, ExecutionMode.TEST)
        empty = classify_resource({"name": "", "type": "", "result": {}}, ExecutionMode.TEST)
        wrong_type = classify_resource(
            {"name": 5, "type": None, "result": {}}, ExecutionMode.TEST
        )

        for result in (missing, empty, wrong_type):
            assert result.name == "unknown"
            assert result.type == "unknown"

    def test_extracts_duration(self) -> None:
        """Reads the duration from Microsoft.DSC metadata."""
        item = dsc_resource(in_desired_state=True, duration="PT1M30S")

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.duration == timedelta(seconds=90)

    @pytest.mark.parametrize(
        "metadata",
        [
            {"Microsoft.DSC": {"duration": "not-a-duration"}},
            {"Microsoft.DSC": {"duration": 12}},
            {"Microsoft.DSC": {}},
            {"Microsoft.DSC": "PT1S"},
            {},
            None,
        ],
    )
    def test_ignores_invalid_duration(self, metadata: object) -> None:
        """Leaves duration unset when it is absent or malformed."""
        item = {"name": "x", "type": "y", "metadata": metadata, "result": {}}

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.duration is None
        assert result.state == ResourceState.NON_COMPLIANT

    def test_missing_result_fails_with_duration(self) -> None:
        """Fails a resource without result but keeps its duration."""
        item = dsc_resource(include_result=False, duration="PT2S")

        result = classify_resource(item, ExecutionMode.APPLY)

        assert result.state == ResourceState.FAILED
        assert result.error_message == "No result in output"
        assert result.duration == timedelta(seconds=2)
        assert result.status_text is None

    def test_missing_result_takes_precedence_over_set_only(self) -> None:
        """A set-only resource without result is failed, not skipped."""
        item = dsc_resource(
            resource_type="Microsoft.DSC.Transitional/RunCommandOnSet",
            include_result=False,
        )

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.state == ResourceState.FAILED


class TestTestMode:
    """Classification rules for test mode."""

    @pytest.mark.parametrize(
        "resource_type",
        [
            "Microsoft.DSC.Transitional/RunCommandOnSet",
            "microsoft.dsc.transitional/runcommandonset",
            "Custom/RUNCOMMANDONSET",
        ],
    )
    @pytest.mark.parametrize("in_desired_state", [True, False, None])
    def test_run_command_on_set_is_skipped(
        self, resource_type: str, in_desired_state: bool | None
    ) -> None:
        """Skips RunCommandOnSet resources regardless of their result."""
        item = dsc_resource(
            resource_type=resource_type, in_desired_state=in_desired_state
        )

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.state == ResourceState.SKIPPED
        assert result.status_text == "set only"
        assert result.error_message is None

    def test_in_desired_state_is_compliant(self) -> None:
        """Marks resources in desired state as compliant."""
        result = classify_resource(dsc_resource(in_desired_state=True), ExecutionMode.TEST)

        assert result.state == ResourceState.COMPLIANT
        assert result.status_text == "in desired state"

    @pytest.mark.parametrize("in_desired_state", [False, None])
    def test_not_in_desired_state_is_non_compliant(
        self, in_desired_state: bool | None
    ) -> None:
        """Treats false or absent inDesiredState as non-compliant."""
        item = dsc_resource(in_desired_state=in_desired_state)

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.state == ResourceState.NON_COMPLIANT
        assert result.status_text == "not in desired state"

    def test_truthy_non_boolean_is_non_compliant(self) -> None:
        """Only a JSON true counts as being in desired state."""
        item = {"name": "x", "type": "y", "result": {"inDesiredState": "true"}}

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.state == ResourceState.NON_COMPLIANT

    def test_changed_properties_ignored(self) -> None:
        """Ignores changedProperties in test mode."""
        item = dsc_resource(in_desired_state=True, changed_properties=["version"])

        result = classify_resource(item, ExecutionMode.TEST)

        assert result.state == ResourceState.COMPLIANT


class TestApplyMode:
    """Classification rules for apply mode."""

    @pytest.mark.parametrize(
        "resource_type",
        [
            "Microsoft.WinGet/Package",
            "Microsoft.DSC.Transitional/RunCommandOnSet",
            "PSDscResources/Script",
        ],
    )
    def test_changed_properties_mark_changed(self, resource_type: str) -> None:
        """Marks resources with changed properties as changed."""
        item = dsc_resource(
            resource_type=resource_type, changed_properties=["ensure", "version"]
        )

        result = classify_resource(item, ExecutionMode.APPLY)

        assert result.state == ResourceState.CHANGED
        assert result.status_text == "changed"

    @pytest.mark.parametrize(
        "resource_type",
        [
            "Microsoft.DSC.Transitional/RunCommandOnSet",
            "PSDscResources/Script",
            "Custom/myscriptresource",
        ],
    )
    @pytest.mark.parametrize("changed_properties", [None, []])
    def test_script_resources_are_executed(
        self, resource_type: str, changed_properties: list[str] | None
    ) -> None:
        """Marks script-like resources without changes as executed."""
        item = dsc_resource(
            resource_type=resource_type, changed_properties=changed_properties
        )

        result = classify_resource(item, ExecutionMode.APPLY)

        assert result.state == ResourceState.EXECUTED
        assert result.status_text == "executed"

    @pytest.mark.parametrize("changed_properties", [None, []])
    def test_unchanged_resources_are_compliant(
        self, changed_properties: list[str] | None
    ) -> None:
        """Marks other resources without changes as compliant."""
        item = dsc_resource(changed_properties=changed_properties)

        result = classify_resource(item, ExecutionMode.APPLY)

        assert result.state == ResourceState.COMPLIANT
        assert result.status_text == "no changes"

    def test_non_array_changed_properties_ignored(self) -> None:
        """Ignores changedProperties that is not an array."""
        item = {"name": "x", "type": "y", "result": {"changedProperties": "version"}}

        result = classify_resource(item, ExecutionMode.APPLY)

        assert result.state == ResourceState.COMPLIANT
