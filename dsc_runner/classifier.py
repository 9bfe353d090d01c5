"""Classification of ``dsc config`` JSON output into per-resource results."""

import json
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from dsc_runner.durations import parse_iso_duration
from dsc_runner.models.result import ExecutionMode, ResourceResult, ResourceState

PARSE_ERROR_MESSAGE = "Failed to parse output as JSON"
NO_RESULT_MESSAGE = "No result in output"

SET_ONLY_TYPE_MARKER = "runcommandonset"
SCRIPT_TYPE_MARKERS = ("runcommandonset", "script")


def classify_output(output: str, mode: ExecutionMode) -> list[ResourceResult]:
    """Turn DSC standard output into one result per resource.

    Args:
        output: Raw standard output of ``dsc config test`` or ``dsc config set``
        mode: Execution mode the output was produced in

    Returns:
        Results in the order DSC reported them. Output that is not a JSON
        object yields a single failed ``parse-error`` result; blank output or
        a document without a ``results`` array yields an empty list.

    """
    if not output.strip():
        return []

    try:
        document = json.loads(output)
    except (ValueError, RecursionError):
        # Also covers nesting and integer-size limits of the decoder.
        document = None

    if not isinstance(document, dict):
        return [
            ResourceResult(
                name="output",
                type="parse-error",
                state=ResourceState.FAILED,
                error_message=PARSE_ERROR_MESSAGE,
            )
        ]

    items = document.get("results")
    if not isinstance(items, list):
        return []

    return [
        classify_resource(item if isinstance(item, dict) else {}, mode)
        for item in items
    ]


def classify_resource(item: Mapping[str, Any], mode: ExecutionMode) -> ResourceResult:
    """Classify a single element of the DSC ``results`` array."""
    name = _string_or_unknown(item.get("name"))
    resource_type = _string_or_unknown(item.get("type"))
    duration = extract_duration(item)

    result = item.get("result")
    if not isinstance(result, dict):
        return ResourceResult(
            name=name,
            type=resource_type,
            state=ResourceState.FAILED,
            error_message=NO_RESULT_MESSAGE,
            duration=duration,
        )

    state, status_text = determine_state(result, resource_type, mode)
    return ResourceResult(
        name=name,
        type=resource_type,
        state=state,
        duration=duration,
        status_text=status_text,
    )


def determine_state(
    result: Mapping[str, Any], resource_type: str, mode: ExecutionMode
) -> tuple[ResourceState, str]:
    """Map a resource ``result`` object to a state and its status text."""
    lowered_type = resource_type.lower()

    if mode is ExecutionMode.TEST:
        # RunCommandOnSet resources cannot be tested, only executed on set.
        if SET_ONLY_TYPE_MARKER in lowered_type:
            return ResourceState.SKIPPED, "set only"
        if result.get("inDesiredState") is True:
            return ResourceState.COMPLIANT, "in desired state"
        return ResourceState.NON_COMPLIANT, "not in desired state"

    changed_properties = result.get("changedProperties")
    if isinstance(changed_properties, list) and changed_properties:
        return ResourceState.CHANGED, "changed"

    if any(marker in lowered_type for marker in SCRIPT_TYPE_MARKERS):
        return ResourceState.EXECUTED, "executed"

    return ResourceState.COMPLIANT, "no changes"


def extract_duration(item: Mapping[str, Any]) -> timedelta | None:
    """Read ``metadata["Microsoft.DSC"].duration`` from a resource element."""
    metadata = item.get("metadata")
    if not isinstance(metadata, dict):
        return None

    dsc_metadata = metadata.get("Microsoft.DSC")
    if not isinstance(dsc_metadata, dict):
        return None

    duration = dsc_metadata.get("duration")
    if not isinstance(duration, str):
        return None

    return parse_iso_duration(duration)


def _string_or_unknown(value: Any) -> str:
    return value if isinstance(value, str) and value else "unknown"
