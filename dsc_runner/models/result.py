"""Models for DSC execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum


class ExecutionMode(StrEnum):
    """Whether a profile is tested (read-only) or applied (mutating)."""

    TEST = "test"
    APPLY = "apply"


class ResourceState(StrEnum):
    """State of a single DSC resource after a test or apply run."""

    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    CHANGED = "changed"
    EXECUTED = "executed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, kw_only=True)
class ResourceResult:
    """Result for one resource declared in a profile."""

    name: str
    type: str
    state: ResourceState
    error_message: str | None = None
    duration: timedelta | None = None
    status_text: str | None = None


@dataclass(frozen=True, kw_only=True)
class ExecutionResult:
    """Outcome of running ``dsc config test`` or ``dsc config set`` on a profile.

    ``success`` reflects the DSC process exit code only. Individual resources
    may still be failed on a successful run and the other way round.
    """

    profile_name: str
    mode: ExecutionMode
    success: bool
    results: Sequence[ResourceResult]
    duration: timedelta
