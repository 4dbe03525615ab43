"""Numeric encodings of condition statuses, operation states and project phases.

All mappings are total and case-sensitive: any status string that is not
recognized maps to the ``UNKNOWN`` member (-1).
"""

from __future__ import annotations

from enum import IntEnum


class ConditionStatus(IntEnum):
    """Value of a ``*_condition`` sample."""

    UNKNOWN = -1
    UNHEALTHY = 0
    HEALTHY = 1
    PROGRESSING = 2

    @classmethod
    def from_status(cls, status: str | None) -> ConditionStatus:
        return _CONDITION_STATUSES.get(status or "", cls.UNKNOWN)


_CONDITION_STATUSES = {
    "False": ConditionStatus.UNHEALTHY,
    "True": ConditionStatus.HEALTHY,
    "Progressing": ConditionStatus.PROGRESSING,
}


class OperationState(IntEnum):
    """Value of a ``garden_shoot_operation_states`` sample."""

    UNKNOWN = -1
    SUCCEEDED = 1
    PROCESSING = 2
    PENDING = 3
    ABORTED = 4
    ERROR = 5
    FAILED = 6

    @classmethod
    def from_state(cls, state: str | None) -> OperationState:
        return _OPERATION_STATES.get(state or "", cls.UNKNOWN)


_OPERATION_STATES = {
    "Succeeded": OperationState.SUCCEEDED,
    "Processing": OperationState.PROCESSING,
    "Pending": OperationState.PENDING,
    "Aborted": OperationState.ABORTED,
    "Error": OperationState.ERROR,
    "Failed": OperationState.FAILED,
}


class ProjectPhase(IntEnum):
    """Value of a ``garden_projects_status`` sample."""

    FAILED = -1
    READY = 0
    PENDING = 1
    TERMINATING = 2

    @classmethod
    def from_phase(cls, phase: str | None) -> ProjectPhase:
        return _PROJECT_PHASES.get(phase or "", cls.FAILED)


_PROJECT_PHASES = {
    "Ready": ProjectPhase.READY,
    "Pending": ProjectPhase.PENDING,
    "Terminating": ProjectPhase.TERMINATING,
    "Failed": ProjectPhase.FAILED,
}
