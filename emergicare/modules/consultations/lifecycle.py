# emergicare/modules/consultations/lifecycle.py
"""
Consultation state machine.

    pending -> assigned -> in_progress -> completed
    pending -> cancelled

Terminal states absorb. Each action names its single required predecessor,
so nothing can be skipped or applied twice.
"""

from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional
from uuid import UUID

from emergicare.common.exceptions import InvalidTransition
from emergicare.models.models import ConsultationStatus


class Transition(NamedTuple):
    source: ConsultationStatus
    target: ConsultationStatus
    timestamp_field: Optional[str]


TRANSITIONS: Dict[str, Transition] = {
    "claim": Transition(ConsultationStatus.PENDING, ConsultationStatus.ASSIGNED, None),
    "start": Transition(ConsultationStatus.ASSIGNED, ConsultationStatus.IN_PROGRESS, "started_at"),
    "complete": Transition(ConsultationStatus.IN_PROGRESS, ConsultationStatus.COMPLETED, "completed_at"),
    "cancel": Transition(ConsultationStatus.PENDING, ConsultationStatus.CANCELLED, None),
}

TERMINAL_STATUSES = frozenset({ConsultationStatus.COMPLETED, ConsultationStatus.CANCELLED})
ACTIVE_STATUSES = frozenset(ConsultationStatus) - TERMINAL_STATUSES

# Statuses in which a doctor must be attached
DOCTOR_STATUSES = frozenset({
    ConsultationStatus.ASSIGNED, ConsultationStatus.IN_PROGRESS, ConsultationStatus.COMPLETED,
})
STARTED_STATUSES = frozenset({ConsultationStatus.IN_PROGRESS, ConsultationStatus.COMPLETED})


def allowed_targets(status: ConsultationStatus) -> List[ConsultationStatus]:
    return [t.target for t in TRANSITIONS.values() if t.source == status]


def is_terminal(status: ConsultationStatus) -> bool:
    return status in TERMINAL_STATUSES


def require_transition(action: str, current: ConsultationStatus) -> Transition:
    """Return the transition for ``action`` or raise InvalidTransition."""
    try:
        transition = TRANSITIONS[action]
    except KeyError:
        raise ValueError(f"Unknown consultation action: {action}")
    if current != transition.source:
        raise InvalidTransition(
            f"Cannot {action} a consultation that is {current.value.replace('_', ' ')}."
        )
    return transition


def transition_values(
    action: str,
    now: datetime,
    doctor_id: Optional[UUID] = None,
) -> Dict[str, Any]:
    """Column values written by ``action``: the new status plus side effects."""
    transition = TRANSITIONS[action]
    values: Dict[str, Any] = {"status": transition.target}
    if transition.timestamp_field:
        values[transition.timestamp_field] = now
    if action == "claim":
        if doctor_id is None:
            raise ValueError("claim requires the claiming doctor's id")
        values["doctor_id"] = doctor_id
    return values


def invariant_violations(row: Any) -> List[str]:
    """List the lifecycle invariants ``row`` breaks; empty when consistent."""
    problems = []
    if (row.doctor_id is not None) != (row.status in DOCTOR_STATUSES):
        problems.append("doctor_id must be set exactly when a doctor is attached")
    if (row.started_at is not None) != (row.status in STARTED_STATUSES):
        problems.append("started_at must be set exactly once the consultation started")
    if (row.completed_at is not None) != (row.status == ConsultationStatus.COMPLETED):
        problems.append("completed_at must be set exactly when completed")
    return problems
