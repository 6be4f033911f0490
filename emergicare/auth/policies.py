# emergicare/auth/policies.py
"""
Row-level access rules, one predicate per (table, operation).

Every predicate has the same signature:

    predicate(caller_id, caller_role, current, proposed) -> bool

``current`` is the row as stored (None for inserts) and ``proposed`` is the
row as it would look after the write (None for reads). Rows are any objects
exposing the column names as attributes: ORM instances, pydantic models or
SimpleNamespace all work. ``caller_role`` is None when the caller has no
profile yet, which denies every role-gated rule.
"""

from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from emergicare.common.exceptions import AuthorizationError
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import ConsultationStatus, UserRole

Predicate = Callable[[UUID, Optional[UserRole], Any, Any], bool]


# ============================================================================
# PROFILES
# ============================================================================

def can_read_profile(caller_id, caller_role, current, proposed=None) -> bool:
    return current is not None and current.id == caller_id


def can_create_profile(caller_id, caller_role, current, proposed) -> bool:
    return proposed is not None and proposed.id == caller_id


def can_update_profile(caller_id, caller_role, current, proposed) -> bool:
    if current is None or current.id != caller_id:
        return False
    return proposed is None or proposed.id == caller_id


# ============================================================================
# DOCTORS
# ============================================================================

def can_read_doctor(caller_id, caller_role, current, proposed=None) -> bool:
    return True


def can_create_doctor(caller_id, caller_role, current, proposed) -> bool:
    return (
        proposed is not None
        and proposed.id == caller_id
        and caller_role == UserRole.DOCTOR
    )


def can_update_doctor(caller_id, caller_role, current, proposed) -> bool:
    if current is None or current.id != caller_id:
        return False
    return proposed is None or proposed.id == caller_id


# ============================================================================
# CONSULTATIONS
# ============================================================================

def can_read_consultation(caller_id, caller_role, current, proposed=None) -> bool:
    """Owner or assigned doctor; any doctor also sees the whole pending queue."""
    if current is None:
        return False
    if current.patient_id == caller_id or current.doctor_id == caller_id:
        return True
    return (
        caller_role == UserRole.DOCTOR
        and current.doctor_id is None
        and current.status == ConsultationStatus.PENDING
    )


def can_create_consultation(caller_id, caller_role, current, proposed) -> bool:
    return (
        proposed is not None
        and proposed.patient_id == caller_id
        and caller_role == UserRole.PATIENT
    )


def can_update_consultation_as_patient(caller_id, caller_role, current, proposed) -> bool:
    if current is None or current.patient_id != caller_id:
        return False
    return proposed is None or proposed.patient_id == caller_id


def can_update_consultation_as_doctor(caller_id, caller_role, current, proposed) -> bool:
    if current is None:
        return False
    entitled = current.doctor_id == caller_id or (
        current.doctor_id is None and caller_role == UserRole.DOCTOR
    )
    if not entitled:
        return False
    resulting_doctor = proposed.doctor_id if proposed is not None else current.doctor_id
    return resulting_doctor == caller_id


POLICIES: Dict[Tuple[str, str], Predicate] = {
    ("profiles", "read"): can_read_profile,
    ("profiles", "create"): can_create_profile,
    ("profiles", "update"): can_update_profile,
    ("doctors", "read"): can_read_doctor,
    ("doctors", "create"): can_create_doctor,
    ("doctors", "update"): can_update_doctor,
    ("consultations", "read"): can_read_consultation,
    ("consultations", "create"): can_create_consultation,
    ("consultations", "update_as_patient"): can_update_consultation_as_patient,
    ("consultations", "update_as_doctor"): can_update_consultation_as_doctor,
}


def is_permitted(
    table: str,
    operation: str,
    caller_id: UUID,
    caller_role: Optional[UserRole],
    current: Any = None,
    proposed: Any = None,
) -> bool:
    try:
        predicate = POLICIES[(table, operation)]
    except KeyError:
        raise ValueError(f"No access policy for {table}.{operation}")
    return predicate(caller_id, caller_role, current, proposed)


def authorize(
    table: str,
    operation: str,
    caller_id: UUID,
    caller_role: Optional[UserRole],
    current: Any = None,
    proposed: Any = None,
    message: str = GlobalMessages.NOT_FOUND,
) -> None:
    """Raise AuthorizationError unless the policy permits the operation."""
    if not is_permitted(table, operation, caller_id, caller_role, current, proposed):
        raise AuthorizationError(message)
