"""
Registration status workflow.

Every registrable entity moves PENDING -> SUBMITTED -> REGISTERED.
Delegates submit their own selections; only organisers confirm them.
REGISTERED is terminal: nothing in the API moves a row backwards.
"""

import logging
from typing import Dict, List, Union

from ..errors import InvalidStatusTransition, TransitionNotPermitted
from ..models.enums import RegistrationStatus, UserRole

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[RegistrationStatus, List[RegistrationStatus]] = {
    RegistrationStatus.PENDING: [RegistrationStatus.SUBMITTED],
    RegistrationStatus.SUBMITTED: [RegistrationStatus.REGISTERED],
    RegistrationStatus.REGISTERED: [],
}

# Transitions that require a specific role; others are open to anyone in scope
REQUIRED_ROLE: Dict[tuple, UserRole] = {
    (RegistrationStatus.SUBMITTED, RegistrationStatus.REGISTERED): UserRole.ADMIN,
}

StatusLike = Union[RegistrationStatus, str]


def initial_status(imported: bool = False) -> RegistrationStatus:
    """Status a new row starts in. Administrative imports land as REGISTERED."""
    if imported:
        return RegistrationStatus.REGISTERED
    return RegistrationStatus.PENDING


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    return RegistrationStatus(target) in ALLOWED_TRANSITIONS[RegistrationStatus(current)]


def validate_transition(current: StatusLike, target: StatusLike, role: StatusLike) -> bool:
    """
    Check a status change requested by a user with ``role``.

    Returns:
        True if the row must be updated, False for a same-state no-op.

    Raises:
        InvalidStatusTransition: target is not reachable from current
        TransitionNotPermitted: the role may not perform this transition
    """
    current = RegistrationStatus(current)
    target = RegistrationStatus(target)

    if current == target:
        return False

    if not can_transition(current, target):
        raise InvalidStatusTransition(
            f"Cannot change status from {current.value} to {target.value}"
        )

    required = REQUIRED_ROLE.get((current, target))
    if required is not None and UserRole(role) != required:
        raise TransitionNotPermitted(
            f"Only {required.value} users can change status from {current.value} to {target.value}"
        )

    return True


def apply_transition(entity, target: StatusLike, role: StatusLike, notes=None) -> bool:
    """
    Validate and apply a status change to an ORM row in place.

    Notes are only recorded with an actual change; a same-state request
    leaves the row untouched.
    """
    changed = validate_transition(entity.status, target, role)
    if changed:
        previous = entity.status
        entity.status = RegistrationStatus(target).value
        logger.info(f"{type(entity).__name__} {entity.id}: {previous} -> {entity.status}")
        if notes is not None:
            entity.notes = notes
    return changed
