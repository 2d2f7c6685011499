"""
Outcome codes for state-changing store operations.

These are normal results a caller branches on, not failures.

Dependencies: None (pure domain layer)
System role: Result vocabulary shared by the store and the services
"""

import enum


class AssignmentOutcome(str, enum.Enum):
    """
    Result of assigning a fragment to a knowledge unit.

    OK: Fragment now points at the requested unit
    ALREADY_CLUSTERED: Fragment already belonged to a unit; nothing changed
    NOT_FOUND: Fragment or unit is absent or soft-deleted
    """

    OK = "ok"
    ALREADY_CLUSTERED = "already_clustered"
    NOT_FOUND = "not_found"


class DeletionOutcome(str, enum.Enum):
    """
    Result of a soft delete.

    OK: Record is now marked deleted
    DELETION_BLOCKED: A clustered fragment prevents the deletion; nothing changed
    NOT_FOUND: Record is absent or already deleted
    """

    OK = "ok"
    DELETION_BLOCKED = "deletion_blocked"
    NOT_FOUND = "not_found"
