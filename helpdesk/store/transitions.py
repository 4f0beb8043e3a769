"""
Status transition tables.
Same-status writes are always legal; anything else must be listed here.
"""
from typing import Dict, FrozenSet, Optional

from ..errors import InvalidTransition


Table = Dict[str, FrozenSet[str]]

TICKET: Table = {
    "pending": frozenset({"in_progress", "approved", "rejected"}),
    "in_progress": frozenset({"resolved", "rejected"}),
    # reopen
    "resolved": frozenset({"pending"}),
    "rejected": frozenset({"pending"}),
    "approved": frozenset(),
}

# Overtime and leave requests share one flow
REQUEST: Table = {
    "pending": frozenset({"approved", "rejected"}),
    "approved": frozenset(),
    "rejected": frozenset(),
}

SETUP_ITEM: Table = {
    "pending": frozenset({"in_progress", "blocked", "done"}),
    "in_progress": frozenset({"pending", "blocked", "done"}),
    "blocked": frozenset({"pending", "in_progress", "done"}),
    "done": frozenset(),
}

APPROVER_ROLES = frozenset({"admin", "supervisor", "approver", "hr"})
VERIFIER_ROLES = frozenset({"admin", "supervisor"})


def check_transition(entity: str, table: Table, current: str, requested: str) -> Optional[InvalidTransition]:
    if requested == current:
        return None
    if requested not in table.get(current, frozenset()):
        return InvalidTransition(entity, current, requested)
    return None
