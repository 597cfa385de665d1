"""
Booking status state machine.

    pending  -> accepted | rejected   (trainer)
    accepted -> completed             (trainer)
    pending  -> cancelled             (client)
    accepted -> cancelled             (client)

rejected, completed and cancelled are terminal. Once an edge exists, its
target alone decides which party may take it; nothing moves back to pending.
"""

from ..errors import Forbidden, InvalidState

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
COMPLETED = "completed"
CANCELLED = "cancelled"

TRAINER = "trainer"
CLIENT = "client"

TRANSITIONS = {
    PENDING: {ACCEPTED, REJECTED, CANCELLED},
    ACCEPTED: {COMPLETED, CANCELLED},
    REJECTED: set(),
    COMPLETED: set(),
    CANCELLED: set(),
}

ACTOR_FOR_TARGET = {
    ACCEPTED: TRAINER,
    REJECTED: TRAINER,
    COMPLETED: TRAINER,
    CANCELLED: CLIENT,
}

TERMINAL = frozenset(state for state, targets in TRANSITIONS.items() if not targets)


def is_terminal(status):
    return status in TERMINAL


def can_transition(current, target):
    return target in TRANSITIONS.get(current, set())


def check_transition(current, target, actor):
    """
    Validate a status change requested by `actor` ("trainer" or "client").

    Raises InvalidState when `target` is not reachable from `current`, and
    Forbidden when the edge exists but belongs to the other party.
    """
    if not can_transition(current, target):
        raise InvalidState(f"Cannot change booking status from '{current}' to '{target}'")
    required = ACTOR_FOR_TARGET[target]
    if required != actor:
        raise Forbidden(f"Only the {required} can move a booking to '{target}'")
