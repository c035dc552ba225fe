"""
Action lifecycle state machine definitions.

This module defines the per-action terminal states, the allowed transitions
between action statuses, and the derivation of the group status of a batch.

The transition table is passive and validation-only: the engine records
whether an observed transition was expected, but handlers remain the
authority on the next status and nothing here raises.
"""

from __future__ import annotations

from typing import Iterable

from action_engine.core.domain.types import Action, ActionGroupStatus, ActionStatus

# Terminal action states: once reached, the action is never dispatched again.
ACTION_TERMINAL_STATES: frozenset[str] = frozenset(
    {
        "Aborted",
        "Failed",
        "Stored",
    }
)

# Terminal group states: once reached, the polling loop exits.
GROUP_TERMINAL_STATES: frozenset[str] = frozenset(
    {
        "Completed",
        "Aborted",
    }
)


# Allowed action status transitions.
#
# Key   : previous status (or None if the action was not previously observed)
# Value : set of allowed next statuses
#
# Notes:
# - Repeated statuses (e.g. Submitted -> Submitted) are allowed, a handler
#   polling an unconfirmed transaction reports the same status again.
# - Terminal statuses have no outgoing transitions.
ACTION_ALLOWED_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({"Pending"}),

    "Pending": frozenset(
        {
            "Pending",
            "Submitted",
            "Confirmed",
            "Stored",
            "Failed",
            "Aborted",
        }
    ),

    "Submitted": frozenset(
        {
            "Submitted",
            "Confirmed",
            "Failed",
            "Aborted",
        }
    ),

    "Confirmed": frozenset(
        {
            "Confirmed",
            "Stored",
            "Failed",
            "Aborted",
        }
    ),
}


def is_terminal_action_status(status: str) -> bool:
    """Return True if the given action status is terminal."""
    return status in ACTION_TERMINAL_STATES


def is_terminal_group_status(status: str) -> bool:
    """Return True if the given group status ends the batch."""
    return status in GROUP_TERMINAL_STATES


def is_valid_transition(prev_status: str | None, next_status: str) -> bool:
    """Return True if the transition prev_status -> next_status is allowed."""
    allowed = ACTION_ALLOWED_TRANSITIONS.get(prev_status)
    if allowed is None:
        return False
    return next_status in allowed


def pending_actions(actions: Iterable[Action]) -> list[Action]:
    """Return the non-terminal actions, preserving snapshot order."""
    return [a for a in actions if not is_terminal_action_status(a.action_status)]


def derive_group_status(
    statuses: Iterable[ActionStatus],
    current: ActionGroupStatus,
) -> ActionGroupStatus:
    """Derive the group status from the action statuses.

    Precedence:
    - any Aborted action aborts the group
    - all Stored completes the group
    - all terminal without being all Stored aborts the group (nothing
      is left to poll, and the batch can no longer complete)
    - otherwise the current status is kept (Pending is promoted to Running)
    """
    observed = list(statuses)

    if any(s == "Aborted" for s in observed):
        return "Aborted"
    if all(s == "Stored" for s in observed):
        return "Completed"
    if all(is_terminal_action_status(s) for s in observed):
        return "Aborted"
    if is_terminal_group_status(current):
        return current
    return "Running"
