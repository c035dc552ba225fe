"""
Semantic test: group status derivation.

Invariant:
Any Aborted action aborts the group, all Stored completes it, and a group
whose actions are all terminal without being all Stored cannot complete.
"""

from __future__ import annotations

import pytest

from action_engine.core.domain.action_state_machine import (
    derive_group_status,
    is_terminal_action_status,
    is_terminal_group_status,
    is_valid_transition,
)


def test_all_stored_completes_group() -> None:
    assert derive_group_status(["Stored", "Stored"], "Running") == "Completed"


def test_aborted_dominates_stored() -> None:
    assert derive_group_status(["Stored", "Aborted", "Stored"], "Running") == "Aborted"


def test_aborted_dominates_pending_siblings() -> None:
    assert derive_group_status(["Aborted", "Pending", "Confirmed"], "Running") == "Aborted"


def test_failed_with_pending_sibling_keeps_running() -> None:
    assert derive_group_status(["Failed", "Submitted"], "Running") == "Running"


def test_settled_with_failure_aborts_group() -> None:
    assert derive_group_status(["Stored", "Failed"], "Running") == "Aborted"


def test_pending_group_is_promoted_to_running() -> None:
    assert derive_group_status(["Pending"], "Pending") == "Running"


def test_empty_batch_completes() -> None:
    assert derive_group_status([], "Running") == "Completed"


@pytest.mark.parametrize("status", ["Stored", "Failed", "Aborted"])
def test_terminal_action_statuses(status: str) -> None:
    assert is_terminal_action_status(status)


@pytest.mark.parametrize("status", ["Pending", "Submitted", "Confirmed"])
def test_non_terminal_action_statuses(status: str) -> None:
    assert not is_terminal_action_status(status)


def test_group_terminal_statuses() -> None:
    assert is_terminal_group_status("Completed")
    assert is_terminal_group_status("Aborted")
    assert not is_terminal_group_status("Running")
    assert not is_terminal_group_status("Pending")


def test_transition_table_is_passive() -> None:
    assert is_valid_transition(None, "Pending")
    assert is_valid_transition("Pending", "Submitted")
    assert is_valid_transition("Confirmed", "Stored")
    # Terminal statuses have no outgoing transitions.
    assert not is_valid_transition("Stored", "Pending")
    assert not is_valid_transition("Submitted", "Pending")
