from __future__ import annotations

from datetime import date

import pytest

from src.headcount_workflow.headcount_workflow.database.memory_store import InMemoryRecordStore
from src.headcount_workflow.headcount_workflow.governance.authorization import ApprovalAuthority
from src.headcount_workflow.headcount_workflow.governance.repository import GovernanceRepository

from conftest import seed_tables

TODAY = date(2026, 2, 1)


def _authority(store):
    return ApprovalAuthority(GovernanceRepository(store), today=lambda: TODAY)


@pytest.fixture
def store():
    return InMemoryRecordStore(seed_tables())


def test_active_member_of_approving_body_can_approve(store):
    assert _authority(store).can_approve("u-chair", "c1") is True


def test_other_company_is_denied(store):
    assert _authority(store).can_approve("u-chair", "c2") is False


def test_member_of_non_approving_body_is_denied(store):
    assert _authority(store).can_approve("u-outsider", "c1") is False


@pytest.mark.parametrize("actor,scope", [("", "c1"), ("u-chair", ""), (None, "c1"), ("u-nobody", "c1")])
def test_missing_or_unknown_inputs_are_denied(store, actor, scope):
    assert _authority(store).can_approve(actor, scope) is False


@pytest.mark.parametrize(
    "patch",
    [
        {"is_active": False},
        {"start_date": date(2026, 2, 2)},
        {"end_date": date(2026, 1, 31)},
    ],
)
def test_membership_must_be_active_today(store, patch):
    store.update("governance_members", "m-chair", patch)
    assert _authority(store).can_approve("u-chair", "c1") is False


def test_membership_ending_today_still_counts(store):
    store.update("governance_members", "m-chair", {"end_date": TODAY})
    assert _authority(store).can_approve("u-chair", "c1") is True


@pytest.mark.parametrize("patch", [{"is_active": False}, {"can_approve_headcount": False}])
def test_body_must_be_active_and_approving(store, patch):
    store.update("governance_bodies", "b-board", patch)
    assert _authority(store).can_approve("u-chair", "c1") is False


def test_any_qualifying_membership_is_enough(store):
    store.update("governance_bodies", "b-board", {"is_active": False})
    store.insert(
        "governance_bodies",
        {"id": "b-exec", "company_id": "c1", "name": "Executive Committee", "body_type": "management",
         "can_approve_headcount": True, "is_active": True},
    )
    store.insert(
        "governance_members",
        {"id": "m2", "governance_body_id": "b-exec", "employee_id": "u-chair", "role_in_body": "member",
         "start_date": date(2025, 6, 1), "end_date": None, "is_active": True},
    )
    assert _authority(store).can_approve("u-chair", "c1") is True
