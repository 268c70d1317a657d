from __future__ import annotations

from datetime import date

import pytest

from src.headcount_workflow.headcount_workflow.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

CHAIR = "u-chair"


@pytest.fixture
def governance(container):
    return container.governance_service


def test_create_body_validates_type_against_lookups(governance):
    body = governance.create_body(actor_id=CHAIR, company_id="c1", name=" Audit Committee ", body_type="committee",
                                  can_approve_headcount=True)
    assert body.name == "Audit Committee"
    assert body.can_approve_headcount is True
    assert body.is_active is True

    with pytest.raises(ValidationError):
        governance.create_body(actor_id=CHAIR, company_id="c1", name="Guild", body_type="guild")
    with pytest.raises(ValidationError):
        governance.create_body(actor_id=CHAIR, company_id="c1", name="", body_type="board")


def test_create_body_defaults_flags_when_omitted(governance):
    body = governance.create_body(actor_id=CHAIR, company_id="c1", name="Works Council", body_type="committee",
                                  can_approve_headcount=None, is_active=None)
    assert body.can_approve_headcount is False
    assert body.is_active is True


@pytest.mark.parametrize("value", ["false", "yes", 1, 0])
def test_flags_must_be_real_booleans(governance, store, value):
    with pytest.raises(ValidationError):
        governance.create_body(actor_id=CHAIR, company_id="c1", name="Works Council", body_type="committee",
                               can_approve_headcount=value)
    with pytest.raises(ValidationError):
        governance.update_body(actor_id=CHAIR, body_id="b-social", changes={"can_approve_headcount": value})
    with pytest.raises(ValidationError):
        governance.update_member(actor_id=CHAIR, member_id="m-chair", changes={"is_active": value})

    assert store.count("governance_bodies") == 2
    assert governance.get_body("b-social").can_approve_headcount is False
    assert governance.get_member("m-chair").is_active is True


def test_list_bodies_can_filter_to_approving(governance):
    assert [b.body_id for b in governance.list_bodies(company_id="c1")] == ["b-board", "b-social"]
    assert [b.body_id for b in governance.list_bodies(company_id="c1", approving_only=True)] == ["b-board"]


def test_update_body_applies_known_fields_only(governance):
    updated = governance.update_body(actor_id=CHAIR, body_id="b-social",
                                     changes={"can_approve_headcount": True, "description": "  "})
    assert updated.can_approve_headcount is True
    assert updated.description is None

    with pytest.raises(ValidationError):
        governance.update_body(actor_id=CHAIR, body_id="b-social", changes={"company_id": "c2"})
    with pytest.raises(NotFoundError):
        governance.update_body(actor_id=CHAIR, body_id="missing", changes={"name": "x"})


def test_deactivated_body_stops_granting_authority(container, governance):
    assert container.headcount_service.can_approve(CHAIR, "c1") is True
    governance.update_body(actor_id=CHAIR, body_id="b-board", changes={"is_active": False})
    assert container.headcount_service.can_approve(CHAIR, "c1") is False


def test_add_member_validates_role_and_dates(governance):
    member = governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester",
                                   role_in_body="secretary", start_date="2025-01-01", end_date="2027-12-31")
    assert member.start_date == date(2025, 1, 1)
    assert member.end_date == date(2027, 12, 31)
    assert member.role_in_body == "secretary"

    with pytest.raises(ValidationError):
        governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester", role_in_body="emperor",
                              start_date="2025-01-01")
    with pytest.raises(ValidationError):
        governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester", start_date=None)
    with pytest.raises(ValidationError):
        governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester", start_date="01/02/2025")
    with pytest.raises(ValidationError):
        governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester",
                              start_date="2025-06-01", end_date="2025-05-31")
    with pytest.raises(NotFoundError):
        governance.add_member(actor_id=CHAIR, body_id="missing", employee_id="u-requester", start_date="2025-01-01")


def test_new_member_gains_authority(container, governance):
    assert container.headcount_service.can_approve("u-requester", "c1") is False
    governance.add_member(actor_id=CHAIR, body_id="b-board", employee_id="u-requester", start_date="2024-01-01")
    assert container.headcount_service.can_approve("u-requester", "c1") is True


def test_update_member_checks_date_window(governance):
    with pytest.raises(ValidationError):
        governance.update_member(actor_id=CHAIR, member_id="m-chair", changes={"end_date": "2023-12-31"})

    member = governance.update_member(actor_id=CHAIR, member_id="m-chair",
                                      changes={"end_date": "2030-01-01", "role_in_body": "vice_chair"})
    assert member.end_date == date(2030, 1, 1)
    assert member.role_in_body == "vice_chair"

    with pytest.raises(ValidationError):
        governance.update_member(actor_id=CHAIR, member_id="m-chair", changes={"employee_id": "u-other"})
    with pytest.raises(NotFoundError):
        governance.update_member(actor_id=CHAIR, member_id="missing", changes={"is_active": False})


def test_list_members(governance):
    assert [m.member_id for m in governance.list_members(body_id="b-board")] == ["m-chair"]
    with pytest.raises(NotFoundError):
        governance.list_members(body_id="missing")


@pytest.mark.parametrize("actor", ["u-outsider", "u-requester", "u-unknown", ""])
def test_changes_require_approval_authority(container, governance, store, actor):
    with pytest.raises(AuthorizationError):
        governance.add_member(actor_id=actor, body_id="b-board", employee_id=actor or "u-x", start_date="2024-01-01")
    with pytest.raises(AuthorizationError):
        governance.create_body(actor_id=actor, company_id="c1", name="Shadow Board", body_type="board",
                               can_approve_headcount=True)
    with pytest.raises(AuthorizationError):
        governance.update_body(actor_id=actor, body_id="b-social", changes={"can_approve_headcount": True})
    with pytest.raises(AuthorizationError):
        governance.update_member(actor_id=actor, member_id="m-outsider", changes={"is_active": True})

    assert store.count("governance_members") == 2
    assert store.count("governance_bodies") == 2
    assert governance.get_body("b-social").can_approve_headcount is False
    assert container.headcount_service.can_approve("u-outsider", "c1") is False


def test_authority_does_not_cross_companies(governance, store):
    store.insert(
        "governance_bodies",
        {"id": "b-c2", "company_id": "c2", "name": "Sales Board", "body_type": "board",
         "can_approve_headcount": True, "is_active": True},
    )
    with pytest.raises(AuthorizationError):
        governance.add_member(actor_id=CHAIR, body_id="b-c2", employee_id=CHAIR, start_date="2024-01-01")
    with pytest.raises(AuthorizationError):
        governance.create_body(actor_id=CHAIR, company_id="c2", name="Another", body_type="board")
