from __future__ import annotations

from datetime import date

import pytest

from src.headcount_workflow.headcount_workflow.container import build_container
from src.headcount_workflow.headcount_workflow.database.memory_store import InMemoryRecordStore


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def notify(self, event, payload):
        self.sent.append((event, dict(payload)))
        if self.fail:
            raise RuntimeError("relay down")


def seed_tables(*, headcount: int = 5) -> dict:
    """Company c1 with one approving board (chair u-chair) and a social committee (u-outsider)."""
    return {
        "departments": [
            {"id": "d1", "company_id": "c1", "name": "Engineering"},
            {"id": "d2", "company_id": "c2", "name": "Sales"},
        ],
        "positions": [
            {"id": "p1", "department_id": "d1", "title": "Software Engineer", "code": "SWE",
             "authorized_headcount": headcount, "is_active": True},
            {"id": "p2", "department_id": "d2", "title": "Account Executive", "code": "AE",
             "authorized_headcount": 3, "is_active": True},
        ],
        "profiles": [
            {"id": "u-requester", "full_name": "Avery Manager", "email": "avery@example.com", "is_active": True},
            {"id": "u-chair", "full_name": "Jordan Chair", "email": "jordan@example.com", "is_active": True},
            {"id": "u-outsider", "full_name": None, "email": "sam@example.com", "is_active": True},
        ],
        "governance_bodies": [
            {"id": "b-board", "company_id": "c1", "name": "Board of Directors", "body_type": "board",
             "description": None, "can_approve_headcount": True, "is_active": True},
            {"id": "b-social", "company_id": "c1", "name": "Social Committee", "body_type": "committee",
             "description": None, "can_approve_headcount": False, "is_active": True},
        ],
        "governance_members": [
            {"id": "m-chair", "governance_body_id": "b-board", "employee_id": "u-chair", "role_in_body": "chair",
             "start_date": date(2024, 1, 1), "end_date": None, "is_active": True},
            {"id": "m-outsider", "governance_body_id": "b-social", "employee_id": "u-outsider",
             "role_in_body": "member", "start_date": date(2024, 1, 1), "end_date": None, "is_active": True},
        ],
    }


@pytest.fixture
def store():
    return InMemoryRecordStore(seed_tables())


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def container(store, notifier):
    return build_container(store=store, notifier=notifier)


@pytest.fixture
def service(container):
    return container.headcount_service
