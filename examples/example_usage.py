"""Example: drive the service layer directly (no Flask, in-memory store).

Controllers are a thin layer; the workflow rules live in the services.
"""

from src.headcount_workflow.headcount_workflow.container import build_container
from src.headcount_workflow.headcount_workflow.database.memory_store import InMemoryRecordStore


def main():
    store = InMemoryRecordStore(
        {
            "departments": [{"id": "dept-eng", "company_id": "acme", "name": "Engineering"}],
            "positions": [
                {"id": "pos-swe", "department_id": "dept-eng", "title": "Software Engineer", "code": "SWE",
                 "authorized_headcount": 5, "is_active": True},
            ],
            "profiles": [
                {"id": "u-requester", "full_name": "Avery Manager", "email": "avery@example.com", "is_active": True},
                {"id": "u-chair", "full_name": "Jordan Chair", "email": "jordan@example.com", "is_active": True},
            ],
            "governance_bodies": [
                {"id": "board", "company_id": "acme", "name": "Board", "body_type": "board",
                 "can_approve_headcount": True, "is_active": True},
            ],
            "governance_members": [
                {"id": "m1", "governance_body_id": "board", "employee_id": "u-chair", "role_in_body": "chair",
                 "start_date": "2024-01-01", "end_date": None, "is_active": True},
            ],
        }
    )
    container = build_container(store=store)
    service = container.headcount_service

    req = service.create(position_id="pos-swe", requester_id="u-requester", requested_headcount=8, reason="growth")
    service.approve(request_id=req.request_id, actor_id="u-chair", notes="ok", acknowledged=True)

    detail = service.get_detail(req.request_id)
    print(detail.request.status.value, container.positions_repo.get("pos-swe").authorized_headcount)
    for entry in detail.history:
        print(entry.seq, entry.old_status, "->", entry.new_status.value)


if __name__ == "__main__":
    main()
