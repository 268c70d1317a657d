from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, current_user_id, json_body, to_json
from ..container import Container
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import Decision


def register(app: Flask, container: Container) -> None:
    service = container.headcount_service

    @app.route("/api/companies/<company_id>/headcount-requests", methods=["GET"], endpoint="company_headcount_requests")
    @api_view
    def company_headcount_requests(company_id: str):
        data = service.list_for_company(company_id, limit=request.args.get("limit") or DEFAULT_LIST_LIMIT)
        return jsonify(
            {
                "success": True,
                "pending": to_json(data.pending),
                "processed": to_json(data.processed),
                "limit": data.limit,
                "truncated": data.truncated,
                "can_approve": service.can_approve(current_user_id(), company_id),
                "governance_bodies": to_json(container.lookup_resolver.eligible_governance_bodies(company_id)),
            }
        )

    @app.route("/api/headcount-requests", methods=["POST"], endpoint="create_headcount_request")
    @api_view
    def create_headcount_request():
        body = json_body()
        req = service.create(
            position_id=body.get("position_id") or "",
            requester_id=current_user_id(),
            requested_headcount=body.get("requested_headcount"),
            reason=body.get("reason") or "",
            governance_body_id=body.get("governance_body_id"),
        )
        return jsonify({"success": True, "message": "Headcount request submitted", "request": to_json(req)}), 201

    @app.route("/api/headcount-requests/<request_id>", methods=["GET"], endpoint="headcount_request_detail")
    @api_view
    def headcount_request_detail(request_id: str):
        detail = service.get_detail(request_id)
        return jsonify({"success": True, **to_json(detail)})

    def _resolve(request_id: str, decision: Decision):
        body = json_body()
        req = service.resolve(
            request_id=request_id,
            actor_id=current_user_id(),
            decision=decision,
            notes=body.get("notes"),
            acknowledged=body.get("acknowledged"),
        )
        return jsonify(
            {
                "success": True,
                "message": f"Request {req.status.value} with digital signature",
                "request": to_json(req),
            }
        )

    @app.route("/api/headcount-requests/<request_id>/approve", methods=["POST"], endpoint="approve_headcount_request")
    @api_view
    def approve_headcount_request(request_id: str):
        return _resolve(request_id, Decision.APPROVE)

    @app.route("/api/headcount-requests/<request_id>/reject", methods=["POST"], endpoint="reject_headcount_request")
    @api_view
    def reject_headcount_request(request_id: str):
        return _resolve(request_id, Decision.REJECT)
