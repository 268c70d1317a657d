from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, current_user_id, json_body, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.governance_service

    @app.route("/api/companies/<company_id>/governance-bodies", methods=["GET", "POST"], endpoint="governance_bodies")
    @api_view
    def governance_bodies(company_id: str):
        if request.method == "POST":
            body = json_body()
            created = service.create_body(
                actor_id=current_user_id(),
                company_id=company_id,
                name=body.get("name") or "",
                body_type=body.get("body_type") or "",
                description=body.get("description"),
                can_approve_headcount=body.get("can_approve_headcount"),
                is_active=body.get("is_active"),
            )
            return jsonify({"success": True, "body": to_json(created)}), 201

        approving_only = request.args.get("approving_only") in {"1", "true", "yes"}
        bodies = service.list_bodies(company_id=company_id, approving_only=approving_only)
        return jsonify({"success": True, "bodies": to_json(bodies)})

    @app.route("/api/governance-bodies/<body_id>", methods=["PATCH"], endpoint="update_governance_body")
    @api_view
    def update_governance_body(body_id: str):
        updated = service.update_body(actor_id=current_user_id(), body_id=body_id, changes=json_body())
        return jsonify({"success": True, "body": to_json(updated)})

    @app.route("/api/governance-bodies/<body_id>/members", methods=["GET", "POST"], endpoint="governance_members")
    @api_view
    def governance_members(body_id: str):
        if request.method == "POST":
            body = json_body()
            member = service.add_member(
                actor_id=current_user_id(),
                body_id=body_id,
                employee_id=body.get("employee_id") or "",
                role_in_body=body.get("role_in_body") or "member",
                start_date=body.get("start_date"),
                end_date=body.get("end_date"),
                is_active=body.get("is_active"),
            )
            return jsonify({"success": True, "member": to_json(member)}), 201

        return jsonify({"success": True, "members": to_json(service.list_members(body_id=body_id))})

    @app.route("/api/governance-members/<member_id>", methods=["PATCH"], endpoint="update_governance_member")
    @api_view
    def update_governance_member(member_id: str):
        member = service.update_member(actor_id=current_user_id(), member_id=member_id, changes=json_body())
        return jsonify({"success": True, "member": to_json(member)})

    @app.route("/api/lookups/<category>", methods=["GET"], endpoint="lookup_values")
    @api_view
    def lookup_values(category: str):
        return jsonify({"success": True, "category": category, "values": to_json(container.lookup_catalog.values(category))})
