from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/<int:student_id>/attendance", methods=["GET"], endpoint="student_attendance")
    def student_attendance(student_id: int):
        return jsonify({"success": True, **container.student_service.dashboard(student_id)})

    @app.route("/api/students/<int:student_id>/history", methods=["GET"], endpoint="student_history")
    def student_history(student_id: int):
        container.student_service.get_student(student_id)
        history = container.session_ledger.absence_history(student_id)
        return jsonify({"success": True, "history": [h.to_dict() for h in history]})

    @app.route("/api/analytics/section", methods=["GET"], endpoint="section_analytics")
    def section_analytics():
        stats = container.student_service.section_analytics(
            request.args.get("branch", ""),
            request.args.get("year"),
            request.args.get("section", ""),
            request.args.get("subject", ""),
        )
        return jsonify({"success": True, **stats})

    @app.route("/api/admin/promotions", methods=["POST"], endpoint="promote_cohort")
    def promote_cohort():
        data = json_body()
        count = container.promotion_job.promote(data.get("target_year"))
        return jsonify({"success": True, "affected_count": count})
