from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/slots/<int:slot_id>/attendance", methods=["POST"], endpoint="mark_attendance")
    def mark_attendance(slot_id: int):
        data = json_body()
        if not data.get("date"):
            raise ValidationError("date is required")
        entries = data.get("attendance")
        if not isinstance(entries, list):
            raise ValidationError("attendance must be a list")

        result = container.session_ledger.mark_session(slot_id, data["date"], entries)
        return jsonify(
            {
                "success": True,
                "created": result.created,
                "affected": result.affected_count,
                "message": "Attendance marked successfully" if result.created else "Attendance updated successfully",
            }
        )

    @app.route("/api/slots/<int:slot_id>/attendance", methods=["GET"], endpoint="attendance_status")
    def attendance_status(slot_id: int):
        date_s = request.args.get("date")
        if not date_s:
            raise ValidationError("date is required")

        record = container.session_ledger.get_session(slot_id, date_s)
        if record is None:
            return jsonify({"success": True, "exists": False})
        return jsonify({"success": True, "exists": True, "absentees": sorted(record.absentee_ids)})
