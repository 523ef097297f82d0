from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..container import Container


def _slot_rows(grouped: dict) -> dict:
    return {day: [s.to_dict() for s in slots] for day, slots in grouped.items()}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/instructors/<int:instructor_id>/slots", methods=["POST"], endpoint="add_slot")
    def add_slot(instructor_id: int):
        data = json_body()
        spec = container.slot_service.build_spec(
            day=data.get("day"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            period_index=data.get("period_index"),
            branch=data.get("branch"),
            year=data.get("year"),
            section=data.get("section"),
            subject=data.get("subject"),
            room=data.get("room"),
            kind=data.get("type") or data.get("kind") or "Lecture",
            batch=data.get("batch"),
        )
        slot = container.slot_service.add_slot(instructor_id, spec)
        return jsonify({"success": True, "message": "Schedule added successfully", "slot": slot.to_dict()}), 201

    @app.route(
        "/api/instructors/<int:instructor_id>/slots/<int:slot_id>",
        methods=["DELETE"],
        endpoint="remove_slot",
    )
    def remove_slot(instructor_id: int, slot_id: int):
        container.slot_service.remove_slot(instructor_id, slot_id)
        return jsonify({"success": True, "message": "Slot removed successfully"})

    @app.route("/api/instructors/<int:instructor_id>/slots", methods=["GET"], endpoint="instructor_schedule")
    def instructor_schedule(instructor_id: int):
        grouped = container.slot_service.weekly_timetable(instructor_id)
        return jsonify({"success": True, "schedule": _slot_rows(grouped)})

    @app.route("/api/instructors/<int:instructor_id>/classes", methods=["GET"], endpoint="instructor_classes")
    def instructor_classes(instructor_id: int):
        return jsonify({"success": True, "classes": container.slot_service.list_classes(instructor_id)})

    @app.route("/api/cohorts/<branch>/<int:year>/<section>/slots", methods=["GET"], endpoint="cohort_slots")
    def cohort_slots(branch: str, year: int, section: str):
        day = request.args.get("day")
        if day:
            slots = container.slot_service.list_by_cohort(branch, year, section, day)
            return jsonify({"success": True, "day": day, "slots": [s.to_dict() for s in slots]})

        grouped = container.slot_service.cohort_week(branch, year, section)
        return jsonify({"success": True, "schedule": _slot_rows(grouped)})
