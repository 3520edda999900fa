from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_endpoint
from ..core.enums import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    calendar = container.calendar_service

    def _event_fields(payload: dict) -> dict:
        return {
            "summary": payload.get("summary"),
            "start_time": payload.get("startTime"),
            "end_time": payload.get("endTime"),
            "description": payload.get("description"),
            "location": payload.get("location"),
            "category": payload.get("category"),
        }

    @app.route("/api/calendar/events", methods=["GET"], endpoint="list_calendar_events")
    @api_endpoint(Capability.VIEW_CALENDAR)
    def list_calendar_events(actor):
        events = calendar.list_events(include_past=request.args.get("all") == "true")
        return jsonify({"success": True, "events": events}), 200

    @app.route("/api/calendar/events", methods=["POST"], endpoint="create_calendar_event")
    @api_endpoint(Capability.MANAGE_CALENDAR)
    def create_calendar_event(actor):
        event = calendar.create_event(**_event_fields(request.get_json(silent=True) or {}))
        return jsonify({"success": True, "event": event}), 200

    @app.route("/api/calendar/events/<event_id>", methods=["PUT"], endpoint="update_calendar_event")
    @api_endpoint(Capability.MANAGE_CALENDAR)
    def update_calendar_event(event_id, actor):
        event = calendar.update_event(event_id, **_event_fields(request.get_json(silent=True) or {}))
        return jsonify({"success": True, "event": event}), 200

    @app.route("/api/calendar/events/<event_id>", methods=["DELETE"], endpoint="delete_calendar_event")
    @api_endpoint(Capability.MANAGE_CALENDAR)
    def delete_calendar_event(event_id, actor):
        calendar.delete_event(event_id)
        return jsonify({"success": True, "message": "Event deleted successfully"}), 200
