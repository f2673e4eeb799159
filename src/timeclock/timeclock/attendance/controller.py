from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_elapsed, now_local, seconds_between
from ..common.web import current_auth_session, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from ..location.capture import ClientReportedPositionProvider
from .clock import classify_elapsed
from .model import AttendanceRecord, OpenRecord
from .service import AttendanceStateMachine


def record_to_json(record: Optional[AttendanceRecord]) -> Optional[dict]:
    if record is None:
        return None
    return {
        "entry_id": record.entry_id,
        "clock_in_time": record.clock_in_time.isoformat(),
        "clock_out_time": record.clock_out_time.isoformat() if record.clock_out_time else None,
        "location_in": record.location_in.to_dict() if record.location_in else None,
        "location_out": record.location_out.to_dict() if record.location_out else None,
        "daily_report": record.daily_report,
    }


def _json_object() -> dict:
    """Request body as a dict; a missing or unparsable body counts as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def status_to_json(machine: AttendanceStateMachine) -> dict:
    current = machine.current
    payload = {
        "state": machine.state.value,
        "record": record_to_json(current.record),
        "elapsed": None,
        "worked": machine.worked_duration_display,
    }
    if isinstance(current, OpenRecord):
        seconds = seconds_between(current.record.clock_in_time, now_local())
        payload["elapsed"] = {
            "seconds": seconds,
            "display": format_elapsed(seconds),
            "urgency": classify_elapsed(seconds).value,
        }
    return payload


def register(app: Flask, container: Container) -> None:
    async def _activated_machine(payload=None) -> AttendanceStateMachine:
        machine = container.state_machine(current_auth_session(), ClientReportedPositionProvider(payload))
        await machine.activate()
        return machine

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @login_required
    async def attendance_status():
        machine = await _activated_machine()
        return jsonify(status_to_json(machine))

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    async def clock_in():
        machine = await _activated_machine(_json_object())
        await machine.clock_in()
        return jsonify({"success": True, **status_to_json(machine)}), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    async def clock_out():
        machine = await _activated_machine(_json_object())
        await machine.clock_out()
        return jsonify({"success": True, **status_to_json(machine)})

    @app.route("/api/attendance/report", methods=["POST"], endpoint="submit_report")
    @login_required
    async def submit_report():
        data = _json_object()
        machine = await _activated_machine()
        record = await machine.submit_report(str(data.get("text") or ""))
        return jsonify({"success": True, **status_to_json(machine), "closed": record_to_json(record)})
