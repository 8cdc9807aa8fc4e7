from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.enums import ErrorCode, LogFamily
from .gateway import ClockResponse

_STATUS_BY_CODE = {
    ErrorCode.UNKNOWN_MEMBER: 400,
    ErrorCode.UNKNOWN_SESSION: 400,
    ErrorCode.NO_ACTIVE_SESSION: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def clock_json(result: ClockResponse):
    """Serialize a gateway result; a duplicate sign-in is answered with 200 and the existing id."""
    status = 200 if result.success else _STATUS_BY_CODE.get(result.code, 200)
    return jsonify(result.to_dict()), status


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/api/clock/lab", methods=["POST"], endpoint="clock_lab")
    def clock_lab():
        data = _body()
        return clock_json(container.clock_gateway.lab(data.get("email"), data.get("action")))

    @app.route("/api/clock/lab", methods=["GET"], endpoint="clock_lab_pending")
    def clock_lab_pending():
        return jsonify(container.clock_gateway.list_pending(LogFamily.LAB))

    @app.route("/api/clock/external", methods=["GET"], endpoint="clock_external_pending")
    def clock_external_pending():
        return jsonify(container.clock_gateway.list_pending(LogFamily.EXTERNAL))

    @app.route("/api/clock/external/submit", methods=["POST"], endpoint="clock_external_submit")
    def clock_external_submit():
        data = _body()
        return clock_json(
            container.clock_gateway.external_submit(data.get("email"), data.get("hours"), data.get("message"))
        )

    @app.route("/api/clock/external/respond", methods=["POST"], endpoint="clock_external_respond")
    def clock_external_respond():
        data = _body()
        if data.get("id") is None and data.get("ref") is not None:
            result = container.clock_gateway.external_respond_by_ref(
                data.get("ref"), data.get("action"), data.get("category")
            )
        else:
            result = container.clock_gateway.external_respond(data.get("id"), data.get("action"), data.get("category"))
        return clock_json(result)

    @app.route("/api/clock/external/ref", methods=["POST"], endpoint="clock_external_ref")
    def clock_external_ref():
        data = _body()
        return clock_json(container.clock_gateway.attach_external_ref(data.get("id"), data.get("ref")))
