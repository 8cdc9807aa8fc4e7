from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/members", methods=["GET"], endpoint="members_list")
    def members_list():
        return jsonify([m.to_dict() for m in container.members_repo.list_active()])
