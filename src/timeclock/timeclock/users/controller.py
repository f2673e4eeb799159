from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import current_auth_session, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    async def me():
        auth = current_auth_session()
        return jsonify({"user_id": auth.user_id, "role": auth.role.value})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    async def logout():
        session.clear()
        return jsonify({"success": True})
