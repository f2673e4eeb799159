from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_auth_session, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications/count", methods=["GET"], endpoint="notification_count")
    @login_required
    async def notification_count():
        # A request cannot hold a live subscription; take one snapshot and drop it.
        watcher = container.notification_watcher()
        try:
            count = await watcher.watch(current_auth_session())
        finally:
            watcher.close()
        return jsonify({"count": count})
