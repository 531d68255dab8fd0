from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config, resolve_async_mode
from .draft.registry import RoomRegistry
from .realtime.handlers import register_socketio_handlers
from .realtime.lifecycle import ParticipantLifecycle
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(config: Mapping[str, Any] | None = None) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=resolve_async_mode(),
    )

    registry = RoomRegistry(
        code_length=app.config["ROOM_CODE_LENGTH"],
        max_teams=app.config["MAX_TEAMS"],
    )
    lifecycle = ParticipantLifecycle(
        registry,
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
        leave_grace_sec=app.config["LEAVE_GRACE_SEC"],
        disconnect_grace_sec=app.config["DISCONNECT_GRACE_SEC"],
    )
    app.extensions["draftroom.registry"] = registry

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, registry, lifecycle)

    return app, socketio
