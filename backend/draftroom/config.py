import os
import sys


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "5"))
    MAX_TEAMS = int(os.environ.get("MAX_TEAMS", "32"))

    # Empty-room cleanup
    LEAVE_GRACE_SEC = float(os.environ.get("LEAVE_GRACE_SEC", "600"))
    DISCONNECT_GRACE_SEC = float(os.environ.get("DISCONNECT_GRACE_SEC", "60"))


def resolve_async_mode() -> str:
    """Pick the Socket.IO async mode.

    ``SOCKETIO_ASYNC_MODE`` wins. Otherwise eventlet, except on Windows and on
    Python >= 3.13 where eventlet is unreliable and threading is used instead.
    """
    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        return env_async_mode
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"
