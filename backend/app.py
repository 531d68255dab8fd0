import logging
import os
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger("draftroom")


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    try:
        from backend.draftroom.config import resolve_async_mode
    except ImportError:  # pragma: no cover
        from draftroom.config import resolve_async_mode

    # eventlet must patch the stdlib before Flask and friends are imported.
    if resolve_async_mode() == "eventlet":
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.draftroom.server import create_app
    except ImportError:  # pragma: no cover
        from draftroom.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    logger.info("draft server listening on %s:%d (async mode %s)", host, port, socketio.async_mode)

    socketio.run(
        app,
        host=host,
        port=port,
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=os.environ.get("FLASK_USE_RELOADER", "0") == "1",
    )


if __name__ == "__main__":
    main()
