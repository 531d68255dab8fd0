# Served by a single eventlet/gunicorn worker: rooms live in process memory.
try:
    from backend.draftroom.server import create_app
except ImportError:  # pragma: no cover
    from draftroom.server import create_app

app, socketio = create_app()
