from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure "backend" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = PROJECT_ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Tests drive Socket.IO through the in-process test client; no eventlet.
os.environ["SOCKETIO_ASYNC_MODE"] = "threading"
