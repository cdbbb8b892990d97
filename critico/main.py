# critico/main.py
from __future__ import annotations

import eventlet

# must run before anything else imports socket/threading
eventlet.monkey_patch()

from critico.app_factory import create_app  # noqa: E402
from critico.infrastructure.realtime.socketio_server import socketio  # noqa: E402

app = create_app()

if __name__ == "__main__":
    # production runs under gunicorn with the eventlet worker
    socketio.run(app, host="0.0.0.0", port=5000, debug=False)
