# critico/infrastructure/realtime/socketio_server.py
from __future__ import annotations

from flask_socketio import SocketIO

# configured in create_app (async mode and CORS come from settings)
socketio = SocketIO()
