# onthego/routes/websocket/base.py
"""Base WebSocket handler with common functionality."""

import logging

from flask import request
from flask_socketio import emit

from onthego.routes import NAMESPACE

logger = logging.getLogger(__name__)


class BaseWebSocketHandler:
    """Base class for WebSocket handlers with common functionality."""

    def __init__(self, socketio, namespace=NAMESPACE, get_manager=None):
        self.socketio = socketio
        self.namespace = namespace
        self._get_manager = get_manager

    @property
    def manager(self):
        """Session manager whose emitter pushes to this namespace."""
        if self._get_manager is not None:
            return self._get_manager()
        from onthego.views.session_manager import get_session_manager
        return get_session_manager(self.emit_to_room)

    def emit_to_client(self, event, data, room=None):
        """Emit event to a specific client or room."""
        try:
            if room:
                self.socketio.emit(event, data, room=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def emit_to_room(self, event, data, sid):
        """Emitter for work finishing outside any request context."""
        self.emit_to_client(event, data, room=sid)

    def get_client_info(self):
        """Get information about the connected client."""
        return {
            "sid": request.sid,
            "ip": request.remote_addr,
            "origin": request.headers.get('Origin', 'unknown'),
        }

    def log_event(self, event_name, data=None):
        """Log WebSocket events consistently."""
        sid = request.sid
        if data:
            logger.info(f"[WS] {event_name} - Client: {sid}, Data: {data}")
        else:
            logger.info(f"[WS] {event_name} - Client: {sid}")

    def handle_error(self, error, event_name=""):
        """Handle and log errors consistently."""
        logger.error(f"[WS] Error in {event_name} - Client: {request.sid}, Error: {error}")
        self.emit_to_client('error', {'message': str(error), 'event': event_name})
