# onthego/routes/websocket/__init__.py
"""WebSocket route handlers initialization."""

import logging

from onthego.routes import NAMESPACE

from .connection import ConnectionHandler
from .views import ViewHandler

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, get_manager=None):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        get_manager: Optional callable returning the SessionManager; the
            global manager, emitting through ``socketio``, is used otherwise
    """
    logger.info("Registering WebSocket handlers...")

    handlers = [
        ConnectionHandler(socketio, NAMESPACE, get_manager),
        ViewHandler(socketio, NAMESPACE, get_manager),
    ]
    for handler in handlers:
        logger.info(f"Registering {type(handler).__name__} for namespace: {NAMESPACE}")
        handler.register_handlers()

    logger.info("WebSocket handlers registered")


__all__ = ['register_websocket_handlers', 'NAMESPACE']
