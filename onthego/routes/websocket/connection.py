# onthego/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import logging
import time

from .base import BaseWebSocketHandler

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Creates an orchestrator per connection and drops it on disconnect."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            client_info = self.get_client_info()
            self.log_event('connect', {'origin': client_info['origin']})

            try:
                session = self.manager.create_session(client_info['sid'], client_info['ip'])
            except Exception as e:
                logger.exception("Failed to create orchestrator session")
                self.handle_error(e, 'connect')
                return False

            self.emit_to_client('connected', {
                'session_id': session.session_id,
                'status': 'connected',
            })

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(*args):
            client_info = self.get_client_info()
            self.manager.remove_session(client_info['sid'], 'client_disconnect')
            logger.info(f"WebSocket disconnected, session {client_info['sid']} removed")

        @self.socketio.on('ping', namespace=self.namespace)
        def handle_ping():
            self.emit_to_client('pong', {'timestamp': time.time()})
