"""
OnTheGo – main application entry point

* Flask app serving the single page, the Yelp proxy, the concierge and
  the rendered map documents.
* Socket.IO (threading mode) carries view interactions to one view
  orchestrator per connected browser; all orchestrators share a single
  asyncio loop thread.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
app = Flask(__name__)

flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
if "FLASK_SECRET_KEY" not in os.environ:
    logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
app.secret_key = flask_secret_key

app.config.update(
    SESSION_COOKIE_SECURE=False,
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SAMESITE="Lax",
    PERMANENT_SESSION_LIFETIME=86400,
)

# CORS for local dev / cross‑origin front‑end requests
CORS(app, origins="*", supports_credentials=True)

# --------------------------------------------------------------------------- #
# Socket.IO
# --------------------------------------------------------------------------- #
socketio = SocketIO(
    app,
    cors_allowed_origins="*",
    async_mode="threading",
    logger=True,
    engineio_logger=False,
)
logger.info("Socket.IO initialised (async_mode=threading)")

# --------------------------------------------------------------------------- #
# Blueprints & WebSocket handlers
# --------------------------------------------------------------------------- #
from onthego.api.config import get_port  # noqa: E402
from onthego.routes import NAMESPACE  # noqa: E402
from onthego.routes.api import create_api_blueprint  # noqa: E402
from onthego.routes.websocket import register_websocket_handlers  # noqa: E402
from onthego.views.session_manager import get_session_manager  # noqa: E402


def _emit(event, payload, sid):
    socketio.emit(event, payload, room=sid, namespace=NAMESPACE)


def _manager():
    return get_session_manager(_emit)


base_dir = os.path.dirname(os.path.abspath(__file__))
app.register_blueprint(create_api_blueprint(base_dir, _manager))
register_websocket_handlers(socketio, _manager)

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting OnTheGo on http://localhost:%d", port)
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)

__all__ = ["app", "socketio"]
