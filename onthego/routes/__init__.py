# onthego/routes/__init__.py
"""HTTP blueprint and Socket.IO handlers."""

NAMESPACE = "/onthego/ws"
