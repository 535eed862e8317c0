"""
Socket module: initialize once, use anywhere.

Usage in main.py:
    from navi.socket import init_socket, sio, socket_app
    init_socket()          # registers palette event handlers
    app.mount("/socket.io", socket_app)
"""

import logging

from navi.socket.server import sio, socket_app, presenters

__all__ = [
    "init_socket",
    "sio",
    "socket_app",
    "presenters",
]

logger = logging.getLogger(__name__)

_initialized = False


def init_socket():
    """
    One-time initialization, called from the lifespan.
    """
    global _initialized
    if _initialized:
        return
    from navi.socket.palette_handler import register_palette_events
    register_palette_events(sio)
    _initialized = True
    logger.info("✅ Socket module fully initialized")
