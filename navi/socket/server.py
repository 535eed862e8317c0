"""
Socket Server - Core Socket.IO instance and connection lifecycle.

Every connection gets its own ``SuggestionPresenter``; the dispatcher and
desktop service behind them are shared.
"""

import socketio
import logging
from typing import Dict

from navi.core.suggestion_presenter import SuggestionPresenter
from navi.dependencies import get_dispatcher, get_service

logger = logging.getLogger(__name__)

# ==================== SOCKET.IO INSTANCE ====================

_sio_logger = logging.getLogger("socketio")
_sio_logger.setLevel(logging.WARNING)
_eio_logger = logging.getLogger("engineio")
_eio_logger.setLevel(logging.WARNING)

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    logger=_sio_logger,
    engineio_logger=_eio_logger,
    namespaces=["/"],
    ping_timeout=60,
    ping_interval=25,
)

socket_app = socketio.ASGIApp(sio)

# sid → presenter
presenters: Dict[str, SuggestionPresenter] = {}


def get_presenter(sid: str) -> SuggestionPresenter:
    presenter = presenters.get(sid)
    if presenter is None:
        service = get_service()
        presenter = SuggestionPresenter(service, get_dispatcher())
        presenters[sid] = presenter
    return presenter


async def emit_state(sid: str) -> None:
    presenter = presenters.get(sid)
    if presenter is not None:
        await sio.emit("palette:state", presenter.snapshot(), to=sid)


# ==================== CONNECTION LIFECYCLE ====================

@sio.event
async def connect(sid, environ, auth=None):
    get_presenter(sid)
    logger.info(f"🟢 Palette client connected: {sid} (total: {len(presenters)})")
    await emit_state(sid)
    return True


@sio.event
async def disconnect(sid, reason=None):
    presenter = presenters.pop(sid, None)
    if presenter is not None:
        presenter.on_hide()
    logger.info(f"🔴 Palette client disconnected: {sid}")
