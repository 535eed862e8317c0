"""
Palette socket events.

Client → server:
    palette:text     {"text": str}
    palette:key      {"key": "ArrowDown" | "ArrowUp" | "Escape" | "Enter"}
    palette:hover    {"index": int}
    palette:show     {}
    palette:hide     {}
    palette:confirm  {"accept": bool}

Server → client:
    palette:state    presenter snapshot, after every event and again once
                     any fetch it triggered has settled
"""

import logging

from navi.socket.server import emit_state, get_presenter

logger = logging.getLogger(__name__)


async def _emit_settled(sid: str) -> None:
    presenter = get_presenter(sid)
    await emit_state(sid)
    await presenter.wait_idle()
    await emit_state(sid)


def register_palette_events(sio) -> None:

    @sio.on("palette:text")
    async def on_text(sid, data):
        text = (data or {}).get("text", "")
        get_presenter(sid).set_text(text)
        await _emit_settled(sid)

    @sio.on("palette:key")
    async def on_key(sid, data):
        key = (data or {}).get("key", "")
        await get_presenter(sid).handle_key(key)
        await _emit_settled(sid)

    @sio.on("palette:hover")
    async def on_hover(sid, data):
        try:
            index = int((data or {}).get("index", -1))
        except (TypeError, ValueError):
            logger.warning(f"⚠️ Bad hover payload from {sid}: {data}")
            return
        get_presenter(sid).hover(index)
        await emit_state(sid)

    @sio.on("palette:show")
    async def on_show(sid, data=None):
        get_presenter(sid).on_show()
        await emit_state(sid)

    @sio.on("palette:hide")
    async def on_hide(sid, data=None):
        get_presenter(sid).on_hide()
        await emit_state(sid)

    @sio.on("palette:confirm")
    async def on_confirm(sid, data):
        accept = bool((data or {}).get("accept", False))
        await get_presenter(sid).respond_to_confirmation(accept)
        await _emit_settled(sid)

    logger.info("🔌 Palette socket events registered")
