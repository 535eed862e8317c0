"""
Process-wide singletons handed to routes and socket handlers.

Routes receive them through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""

from typing import Optional

from navi.config import settings
from navi.core.action_dispatcher import ActionDispatcher
from navi.core.confirmations import PendingConfirmationStore
from navi.services.desktop_service import DesktopService, get_desktop_service

_dispatcher: Optional[ActionDispatcher] = None


def get_service() -> DesktopService:
    return get_desktop_service()


def get_dispatcher() -> ActionDispatcher:
    """One dispatcher (and confirmation store) shared by HTTP and socket clients."""
    global _dispatcher
    if _dispatcher is None:
        service = get_desktop_service()
        _dispatcher = ActionDispatcher(
            backend=service,
            source=service,
            store=PendingConfirmationStore(settings.confirmation_ttl_seconds),
        )
    return _dispatcher
