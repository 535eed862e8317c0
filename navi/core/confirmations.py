# core/confirmations.py
"""
Pending confirmation store.

Holds deferred actions (e.g. "open this path even though it does not exist")
until the user answers. Entries are single-use and expire after a TTL.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class PendingAction:
    id: str
    message: str
    action: Dict[str, Any]
    created_at: float
    context: Dict[str, Any] = field(default_factory=dict)


class PendingConfirmationStore:

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, PendingAction] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def _new_id(self) -> str:
        return f"confirm_{int(self._clock() * 1000)}_{next(self._counter)}"

    def create(
        self,
        message: str,
        action: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> PendingAction:
        self.purge_expired()
        entry = PendingAction(
            id=self._new_id(),
            message=message,
            action=action,
            created_at=self._clock(),
            context=dict(context or {}),
        )
        self._entries[entry.id] = entry
        logger.info(f"⏸️ Pending confirmation {entry.id}: {message}")
        return entry

    def pop(self, confirmation_id: str) -> Optional[PendingAction]:
        """Remove and return the entry; None when unknown, used or expired."""
        self.purge_expired()
        return self._entries.pop(confirmation_id, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.created_at >= self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Expired {len(expired)} pending confirmation(s)")
        return len(expired)
