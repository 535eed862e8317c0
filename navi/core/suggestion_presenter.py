# core/suggestion_presenter.py
"""
Suggestion Presenter

UI-free state machine behind the palette input box.

States:
    IDLE     no text
    PENDING  text present, fetch scheduled/in flight or classification only
    SHOWING  non-empty suggestion list with one entry selected

Text changes re-classify synchronously and, when the intent needs external
candidates, schedule a debounced fetch. A debounce that has not fired yet is
cancelled by the next change; a fetch that already started always runs to
completion and its result is dropped if the input moved on meanwhile.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from navi.config import Settings, settings as default_settings
from navi.core.action_dispatcher import ActionDispatcher
from navi.core.cache import TTLCache
from navi.core.candidate_ranker import app_query, is_gated, parse_recent_query, rank
from navi.core.collaborators import CandidateSource
from navi.core.intent_classifier import classify
from navi.models import (
    Candidate,
    CandidateKind,
    Intent,
    IntentType,
    PendingConfirmation,
    RunningProcess,
)

logger = logging.getLogger(__name__)

FETCH_APPS = "apps"
FETCH_PROCESSES = "processes"
FETCH_RECENT = "recent"

_HINT_INTENTS = (IntentType.PATH, IntentType.CALCULATE, IntentType.SEARCH, IntentType.CHAT)


class PresenterState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SHOWING = "showing"


class SmartHint(BaseModel):
    text: str
    description: str = ""
    intent: IntentType


class SuggestionList(BaseModel):
    """Ordered candidates with a selection cursor and a scroll window."""
    items: List[Candidate] = Field(default_factory=list)
    selected_index: int = 0
    scroll_offset: int = 0
    visible: bool = False

    @property
    def selected(self) -> Optional[Candidate]:
        if not self.items:
            return None
        return self.items[self.selected_index]

    def replace(self, items: List[Candidate]) -> None:
        self.items = list(items)
        self.selected_index = 0
        self.scroll_offset = 0
        self.visible = bool(self.items)

    def clear(self) -> None:
        self.replace([])

    def select(self, index: int, visible_rows: int) -> None:
        if not self.items:
            return
        self.selected_index = max(0, min(index, len(self.items) - 1))
        self._scroll_into_view(visible_rows)

    def move(self, delta: int, visible_rows: int) -> None:
        self.select(self.selected_index + delta, visible_rows)

    def _scroll_into_view(self, visible_rows: int) -> None:
        rows = max(1, visible_rows)
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = self.selected_index
        elif self.selected_index >= self.scroll_offset + rows:
            self.scroll_offset = self.selected_index - rows + 1


def fetch_kind(intent: Intent) -> Optional[str]:
    """Which collaborator list an intent needs, or None when it needs none."""
    if intent.type in (IntentType.SWITCH, IntentType.QUIT):
        return FETCH_PROCESSES
    if intent.type == IntentType.RECENT:
        return FETCH_RECENT
    if intent.type in (IntentType.CHAT, IntentType.UNKNOWN) or is_gated(intent):
        return None
    return FETCH_APPS


def process_candidates(intent: Intent, processes: List[RunningProcess]) -> List[Candidate]:
    kind = CandidateKind.SWITCH if intent.type == IntentType.SWITCH else CandidateKind.QUIT
    return [p.to_candidate(kind) for p in processes]


async def load_candidates(source: CandidateSource, intent: Intent, text: str) -> List[Candidate]:
    """Fetch the raw (unranked) candidates ``intent`` needs."""
    needs = fetch_kind(intent)
    if needs == FETCH_PROCESSES:
        return process_candidates(intent, await source.list_running_processes())
    if needs == FETCH_RECENT:
        kind, _ = parse_recent_query(intent.value)
        type_filter = None
        if kind == CandidateKind.RECENT_FILE:
            type_filter = "files"
        elif kind == CandidateKind.RECENT_FOLDER:
            type_filter = "folders"
        items = await source.list_recent_items(type_filter)
        return [item.to_candidate() for item in items]
    if needs == FETCH_APPS:
        return await source.search_installed_apps(app_query(intent, text))
    return []


async def suggest(source: CandidateSource, text: str, limit: int = 10) -> List[Candidate]:
    """One-shot classify, fetch and rank (no debounce, no cache)."""
    intent = classify(text)
    raw = await load_candidates(source, intent, text)
    return rank(intent, raw, text, limit)


def build_hint(intent: Intent) -> Optional[SmartHint]:
    value = intent.value
    if intent.type == IntentType.PATH:
        return SmartHint(text=f"Open: {value}", description="Open file or folder", intent=intent.type)
    if intent.type == IntentType.CALCULATE:
        return SmartHint(text=f"Calculate: {value}", description="Evaluate expression", intent=intent.type)
    if intent.type == IntentType.SEARCH:
        return SmartHint(text=f"Search: {value}", description="Search the web", intent=intent.type)
    if intent.type == IntentType.CHAT:
        text = f"Chat: {value}" if value else "Chat: Ask Navi anything"
        return SmartHint(text=text, description="Ask the assistant", intent=intent.type)
    return None


class SuggestionPresenter:

    def __init__(
        self,
        source: CandidateSource,
        dispatcher: ActionDispatcher,
        config: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.dispatcher = dispatcher
        self.config = config or default_settings

        self.text: str = ""
        self.intent: Intent = classify("")
        self.suggestions = SuggestionList()
        self.hint: Optional[SmartHint] = None
        self.output: str = ""
        self.pending_confirmation: Optional[PendingConfirmation] = None
        self.focused = False
        self.executing = False

        self._dismissed = False
        self._debounce_task: Optional[asyncio.Task] = None
        self._fetch_tasks: Set[asyncio.Task] = set()
        self._process_cache: TTLCache[List[RunningProcess]] = TTLCache(
            self.config.process_cache_ttl_seconds, clock=clock
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PresenterState:
        if not self.text.strip():
            return PresenterState.IDLE
        if self.suggestions.visible and self.suggestions.items:
            return PresenterState.SHOWING
        return PresenterState.PENDING

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of everything a UI renders."""
        return {
            "text": self.text,
            "state": self.state.value,
            "intent": self.intent.model_dump(mode="json"),
            "suggestions": [
                {**c.model_dump(mode="json", by_alias=True), "label": c.label}
                for c in self.suggestions.items
            ],
            "selectedIndex": self.suggestions.selected_index,
            "scrollOffset": self.suggestions.scroll_offset,
            "visible": self.suggestions.visible,
            "hint": self.hint.model_dump(mode="json") if self.hint else None,
            "output": self.output,
            "pendingConfirmation": (
                self.pending_confirmation.model_dump(mode="json")
                if self.pending_confirmation else None
            ),
            "executing": self.executing,
            "focused": self.focused,
        }

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Handle a text change. Must be called from the event loop."""
        self.text = text or ""
        self._dismissed = False
        if self.executing:
            return
        self._evaluate()

    def _evaluate(self) -> None:
        self._cancel_debounce()
        intent = classify(self.text)
        self.intent = intent

        if intent.type == IntentType.UNKNOWN:
            self._apply([])
            return

        needs = fetch_kind(intent)
        if needs is None:
            self._apply(rank(intent, [], self.text, self.config.suggestion_limit))
            return

        if needs == FETCH_PROCESSES:
            cached = self._process_cache.get()
            if cached is not None:
                logger.debug("Using cached process list")
                self._apply(rank(intent, process_candidates(intent, cached), self.text, self.config.suggestion_limit))
                return

        self._update_hint()
        delay = self._debounce_ms(intent) / 1000.0
        self._debounce_task = asyncio.create_task(self._debounced(self.text, intent, delay))

    def _debounce_ms(self, intent: Intent) -> int:
        if intent.type == IntentType.SWITCH:
            return self.config.switch_debounce_ms
        if intent.type == IntentType.QUIT:
            return self.config.quit_debounce_ms
        if intent.type == IntentType.RECENT:
            return self.config.recent_debounce_ms
        return self.config.app_debounce_ms

    def _cancel_debounce(self) -> None:
        if self._debounce_task and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    async def _debounced(self, captured: str, intent: Intent, delay: float) -> None:
        await asyncio.sleep(delay)
        task = asyncio.create_task(self._fetch(captured, intent))
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)

    async def _fetch(self, captured: str, intent: Intent) -> None:
        try:
            raw = await asyncio.wait_for(
                self._load(captured, intent),
                timeout=self.config.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ Candidate fetch timed out for {captured!r}")
            raw = []
        except Exception as e:
            logger.warning(f"⚠️ Candidate fetch failed for {captured!r}: {e}")
            raw = []

        if captured != self.text:
            logger.debug(f"Discarding stale results for {captured!r} (current {self.text!r})")
            return
        if self.executing or self._dismissed:
            return

        self._apply(rank(intent, raw, captured, self.config.suggestion_limit))

    async def _load(self, captured: str, intent: Intent) -> List[Candidate]:
        if fetch_kind(intent) == FETCH_PROCESSES:
            processes = await self.source.list_running_processes()
            self._process_cache.set(processes)
            return process_candidates(intent, processes)
        return await load_candidates(self.source, intent, captured)

    def _apply(self, items: List[Candidate]) -> None:
        self.suggestions.replace(items)
        self._update_hint()

    def _update_hint(self) -> None:
        if self.suggestions.items or not self.text.strip() or self.intent.type not in _HINT_INTENTS:
            self.hint = None
            return
        self.hint = build_hint(self.intent)

    async def wait_idle(self) -> None:
        """Wait for the pending debounce and every in-flight fetch."""
        if self._debounce_task:
            try:
                await self._debounce_task
            except asyncio.CancelledError:
                pass
        while self._fetch_tasks:
            await asyncio.gather(*list(self._fetch_tasks))

    # ------------------------------------------------------------------
    # Keyboard / pointer
    # ------------------------------------------------------------------

    async def handle_key(self, key: str) -> None:
        if key == "ArrowDown":
            self.suggestions.move(1, self.config.visible_rows)
        elif key == "ArrowUp":
            self.suggestions.move(-1, self.config.visible_rows)
        elif key == "Escape":
            self.dismiss()
        elif key == "Enter":
            await self.confirm()

    def hover(self, index: int) -> None:
        if 0 <= index < len(self.suggestions.items):
            self.suggestions.select(index, self.config.visible_rows)

    def dismiss(self) -> None:
        """Hide and clear the list, leaving the text alone."""
        self._cancel_debounce()
        self._dismissed = True
        self.suggestions.clear()

    async def confirm(self) -> None:
        if self.executing:
            return

        selected = self.suggestions.selected if self.suggestions.visible else None
        if selected is not None:
            self.suggestions.clear()
            await self._execute(selected)
            return

        intent = classify(self.text)
        if intent.type == IntentType.UNKNOWN:
            return
        if intent.type == IntentType.RECENT or (
            intent.type in (IntentType.QUIT, IntentType.SWITCH) and not intent.value
        ):
            # No target yet: bring the list back instead of failing
            self._dismissed = False
            self._evaluate()
            return
        await self._execute(intent)

    async def _execute(self, target) -> None:
        self._cancel_debounce()
        self.hint = None
        captured = self.text
        superseded = self.pending_confirmation
        self.executing = True
        try:
            result = await self.dispatcher.dispatch(target, raw_text=captured)
        finally:
            self.executing = False
        if superseded is not None:
            self.dispatcher.discard_confirmation(superseded.id)
        self._settle(result)

        if self.text == captured:
            self.text = ""
        self._dismissed = False
        self._evaluate()

    def _settle(self, result) -> None:
        self.output = result.message
        # a confirmation only stays open until the next outcome
        self.pending_confirmation = result if isinstance(result, PendingConfirmation) else None

    async def respond_to_confirmation(self, accept: bool) -> None:
        pending = self.pending_confirmation
        if pending is None or self.executing:
            return
        self.pending_confirmation = None
        self.executing = True
        try:
            result = await self.dispatcher.resolve_confirmation(pending.id, accept)
        finally:
            self.executing = False
        self._settle(result)
        self._evaluate()

    # ------------------------------------------------------------------
    # Window lifecycle
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        self.focused = True

    def on_hide(self) -> None:
        self._cancel_debounce()
        self.focused = False
        self.text = ""
        self.intent = classify("")
        self._dismissed = True
        self.suggestions.clear()
        self.hint = None
