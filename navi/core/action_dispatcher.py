# core/action_dispatcher.py
"""
Action Dispatcher

Routes a confirmed candidate or a directly typed intent to exactly one
collaborator operation and normalizes whatever happens into an
``ActionResult``.

- At most one dispatch runs at a time; a concurrent call gets ``busy``.
- Every collaborator call is bounded by ``dispatch_timeout_seconds``.
- A missing filesystem path becomes a ``PendingConfirmation`` kept in the
  ``PendingConfirmationStore`` until ``resolve_confirmation`` answers it.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from navi.config import settings
from navi.core.candidate_ranker import rank_apps
from navi.core.collaborators import ActionBackend, CandidateSource
from navi.core.confirmations import PendingConfirmationStore
from navi.core.workflow import WorkflowRunner
from navi.models import (
    ActionError,
    ActionFailed,
    ActionOk,
    Candidate,
    CandidateKind,
    ErrorKind,
    Intent,
    IntentType,
    PendingConfirmation,
)

logger = logging.getLogger(__name__)

OP_OPEN_PATH = "open_path"
OP_RESUME_WORKFLOW = "resume_workflow"


def normalize_url(text: str) -> str:
    """Add a scheme: ``http://`` for localhost, ``https://`` otherwise."""
    url = (text or "").strip()
    lowered = url.lower()
    if lowered.startswith(("http://", "https://")) or "://" in url:
        return url
    if lowered.startswith("localhost"):
        return f"http://{url}"
    return f"https://{url}"


class ActionDispatcher:

    def __init__(
        self,
        backend: ActionBackend,
        source: CandidateSource,
        runner: Optional[WorkflowRunner] = None,
        store: Optional[PendingConfirmationStore] = None,
        timeout: Optional[float] = None,
    ):
        self.backend = backend
        self.source = source
        self.runner = runner or WorkflowRunner(backend)
        self.store = store or PendingConfirmationStore(settings.confirmation_ttl_seconds)
        self.timeout = timeout if timeout is not None else settings.dispatch_timeout_seconds
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def dispatch(self, target: Union[Intent, Candidate], raw_text: str = ""):
        """
        Execute a candidate or an intent.

        Args:
            target: Selected ``Candidate`` or the classified ``Intent`` of the
                raw input (when the suggestion list was empty).
            raw_text: The raw input, used for chat/unknown fallbacks.

        Returns:
            ``ActionOk``, ``ActionError`` or ``PendingConfirmation``.
        """
        return await self._guarded(self._route, target, raw_text)

    async def resolve_confirmation(self, confirmation_id: str, accept: bool):
        return await self._guarded(self._resolve, confirmation_id, accept)

    async def open_path_anyway(self, path: str):
        """Open ``path`` without the existence check, under the same guard as ``dispatch``."""
        return await self._guarded(self._open_path_unchecked, path)

    def discard_confirmation(self, confirmation_id: str) -> bool:
        """Drop a confirmation that a newer action superseded. Returns whether it was still stored."""
        entry = self.store.pop(confirmation_id)
        if entry is not None:
            logger.info(f"🗑️ Confirmation {confirmation_id} superseded")
        return entry is not None

    async def _guarded(self, fn, *args):
        if self._in_flight:
            logger.warning("⚠️ Dispatch rejected: another action is in flight")
            return ActionError(kind=ErrorKind.BUSY, message="Another action is still running")

        self._in_flight = True
        try:
            result = await asyncio.wait_for(fn(*args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"⏱️ Action timed out after {self.timeout}s")
            result = ActionError(kind=ErrorKind.TIMEOUT, message=f"Action timed out after {self.timeout:g}s")
        except ActionFailed as e:
            logger.warning(f"⚠️ Action failed: {e.message}")
            result = e.to_result()
        except Exception as e:
            logger.error(f"❌ Action error: {e}", exc_info=True)
            result = ActionError(kind=ErrorKind.FAILED, message=str(e) or type(e).__name__)
        finally:
            self._in_flight = False

        logger.info(f"Dispatch outcome: {result.status} - {result.message}")
        return result

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def _route(self, target: Union[Intent, Candidate], raw_text: str):
        if isinstance(target, Candidate):
            return await self._route_candidate(target)
        return await self._route_intent(target, raw_text)

    async def _route_candidate(self, candidate: Candidate):
        kind = candidate.kind
        logger.info(f"🎯 Dispatching {kind.value}: {candidate.display_name}")

        if kind == CandidateKind.SYSTEM:
            return await self.backend.run_system_action(candidate.action_key)
        if kind == CandidateKind.SWITCH:
            return await self.backend.focus_process(candidate.action_key or candidate.display_name)
        if kind == CandidateKind.QUIT:
            return await self.backend.terminate_process(candidate.action_key or candidate.display_name)
        if kind in (CandidateKind.RECENT_FILE, CandidateKind.RECENT_FOLDER):
            return await self._open_path(candidate.action_key)
        return await self.backend.open_application(candidate)

    async def _route_intent(self, intent: Intent, raw_text: str):
        value = intent.value.strip()
        raw = (raw_text or intent.value).strip()
        logger.info(f"🎯 Dispatching intent {intent.type.value}: {value!r}")

        if intent.type in (IntentType.QUIT, IntentType.SWITCH):
            if not value:
                return ActionError(kind=ErrorKind.INVALID, message=f"Type an app name after '{intent.type.value}'")
            if intent.type == IntentType.QUIT:
                return await self.backend.terminate_process(value)
            return await self.backend.focus_process(value)

        if intent.type == IntentType.RECENT:
            return ActionError(kind=ErrorKind.INVALID, message="Pick a recent item from the list")

        if intent.type == IntentType.PATH:
            return await self._open_path(value)

        if intent.type == IntentType.APP:
            return await self._open_app_by_name(value)

        if intent.type == IntentType.CALCULATE:
            return await self.backend.run_calculation(value)

        if intent.type == IntentType.SEARCH:
            return await self.backend.open_web_search_or_url(value)

        if intent.type == IntentType.URL:
            return await self.backend.open_web_search_or_url(normalize_url(value))

        if intent.type == IntentType.CHAT:
            return await self._chat(value or raw)

        if not raw:
            return ActionError(kind=ErrorKind.INVALID, message="Nothing to run")
        return await self._chat(raw)

    async def _open_app_by_name(self, name: str):
        apps = await self.source.search_installed_apps(name)
        ranked = rank_apps(apps, name, limit=1)
        if ranked:
            return await self.backend.open_application(ranked[0])
        return await self.backend.open_application(Candidate(display_name=name, action_key=""))

    async def _open_path(self, path: str, require_exists: bool = True):
        result = await self.backend.open_path(path, require_exists=require_exists)
        if result.status == "error" and result.kind == ErrorKind.NOT_FOUND:
            return self._defer(
                f'The path "{path}" does not exist. Would you like to open it anyway?',
                {"op": OP_OPEN_PATH, "path": path},
                {"path": path},
            )
        return result

    async def _open_path_unchecked(self, path: str):
        return await self.backend.open_path(path, require_exists=False)

    async def _chat(self, text: str):
        reply = await self.backend.invoke_chat(text)
        if not reply.workflow:
            return ActionOk(message=reply.message, data={"reply": reply.message})

        outcome = await self.runner.run(reply.workflow)
        return self._absorb_workflow_outcome(outcome, reply.message)

    def _absorb_workflow_outcome(self, outcome, reply_message: str = ""):
        if isinstance(outcome, PendingConfirmation):
            return self._defer(
                outcome.message,
                {"op": OP_RESUME_WORKFLOW, "checkpoint": outcome.context},
                outcome.context.get("deferred", {}),
            )
        if reply_message and isinstance(outcome, ActionOk):
            return outcome.model_copy(update={"message": f"{reply_message}\n{outcome.message}"})
        return outcome

    def _defer(self, message: str, action: Dict[str, Any], context: Dict[str, Any]) -> PendingConfirmation:
        entry = self.store.create(message, action, context)
        return PendingConfirmation(id=entry.id, message=message, context=context)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def _resolve(self, confirmation_id: str, accept: bool):
        entry = self.store.pop(confirmation_id)
        if entry is None:
            return ActionError(kind=ErrorKind.NOT_FOUND, message="Confirmation not found or expired")

        if not accept:
            logger.info(f"🚫 Confirmation {confirmation_id} declined")
            return ActionOk(message="Cancelled")

        op = entry.action.get("op")
        if op == OP_OPEN_PATH:
            return await self.backend.open_path(entry.action["path"], require_exists=False)
        if op == OP_RESUME_WORKFLOW:
            outcome = await self.runner.resume(entry.action["checkpoint"])
            return self._absorb_workflow_outcome(outcome)
        return ActionError(kind=ErrorKind.INVALID, message=f"Unknown deferred action: {op}")
