# core/workflow.py
"""
Developer Workflow Runner

Executes the step list a chat reply may carry ("boot up my project" ->
open terminal, run the dev server, open the browser, open the IDE).

Steps run in order against a ``WorkflowState``. A step that targets a path
that does not exist halts the run with a ``PendingConfirmation`` whose context
is a resumable checkpoint; ``resume()`` re-applies exactly that step with the
existence check skipped and carries on from the next one.
"""

import logging
import os
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from navi.config import Preferences, Project, load_preferences
from navi.core.collaborators import ActionBackend
from navi.models import ActionError, ActionOk, Candidate, ErrorKind, PendingConfirmation

logger = logging.getLogger(__name__)

DEV_SERVER_PATTERN = re.compile(r"^(npm|yarn|pnpm|bun)\s+(run\s+)?(dev|start|serve)\b", re.IGNORECASE)
IDE_PREFIXES = ("code", "cursor", "webstorm")

_PORT_FLAG = re.compile(r"(?:--port|-p)\s+(\d+)", re.IGNORECASE)
_PORT_ENV = re.compile(r"PORT\s*=\s*(\d+)", re.IGNORECASE)
_PORT_URL = re.compile(r"localhost[:\s]+(\d+)", re.IGNORECASE)
_LOCALHOST_WITH_PORT = re.compile(r"localhost:\d+", re.IGNORECASE)
_BARE_PORT = re.compile(r"^\d+$")


class StepType(str, Enum):
    OPEN_TERMINAL = "open_terminal"
    CD = "cd"
    EXECUTE_COMMAND = "execute_command"
    OPEN_APP = "open_app"
    OPEN_BROWSER = "open_browser"
    OPEN_FILE = "open_file"


class WorkflowStep(BaseModel):
    type: StepType
    value: str = ""


class Workflow(BaseModel):
    steps: List[WorkflowStep] = Field(default_factory=list)


class WorkflowState(BaseModel):
    current_directory: str = Field(default_factory=os.getcwd)
    current_project: Optional[Project] = None
    results: List[Dict[str, Any]] = Field(default_factory=list)


class _NeedsConfirmation(Exception):
    """Raised inside a step when its target path is missing."""

    def __init__(self, message: str, deferred: Dict[str, Any]):
        super().__init__(message)
        self.message = message
        self.deferred = deferred


def detect_port(project: Optional[Project], default_port: Optional[str] = None) -> str:
    """
    Port a project's dev server listens on.

    Explicit project port, then hints in the start command (``--port``/``-p``,
    ``PORT=``, ``localhost:N``), then framework defaults, then ``default_port``.
    """
    if project and project.port:
        return str(project.port)

    command = project.start_command if project else ""
    if command:
        for pattern in (_PORT_FLAG, _PORT_ENV, _PORT_URL):
            match = pattern.search(command)
            if match:
                return match.group(1)
        if "vite" in command:
            return "5173"
        if "next" in command:
            return "3000"
        if "react-scripts" in command or "create-react-app" in command:
            return "3000"

    return default_port or "3000"


def is_dev_server_command(command: str) -> bool:
    return bool(DEV_SERVER_PATTERN.match((command or "").strip()))


def _step_result(step: WorkflowStep, ok: bool, message: str, **extra: Any) -> Dict[str, Any]:
    entry = {"type": step.type.value, "value": step.value, "success": ok, "message": message}
    entry.update(extra)
    return entry


def _from_action(step: WorkflowStep, result: Any, **extra: Any) -> Dict[str, Any]:
    return _step_result(step, result.status == "ok", result.message, **extra)


class WorkflowRunner:

    def __init__(
        self,
        backend: ActionBackend,
        preferences_loader: Callable[[], Preferences] = load_preferences,
        path_exists: Callable[[str], bool] = os.path.exists,
    ):
        self.backend = backend
        self._load_preferences = preferences_loader
        self._exists = path_exists

    async def run(self, workflow: Any, state: Optional[WorkflowState] = None):
        """Run a workflow from its first step."""
        wf = workflow if isinstance(workflow, Workflow) else Workflow.model_validate(workflow)
        if not wf.steps:
            return ActionError(kind=ErrorKind.INVALID, message="Workflow has no steps")
        logger.info(f"🧭 Starting workflow with {len(wf.steps)} steps")
        return await self._run_from(wf, 0, state or WorkflowState(), skip_check_at=None)

    async def resume(self, checkpoint: Dict[str, Any]):
        """Re-run the deferred step without the existence check, then continue."""
        wf = Workflow.model_validate(checkpoint["workflow"])
        state = WorkflowState.model_validate(checkpoint["state"])
        index = int(checkpoint["step_index"])
        logger.info(f"▶️ Resuming workflow at step {index + 1}/{len(wf.steps)}")
        return await self._run_from(wf, index, state, skip_check_at=index)

    async def _run_from(self, wf: Workflow, start: int, state: WorkflowState, skip_check_at: Optional[int]):
        preferences = self._load_preferences()

        for index in range(start, len(wf.steps)):
            step = wf.steps[index]
            logger.info(f"[Workflow] Step {index + 1}/{len(wf.steps)}: {step.type.value} - {step.value or 'N/A'}")
            try:
                entry = await self._run_step(step, state, preferences, skip_check=(index == skip_check_at))
            except _NeedsConfirmation as pending:
                checkpoint = {
                    "workflow": wf.model_dump(mode="json"),
                    "step_index": index,
                    "state": state.model_dump(mode="json"),
                    "deferred": pending.deferred,
                }
                return PendingConfirmation(id="", message=pending.message, context=checkpoint)
            except Exception as e:
                logger.error(f"[Workflow] Step {step.type.value} failed: {e}")
                entry = _step_result(step, False, str(e))
            state.results.append(entry)

        return self._summarize(state)

    @staticmethod
    def _summarize(state: WorkflowState):
        succeeded = [r for r in state.results if r.get("success")]
        data = {
            "results": state.results,
            "current_directory": state.current_directory,
        }
        if state.results and not succeeded:
            return ActionError(kind=ErrorKind.FAILED, message="All workflow steps failed", data=data)
        message = f"Workflow completed: {len(succeeded)}/{len(state.results)} steps succeeded"
        logger.info(f"✅ {message}")
        return ActionOk(message=message, data=data)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _run_step(self, step: WorkflowStep, state: WorkflowState, preferences: Preferences, skip_check: bool):
        handler = {
            StepType.OPEN_TERMINAL: self._open_terminal,
            StepType.CD: self._cd,
            StepType.EXECUTE_COMMAND: self._execute_command,
            StepType.OPEN_APP: self._open_app,
            StepType.OPEN_BROWSER: self._open_browser,
            StepType.OPEN_FILE: self._open_file,
        }[step.type]
        return await handler(step, state, preferences, skip_check)

    async def _open_terminal(self, step, state, preferences, skip_check):
        project = preferences.resolve_project(step.value)
        target = project.filepath if project else step.value
        if project:
            state.current_project = project

        if not skip_check and not self._exists(target):
            raise _NeedsConfirmation(
                f'The path "{target}" does not exist. Would you like to proceed with opening a terminal in this location?',
                {"type": step.type.value, "path": target},
            )

        result = await self.backend.open_terminal(target)
        if result.status == "ok":
            state.current_directory = os.path.abspath(target)
        return _from_action(step, result, resolved_path=target)

    async def _cd(self, step, state, preferences, skip_check):
        project = preferences.resolve_project(step.value)
        if project:
            target = project.filepath
            state.current_project = project
        elif self._exists(step.value):
            target = os.path.abspath(step.value)
        else:
            target = os.path.abspath(os.path.join(state.current_directory, step.value))
        state.current_directory = target
        return _step_result(step, True, f"Changed directory to: {target}", resolved_path=target)

    async def _execute_command(self, step, state, preferences, skip_check):
        command = step.value.strip()
        if not command:
            return _step_result(step, False, "Empty command")
        new_terminal = is_dev_server_command(command)
        result = await self.backend.run_command(command, cwd=state.current_directory, new_terminal=new_terminal)
        return _from_action(step, result, cwd=state.current_directory, new_terminal=new_terminal)

    def _split_ide(self, value: str) -> Tuple[str, str]:
        head, _, rest = value.strip().partition(" ")
        if head.lower() in IDE_PREFIXES:
            return head, rest.strip()
        return value.strip(), ""

    async def _open_app(self, step, state, preferences, skip_check):
        app_name, app_path = self._split_ide(step.value)
        app_to_use = (preferences.ide or "code") if app_name.lower() == "code" else app_name

        if app_path:
            project = preferences.resolve_project(app_path)
            if project:
                app_path = project.filepath
                state.current_project = project
            elif not skip_check and not self._exists(app_path):
                raise _NeedsConfirmation(
                    f'The path "{app_path}" does not exist. Would you like to proceed with opening {app_name} in this location?',
                    {"type": step.type.value, "path": app_path, "app": app_name},
                )
            result = await self.backend.open_in_ide(app_to_use, app_path)
            return _from_action(step, result, app=app_to_use, resolved_path=app_path)

        result = await self.backend.open_application(
            Candidate(display_name=app_to_use, action_key="")
        )
        return _from_action(step, result, app=app_to_use)

    def _resolve_browser_url(self, value: str, state: WorkflowState, preferences: Preferences) -> Optional[str]:
        url = value.strip()
        is_bare_port = bool(_BARE_PORT.match(url))

        if state.current_project and ("localhost" in url.lower() or is_bare_port):
            if is_bare_port:
                url = f"http://localhost:{url}"
            elif not _LOCALHOST_WITH_PORT.search(url):
                port = detect_port(state.current_project, preferences.default_port)
                url = f"http://localhost:{port}"

        if url.startswith(("http://", "https://")):
            return url
        if "localhost" in url.lower():
            return f"http://{url}"
        if _BARE_PORT.match(url):
            return f"http://localhost:{url}"
        return None

    async def _open_browser(self, step, state, preferences, skip_check):
        url = self._resolve_browser_url(step.value, state, preferences)
        # None -> not a URL, the backend turns it into a web search
        result = await self.backend.open_web_search_or_url(url or step.value)
        return _from_action(step, result, url=url)

    async def _open_file(self, step, state, preferences, skip_check):
        project = preferences.resolve_project(step.value)
        target = project.filepath if project else step.value
        if not skip_check and not self._exists(target):
            raise _NeedsConfirmation(
                f'The path "{target}" does not exist. Would you like to open it anyway?',
                {"type": step.type.value, "path": target},
            )
        result = await self.backend.open_path(target, require_exists=False)
        return _from_action(step, result, resolved_path=target)
