"""
Running-application tools: focus and quit, backed by ProcessManager.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from navi.models import ErrorKind
from navi.utils.async_utils import run_in_executor
from navi.utils.process_manager import ProcessManager, ProcessNotFoundError
from ..base import BaseTool, ToolOutput

_NAME_PARAM = {"name": {"type": "string", "required": True}}


class ProcessFocusTool(BaseTool):
    """Bring a running application to the foreground."""

    params = _NAME_PARAM

    def __init__(self, pm: Optional[ProcessManager] = None):
        super().__init__()
        self.pm = pm or ProcessManager()

    def get_tool_name(self) -> str:
        return "process_focus"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        name = inputs.get("name", "").strip()
        try:
            focused = await run_in_executor(self.pm.bring_to_focus, name)
        except ProcessNotFoundError as e:
            return ToolOutput(success=False, data={"name": name}, error=str(e), error_kind=ErrorKind.NOT_FOUND)

        if not focused:
            return ToolOutput(success=False, data={"name": name}, error=f"{name} has no window to focus")
        return ToolOutput(success=True, data={"name": name}, message=f"Switched to {name}")


class ProcessQuitTool(BaseTool):
    """Terminate every process of a running application."""

    params = _NAME_PARAM

    def __init__(self, pm: Optional[ProcessManager] = None):
        super().__init__()
        self.pm = pm or ProcessManager()

    def get_tool_name(self) -> str:
        return "process_quit"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        name = inputs.get("name", "").strip()
        try:
            count = await run_in_executor(self.pm.close_process, name)
        except ProcessNotFoundError as e:
            return ToolOutput(success=False, data={"name": name}, error=str(e), error_kind=ErrorKind.NOT_FOUND)

        return ToolOutput(
            success=True,
            data={"name": name, "processes": count, "closed_at": datetime.now().isoformat()},
            message=f"Quit {name}",
        )
