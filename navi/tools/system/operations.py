"""
System power actions: restart, shutdown, sleep, hibernate, lock, sign out.
"""

import getpass
import subprocess
import sys
from typing import Any, Dict, List, Optional

from navi.models import ErrorKind, find_system_command
from navi.utils.async_utils import run_in_executor
from ..base import BaseTool, ToolOutput

# platform -> action -> argv
SYSTEM_ACTION_COMMANDS: Dict[str, Dict[str, List[str]]] = {
    "win32": {
        "restart": ["shutdown", "/r", "/t", "0"],
        "shutdown": ["shutdown", "/s", "/t", "0"],
        "sleep": ["rundll32.exe", "powrprof.dll,SetSuspendState", "0,1,0"],
        "hibernate": ["shutdown", "/h"],
        "lock": ["rundll32.exe", "user32.dll,LockWorkStation"],
        "signout": ["shutdown", "/l"],
    },
    "darwin": {
        "restart": ["osascript", "-e", 'tell application "System Events" to restart'],
        "shutdown": ["osascript", "-e", 'tell application "System Events" to shut down'],
        "sleep": ["pmset", "sleepnow"],
        "lock": ["pmset", "displaysleepnow"],
        "signout": ["osascript", "-e", 'tell application "System Events" to log out'],
    },
    "linux": {
        "restart": ["systemctl", "reboot"],
        "shutdown": ["systemctl", "poweroff"],
        "sleep": ["systemctl", "suspend"],
        "hibernate": ["systemctl", "hibernate"],
        "lock": ["loginctl", "lock-session"],
        "signout": ["loginctl", "terminate-user", "{user}"],
    },
}


def command_for(action: str, platform_name: Optional[str] = None) -> Optional[List[str]]:
    platform_key = platform_name or sys.platform
    if platform_key.startswith("linux"):
        platform_key = "linux"
    argv = SYSTEM_ACTION_COMMANDS.get(platform_key, {}).get(action)
    if argv is None:
        return None
    return [part.replace("{user}", getpass.getuser()) for part in argv]


class SystemActionTool(BaseTool):
    """Run one of the six power actions for the current platform."""

    params = {"action": {"type": "string", "required": True}}

    def __init__(self, platform_name: Optional[str] = None):
        super().__init__()
        self._platform = platform_name

    def get_tool_name(self) -> str:
        return "system_action"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        action = inputs.get("action", "").strip().lower()
        command = find_system_command(action)
        if command is None:
            return ToolOutput(
                success=False, data={},
                error=f"Unknown system action: {action}",
                error_kind=ErrorKind.INVALID,
            )

        argv = command_for(command.action, self._platform)
        if argv is None:
            return ToolOutput(
                success=False, data={"action": action},
                error=f"{command.display} is not supported on this platform",
                error_kind=ErrorKind.UNAVAILABLE,
            )

        completed = await run_in_executor(subprocess.run, argv, capture_output=True, text=True)
        if completed.returncode != 0:
            return ToolOutput(
                success=False, data={"action": action},
                error=f"Failed to execute system command: {completed.stderr.strip() or completed.returncode}",
            )
        return ToolOutput(success=True, data={"action": action}, message=f"Executed system action: {command.display}")
