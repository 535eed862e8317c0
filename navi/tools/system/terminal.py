"""
Developer tools used by workflows: terminals, shell commands and IDEs.
"""

import os
import shutil
import subprocess
import sys
from typing import Any, Dict, List, Optional

from navi.config import settings
from navi.models import ErrorKind
from navi.utils.async_utils import run_in_executor
from ..base import BaseTool, ToolOutput

# Tried in order on Linux; value is the flag that sets the working directory
_LINUX_TERMINALS = (
    ("gnome-terminal", "--working-directory="),
    ("konsole", "--workdir="),
    ("xfce4-terminal", "--working-directory="),
    ("x-terminal-emulator", None),
    ("xterm", None),
)


def _detached_kwargs() -> Dict[str, Any]:
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS}
    return {"start_new_session": True}


# name reported to clients → executable looked up on PATH
_WINDOWS_TERMINALS = (
    ("wt", "wt"),
    ("powershell", "powershell"),
    ("cmd", "cmd"),
    ("git-bash", "git"),
    ("wsl", "wsl"),
)


def installed_terminals(platform_name: Optional[str] = None) -> List[str]:
    """Names of the terminal emulators found on this machine."""
    platform_name = platform_name or sys.platform

    if platform_name == "win32":
        found = [name for name, binary in _WINDOWS_TERMINALS if shutil.which(binary)]
        # both ship with every Windows install
        for name in ("powershell", "cmd"):
            if name not in found:
                found.append(name)
        return found

    if platform_name == "darwin":
        found = ["Terminal"]
        if os.path.isdir("/Applications/iTerm.app"):
            found.append("iTerm")
        return found

    return [binary for binary, _ in _LINUX_TERMINALS if shutil.which(binary)]


def terminal_argv(directory: str, command: Optional[str] = None) -> List[str]:
    """argv that opens a terminal in ``directory``, optionally running ``command``."""
    if sys.platform == "win32":
        if shutil.which("wt"):
            argv = ["wt", "-d", directory]
            if command:
                argv += ["powershell", "-NoExit", "-Command", command]
            return argv
        escaped = directory.replace("'", "''")
        script = f"Set-Location -LiteralPath '{escaped}'" + (f"; {command}" if command else "")
        return ["cmd", "/c", "start", "", "powershell", "-NoExit", "-Command", script]

    if sys.platform == "darwin":
        if not command:
            return ["open", "-a", "Terminal", directory]
        script = f'cd "{directory}" && {command}'.replace("\\", "\\\\").replace('"', '\\"')
        return ["osascript", "-e", f'tell application "Terminal" to do script "{script}"']

    for binary, dir_flag in _LINUX_TERMINALS:
        if not shutil.which(binary):
            continue
        argv = [binary]
        if dir_flag:
            argv.append(f"{dir_flag}{directory}")
        if command:
            # gnome-terminal deprecated -e in favour of "--"
            separator = "--" if binary == "gnome-terminal" else "-e"
            argv += [separator, "bash", "-c", f"{command}; exec bash"]
        return argv
    raise FileNotFoundError("No terminal emulator found")


class TerminalOpenTool(BaseTool):
    """Open a terminal window, optionally running a long-lived command in it."""

    params = {
        "directory": {"type": "string", "required": True},
        "command": {"type": "string", "default": ""},
    }

    def get_tool_name(self) -> str:
        return "terminal_open"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        directory = os.path.abspath(inputs.get("directory", "") or os.getcwd())
        command = self.get_input(inputs, "command", "") or None

        try:
            argv = terminal_argv(directory, command)
        except FileNotFoundError as e:
            return ToolOutput(success=False, data={}, error=str(e), error_kind=ErrorKind.UNAVAILABLE)

        cwd = directory if os.path.isdir(directory) else None
        subprocess.Popen(argv, cwd=cwd, stdin=subprocess.DEVNULL, stdout=subprocess.DEVNULL,
                         stderr=subprocess.DEVNULL, **_detached_kwargs())
        message = f"Opened terminal in: {directory}"
        if command:
            message += f" running '{command}'"
        return ToolOutput(success=True, data={"directory": directory, "command": command}, message=message)


class CommandRunTool(BaseTool):
    """Run a shell command to completion and capture its output."""

    params = {
        "command": {"type": "string", "required": True},
        "cwd": {"type": "string", "default": ""},
    }

    def __init__(self, timeout: Optional[float] = None):
        super().__init__()
        self.timeout = timeout if timeout is not None else settings.command_timeout_seconds

    def get_tool_name(self) -> str:
        return "command_run"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        command = inputs.get("command", "").strip()
        cwd = self.get_input(inputs, "cwd", "") or None
        if cwd and not os.path.isdir(cwd):
            return ToolOutput(success=False, data={"cwd": cwd}, error=f"Directory not found: {cwd}",
                              error_kind=ErrorKind.NOT_FOUND)

        try:
            completed = await run_in_executor(
                subprocess.run, command,
                shell=True, cwd=cwd, capture_output=True, text=True, timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return ToolOutput(success=False, data={"command": command},
                              error=f"Command timed out after {self.timeout:g}s", error_kind=ErrorKind.TIMEOUT)

        data = {
            "command": command,
            "cwd": cwd,
            "returncode": completed.returncode,
            "stdout": completed.stdout,
            "stderr": completed.stderr,
        }
        if completed.returncode != 0:
            return ToolOutput(success=False, data=data,
                              error=completed.stderr.strip() or f"Command exited with {completed.returncode}")
        return ToolOutput(success=True, data=data, message=completed.stdout.strip() or f"Ran: {command}")


class IdeOpenTool(BaseTool):
    """Open a directory in an editor CLI (``code``, ``cursor``, ``webstorm``...)."""

    params = {
        "ide": {"type": "string", "required": True},
        "path": {"type": "string", "required": True},
    }

    def get_tool_name(self) -> str:
        return "ide_open"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        ide = inputs.get("ide", "").strip() or "code"
        path = os.path.abspath(inputs.get("path", ""))

        executable = shutil.which(ide)
        if executable is None:
            return ToolOutput(success=False, data={"ide": ide}, error=f"'{ide}' is not on PATH",
                              error_kind=ErrorKind.UNAVAILABLE)

        subprocess.Popen([executable, path], stdin=subprocess.DEVNULL, stdout=subprocess.DEVNULL,
                         stderr=subprocess.DEVNULL, **_detached_kwargs())
        return ToolOutput(success=True, data={"ide": ide, "path": path},
                          message=f"Opened {ide} with directory: {path}")
