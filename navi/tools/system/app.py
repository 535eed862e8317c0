"""
Application launch tool.
"""

import os
import shlex
import subprocess
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from navi.models import ErrorKind
from navi.utils.async_utils import run_in_executor
from navi.utils.searcher.app_searcher import InstalledAppCatalog
from ..base import BaseTool, ToolOutput
from ..file_system.operations import shell_open


class AppOpenTool(BaseTool):
    """
    Open an application.

    Launch decision matrix
    ──────────────────────
    packaged app (Windows)   explorer.exe shell:AppsFolder\\<AppID>
    .lnk / .url / .app       shell open (startfile / open)
    .desktop (Linux)         gtk-launch <id>, xdg-open fallback
    anything with arguments  Popen([path] + args, cwd=working_directory)
    no path                  resolve by name through the catalog first
    """

    params = {
        "name": {"type": "string", "required": True},
        "path": {"type": "string", "default": ""},
        "is_packaged_app": {"type": "boolean", "default": False},
        "working_directory": {"type": "string", "default": ""},
        "arguments": {"type": "string", "default": ""},
    }

    def __init__(self, catalog: Optional[InstalledAppCatalog] = None):
        super().__init__()
        self.catalog = catalog or InstalledAppCatalog()

    def get_tool_name(self) -> str:
        return "app_open"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        name: str = inputs.get("name", "").strip()
        path: str = self.get_input(inputs, "path", "")
        packaged: bool = self.get_input(inputs, "is_packaged_app", False)
        cwd: str = self.get_input(inputs, "working_directory", "")
        arguments: str = self.get_input(inputs, "arguments", "")

        if not path:
            match = await run_in_executor(self.catalog.find_best, name)
            if match is None:
                return ToolOutput(
                    success=False, data={"name": name},
                    error=f"Could not find '{name}'",
                    error_kind=ErrorKind.NOT_FOUND,
                )
            name, path, packaged = match.display_name, match.action_key, match.is_packaged_app
            cwd = cwd or match.working_directory

        self.logger.info(f"Opening '{name}' -> {path}")
        pid = self._launch(path, packaged, cwd, arguments)
        return ToolOutput(
            success=True,
            data={
                "name": name,
                "resolved_path": path,
                "process_id": pid,
                "launch_time": datetime.now().isoformat(),
            },
            message=f"Opened {name}",
        )

    @staticmethod
    def _launch(path: str, packaged: bool, cwd: str, arguments: str) -> int:
        workdir = cwd if cwd and os.path.isdir(cwd) else None

        if packaged:
            subprocess.Popen(["explorer.exe", f"shell:AppsFolder\\{path}"])
            return 0

        if arguments:
            proc = subprocess.Popen([path] + shlex.split(arguments, posix=sys.platform != "win32"), cwd=workdir)
            return proc.pid

        if path.endswith(".desktop"):
            app_id = os.path.basename(path)[: -len(".desktop")]
            try:
                return subprocess.Popen(["gtk-launch", app_id]).pid
            except FileNotFoundError:
                return subprocess.Popen(["xdg-open", path]).pid

        if sys.platform != "win32" and os.path.isfile(path) and os.access(path, os.X_OK):
            return subprocess.Popen([path], cwd=workdir).pid

        shell_open(path)
        return 0
