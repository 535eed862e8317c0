"""
File system tools: open a file or folder with the platform's default handler.
"""

import os
import subprocess
import sys
from datetime import datetime
from typing import Any, Dict

from navi.models import ErrorKind
from ..base import BaseTool, ToolOutput


def shell_open(path: str) -> None:
    """Open ``path`` via the OS shell (same as double-clicking it)."""
    if sys.platform == "win32":
        os.startfile(path)
    elif sys.platform == "darwin":
        subprocess.Popen(["open", path])
    else:
        subprocess.Popen(["xdg-open", path])


class PathOpenTool(BaseTool):
    """Open a file or folder, refusing missing paths unless told otherwise."""

    params = {
        "path": {"type": "string", "required": True},
        "require_exists": {"type": "boolean", "default": True},
    }

    def get_tool_name(self) -> str:
        return "path_open"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        raw_path: str = inputs.get("path", "").strip()
        require_exists: bool = self.get_input(inputs, "require_exists", True)

        if not raw_path:
            return ToolOutput(success=False, data={}, error="Path is required", error_kind=ErrorKind.INVALID)

        path = os.path.expandvars(os.path.expanduser(raw_path))
        exists = os.path.exists(path)
        if require_exists and not exists:
            return ToolOutput(
                success=False,
                data={"path": path},
                error=f"Path not found: {path}",
                error_kind=ErrorKind.NOT_FOUND,
            )

        shell_open(path)
        kind = "folder" if os.path.isdir(path) else "file"
        return ToolOutput(
            success=True,
            data={
                "path": path,
                "type": kind if exists else "unknown",
                "opened_at": datetime.now().isoformat(),
            },
            message=f"Opened {path}",
        )
