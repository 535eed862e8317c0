# services/desktop_service.py
"""
Desktop Service

Default collaborator wiring: implements ``CandidateSource`` on top of the
app catalog, process manager and recent-items reader, and ``ActionBackend``
on top of the registered tools.
"""

import logging
from typing import Any, Dict, List, Optional

from navi.config import settings
from navi.core.collaborators import ActionBackend, CandidateSource
from navi.models import (
    ActionError,
    ActionFailed,
    Candidate,
    ChatReply,
    ErrorKind,
    RecentItem,
    RunningProcess,
)
from navi.tools.base import ToolInstanceRegistry
from navi.tools.loader import load_tools
from navi.utils.async_utils import run_in_executor
from navi.utils.process_manager import ProcessManager
from navi.utils.searcher.app_searcher import InstalledAppCatalog
from navi.utils.searcher.recent_searcher import RecentItemsReader

logger = logging.getLogger(__name__)


class DesktopService(CandidateSource, ActionBackend):

    def __init__(
        self,
        registry: Optional[ToolInstanceRegistry] = None,
        catalog: Optional[InstalledAppCatalog] = None,
        process_manager: Optional[ProcessManager] = None,
        recent_reader: Optional[RecentItemsReader] = None,
    ):
        self.catalog = catalog or InstalledAppCatalog(settings.app_cache_ttl_seconds)
        self.pm = process_manager or ProcessManager()
        self.recent = recent_reader or RecentItemsReader()
        self.registry = registry or load_tools(self.catalog, self.pm)

    async def _run_tool(self, tool_name: str, inputs: Dict[str, Any]):
        tool = self.registry.get(tool_name)
        if tool is None:
            return ActionError(kind=ErrorKind.UNAVAILABLE, message=f"Tool not available: {tool_name}")
        output = await tool.execute(inputs)
        return output.to_result()

    # ------------------------------------------------------------------
    # CandidateSource
    # ------------------------------------------------------------------

    async def search_installed_apps(self, query: str) -> List[Candidate]:
        return await run_in_executor(self.catalog.search, query)

    async def list_running_processes(self) -> List[RunningProcess]:
        return await run_in_executor(self.pm.list_running_processes)

    async def list_recent_items(self, type_filter: Optional[str] = None) -> List[RecentItem]:
        return await run_in_executor(self.recent.list_items, type_filter)

    async def warm_up(self) -> int:
        """Populate the app catalog so the first keystroke is fast."""
        apps = await run_in_executor(self.catalog.all_apps)
        return len(apps)

    # ------------------------------------------------------------------
    # ActionBackend
    # ------------------------------------------------------------------

    async def open_application(self, candidate: Candidate):
        return await self._run_tool("app_open", {
            "name": candidate.display_name,
            "path": candidate.action_key,
            "is_packaged_app": candidate.is_packaged_app,
            "working_directory": candidate.working_directory,
            "arguments": candidate.launch_arguments,
        })

    async def open_path(self, path: str, require_exists: bool = True):
        return await self._run_tool("path_open", {"path": path, "require_exists": require_exists})

    async def focus_process(self, name: str):
        return await self._run_tool("process_focus", {"name": name})

    async def terminate_process(self, name: str):
        return await self._run_tool("process_quit", {"name": name})

    async def run_calculation(self, expression: str):
        return await self._run_tool("calculate", {"expression": expression})

    async def open_web_search_or_url(self, text: str):
        return await self._run_tool("web_open", {"text": text})

    async def run_system_action(self, action_id: str):
        return await self._run_tool("system_action", {"action": action_id})

    async def invoke_chat(self, text: str) -> ChatReply:
        tool = self.registry.get("chat")
        if tool is None:
            raise ActionFailed("Chat is not available", ErrorKind.UNAVAILABLE)
        output = await tool.execute({"text": text})
        if not output.success:
            raise ActionFailed(output.error or "Chat failed", output.error_kind)
        return ChatReply(message=output.data.get("message", ""), workflow=output.data.get("workflow"))

    async def open_terminal(self, directory: str):
        return await self._run_tool("terminal_open", {"directory": directory})

    async def run_command(self, command: str, cwd: Optional[str] = None, new_terminal: bool = False):
        if new_terminal:
            return await self._run_tool("terminal_open", {"directory": cwd or "", "command": command})
        return await self._run_tool("command_run", {"command": command, "cwd": cwd or ""})

    async def open_in_ide(self, ide: str, path: str):
        return await self._run_tool("ide_open", {"ide": ide, "path": path})


_desktop_service: Optional[DesktopService] = None


def get_desktop_service() -> DesktopService:
    """Get (or lazily create) the process-wide desktop service."""
    global _desktop_service
    if _desktop_service is None:
        _desktop_service = DesktopService()
    return _desktop_service
