# tools/loader.py
"""
Tool Loader

Instantiates every action tool once at startup and registers it in the
global instance registry.
"""

import logging
from typing import Optional

from navi.utils.process_manager import ProcessManager
from navi.utils.searcher.app_searcher import InstalledAppCatalog
from .base import BaseTool, ToolInstanceRegistry, get_tool_registry
from .ai.chat import ChatTool
from .calc.calculator import CalculateTool
from .file_system.operations import PathOpenTool
from .system.app import AppOpenTool
from .system.operations import SystemActionTool
from .system.process import ProcessFocusTool, ProcessQuitTool
from .system.terminal import CommandRunTool, IdeOpenTool, TerminalOpenTool
from .web.search import WebOpenTool

logger = logging.getLogger(__name__)


def load_tools(
    catalog: Optional[InstalledAppCatalog] = None,
    process_manager: Optional[ProcessManager] = None,
    registry: Optional[ToolInstanceRegistry] = None,
) -> ToolInstanceRegistry:
    """
    Create and register ALL tools.

    ``catalog`` and ``process_manager`` are shared with the desktop service so
    caches are not duplicated.
    """
    logger.info("=" * 70)
    logger.info("🔧 Loading Tool Instances")
    logger.info("=" * 70)

    registry = registry or get_tool_registry()
    registry.clear()

    catalog = catalog or InstalledAppCatalog()
    pm = process_manager or ProcessManager()

    tools: list[BaseTool] = [
        AppOpenTool(catalog),
        PathOpenTool(),
        WebOpenTool(),
        CalculateTool(),
        SystemActionTool(),
        ProcessFocusTool(pm),
        ProcessQuitTool(pm),
        TerminalOpenTool(),
        CommandRunTool(),
        IdeOpenTool(),
        ChatTool(),
    ]

    for tool in tools:
        registry.register(tool)

    logger.info(f"✅ Loaded {registry.count()} tools")
    return registry
