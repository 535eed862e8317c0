# core/collaborators.py
"""
Collaborator interfaces consumed by the presenter and dispatcher.

The engine never touches the OS directly: candidate lists come from a
``CandidateSource`` and side effects go through an ``ActionBackend``.
``navi.services.desktop_service.DesktopService`` implements both; tests use
in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from navi.models import ActionResult, Candidate, ChatReply, RecentItem, RunningProcess


class CandidateSource(ABC):

    @abstractmethod
    async def search_installed_apps(self, query: str) -> List[Candidate]:
        pass

    @abstractmethod
    async def list_running_processes(self) -> List[RunningProcess]:
        pass

    @abstractmethod
    async def list_recent_items(self, type_filter: Optional[str] = None) -> List[RecentItem]:
        """Recent files/folders, newest first. ``type_filter`` is ``files`` or ``folders``."""
        pass


class ActionBackend(ABC):
    """
    Side-effecting operations.

    Every method returns an ``ActionResult`` except ``invoke_chat``. Methods
    may raise; the dispatcher turns exceptions into ``ActionError``.
    """

    @abstractmethod
    async def open_application(self, candidate: Candidate) -> ActionResult:
        pass

    @abstractmethod
    async def open_path(self, path: str, require_exists: bool = True) -> ActionResult:
        """Open a file or folder; ``not_found`` error when missing and ``require_exists``."""
        pass

    @abstractmethod
    async def focus_process(self, name: str) -> ActionResult:
        pass

    @abstractmethod
    async def terminate_process(self, name: str) -> ActionResult:
        pass

    @abstractmethod
    async def run_calculation(self, expression: str) -> ActionResult:
        pass

    @abstractmethod
    async def open_web_search_or_url(self, text: str) -> ActionResult:
        pass

    @abstractmethod
    async def run_system_action(self, action_id: str) -> ActionResult:
        pass

    @abstractmethod
    async def invoke_chat(self, text: str) -> ChatReply:
        pass

    @abstractmethod
    async def open_terminal(self, directory: str) -> ActionResult:
        pass

    @abstractmethod
    async def run_command(
        self,
        command: str,
        cwd: Optional[str] = None,
        new_terminal: bool = False,
    ) -> ActionResult:
        """Run a shell command; ``new_terminal`` launches it detached in a terminal window."""
        pass

    @abstractmethod
    async def open_in_ide(self, ide: str, path: str) -> ActionResult:
        pass
