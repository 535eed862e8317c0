# models/candidate.py
"""
Candidate models - one rankable, actionable item shown in the palette.

Collaborators hand back ``RunningProcess`` and ``RecentItem`` shapes; both
convert to ``Candidate`` before ranking.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from . import CamelModel


class CandidateKind(str, Enum):
    APP = "app"
    SYSTEM = "system"
    SWITCH = "switch"
    QUIT = "quit"
    RECENT_FILE = "recent_file"
    RECENT_FOLDER = "recent_folder"


class Candidate(CamelModel):
    """
    A single suggestion.

    ``action_key`` is opaque to the ranker: a launch path for apps, a process
    name for switch/quit, a filesystem path for recent items and a system
    action id for power commands.
    """
    display_name: str
    action_key: str = ""
    score: float = 0.0
    kind: CandidateKind = CandidateKind.APP

    # Kind-specific metadata
    is_packaged_app: bool = False
    working_directory: str = ""
    launch_arguments: str = ""
    detail: str = ""

    @property
    def label(self) -> str:
        """Text a UI shows for this row."""
        if self.kind == CandidateKind.SWITCH:
            return f"Switch to {self.display_name}"
        if self.kind == CandidateKind.QUIT:
            return f"Quit {self.display_name}"
        if self.kind == CandidateKind.RECENT_FOLDER:
            return f"📁 {self.display_name}"
        if self.kind == CandidateKind.RECENT_FILE:
            return f"📄 {self.display_name}"
        return self.display_name


class RunningProcess(CamelModel):
    name: str
    window_title: str = ""

    def to_candidate(self, kind: CandidateKind) -> Candidate:
        return Candidate(
            display_name=self.name,
            action_key=self.name,
            score=1.0,
            kind=kind,
            detail=self.window_title,
        )


class RecentItem(CamelModel):
    name: str
    path: str
    is_folder: bool = False

    def to_candidate(self) -> Candidate:
        return Candidate(
            display_name=self.name,
            action_key=self.path,
            score=1.0,
            kind=CandidateKind.RECENT_FOLDER if self.is_folder else CandidateKind.RECENT_FILE,
            detail=self.path,
        )


class SystemCommand(BaseModel):
    name: str
    display: str
    action: str

    def to_candidate(self) -> Candidate:
        return Candidate(
            display_name=self.display,
            action_key=self.action,
            score=1.0,
            kind=CandidateKind.SYSTEM,
        )


SYSTEM_COMMANDS: List[SystemCommand] = [
    SystemCommand(name="restart", display="Restart Computer", action="restart"),
    SystemCommand(name="shutdown", display="Shutdown Computer", action="shutdown"),
    SystemCommand(name="sleep", display="Sleep", action="sleep"),
    SystemCommand(name="hibernate", display="Hibernate", action="hibernate"),
    SystemCommand(name="lock", display="Lock Screen", action="lock"),
    SystemCommand(name="signout", display="Sign Out", action="signout"),
]


def find_system_command(action: str) -> Optional[SystemCommand]:
    wanted = (action or "").strip().lower()
    return next((c for c in SYSTEM_COMMANDS if c.action == wanted), None)
