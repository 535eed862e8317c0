"""
Navi Configuration
==================
Centralized configuration and path management for the palette service.

Settings are loaded from:
1. Environment variables prefixed with ``NAVI_``
2. A ``.env`` file next to the working directory (development)
3. The defaults below

User preferences (preferred IDE, default dev-server port and project
shortcuts) live in a JSON file inside the user data directory and are read
by the workflow runner only.
"""
from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from navi.models import CamelModel

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Path Management
# -----------------------------------------------------------------------------

def _default_user_data_dir() -> Path:
    """OS-specific writable user data directory (Local, not Roaming)."""
    system = platform.system()
    if system == "Windows":
        return Path.home() / "AppData" / "Local" / "Navi"
    elif system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Navi"
    return Path.home() / ".local" / "share" / "Navi"


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

class Settings(BaseSettings):
    """Service settings. Any field can be overridden with ``NAVI_<FIELD>``."""

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    # Suggestions
    suggestion_limit: int = 10
    visible_rows: int = 6

    # Debounce windows (milliseconds) per intent family
    app_debounce_ms: int = 15
    switch_debounce_ms: int = 0
    quit_debounce_ms: int = 50
    recent_debounce_ms: int = 50

    # Caches
    process_cache_ttl_seconds: float = 2.0
    app_cache_ttl_seconds: float = 300.0
    confirmation_ttl_seconds: float = 300.0

    # Timeouts
    fetch_timeout_seconds: float = 5.0
    dispatch_timeout_seconds: float = 30.0
    command_timeout_seconds: float = 60.0

    # Chat collaborator (empty endpoint = chat unavailable)
    chat_endpoint: str = ""
    chat_timeout_seconds: float = 30.0

    # Web
    search_url: str = "https://www.google.com/search?q="

    # Paths
    user_data_dir: Path = Field(default_factory=_default_user_data_dir)
    preferences_path: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="NAVI_",
        env_file=".env",
        extra="ignore",
    )

    def get_preferences_path(self) -> Path:
        if self.preferences_path:
            return Path(self.preferences_path)
        return Path(self.user_data_dir) / "preferences.json"


# Singleton settings instance
settings = Settings()


# -----------------------------------------------------------------------------
# Preferences
# -----------------------------------------------------------------------------

DEFAULT_START_COMMAND = "npm run dev"


class Project(CamelModel):
    """A named shortcut to a project directory."""
    nickname: str
    filepath: str
    start_command: str = DEFAULT_START_COMMAND
    port: Optional[str] = None


class Preferences(CamelModel):
    ide: str = "code"
    default_port: str = "3000"
    projects: List[Project] = Field(default_factory=list)

    def resolve_project(self, nickname: str) -> Optional[Project]:
        """Case-insensitive nickname lookup."""
        wanted = (nickname or "").strip().lower()
        if not wanted:
            return None
        for project in self.projects:
            if project.nickname and project.nickname.strip().lower() == wanted:
                return project
        return None


def _migrate_legacy(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fold the old ``pathNicknames`` list into ``projects``."""
    projects = raw.get("projects") or []
    if isinstance(projects, list):
        projects = list(projects)
    legacy = raw.get("pathNicknames") or []
    if isinstance(legacy, list) and legacy and not projects:
        command = raw.get("devServerCommand") or DEFAULT_START_COMMAND
        for entry in legacy:
            if not isinstance(entry, dict):
                continue
            projects.append({
                "nickname": entry.get("nickname", ""),
                "filepath": entry.get("path", ""),
                "startCommand": command,
            })
    migrated = dict(raw)
    migrated["projects"] = projects
    migrated.pop("pathNicknames", None)
    migrated.pop("devServerCommand", None)
    return migrated


def load_preferences(path: Optional[Path] = None) -> Preferences:
    """Read preferences from disk, falling back to defaults on any problem."""
    path = Path(path) if path else settings.get_preferences_path()
    if not path.exists():
        return Preferences()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read preferences from {path}: {e}")
        return Preferences()

    if not isinstance(raw, dict):
        logger.warning(f"Invalid preferences in {path}: expected an object, got {type(raw).__name__}")
        return Preferences()

    try:
        return Preferences.model_validate(_migrate_legacy(raw))
    except ValueError as e:
        logger.warning(f"Invalid preferences in {path}: {e}")
        return Preferences()


def save_preferences(preferences: Preferences, path: Optional[Path] = None) -> Path:
    """Persist preferences, dropping projects without a nickname or path."""
    path = Path(path) if path else settings.get_preferences_path()
    cleaned = preferences.model_copy(update={
        "projects": [
            p for p in preferences.projects
            if p.nickname.strip() and p.filepath.strip()
        ]
    })
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(
        json.dumps(cleaned.model_dump(by_alias=True), indent=2),
        encoding="utf-8",
    )
    os.replace(tmp, path)
    logger.info(f"Preferences saved to {path}")
    return path
