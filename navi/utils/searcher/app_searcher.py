"""
Installed application catalog.

Platform scan:
    Windows  Start Menu ``.lnk``/``.url`` shortcuts (machine + user) and
             packaged apps from ``Get-StartApps``
    Linux    ``.desktop`` entries (``NoDisplay``/``Hidden`` skipped)
    macOS    ``.app`` bundles in the Applications folders

The scan is slow, so the result lives in a ``TTLCache`` owned by the catalog.
"""

import configparser
import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from navi.core.cache import TTLCache
from navi.core.candidate_ranker import score
from navi.models import Candidate, CandidateKind

logger = logging.getLogger(__name__)

_SHORTCUT_BLACKLIST_WORDS = frozenset({
    "uninstall", "uninstaller", "readme", "help", "documentation",
    "release notes", "website", "license",
})

_START_APPS_PS = "Get-StartApps | Select-Object Name, AppID | ConvertTo-Json -Depth 2"


class InstalledAppCatalog:

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        platform_name: Optional[str] = None,
        scanner: Optional[Callable[[], List[Candidate]]] = None,
    ):
        self._os = platform_name or sys.platform
        self._cache: TTLCache[List[Candidate]] = TTLCache(ttl_seconds)
        self._scanner = scanner or self._scan

    # ─────────────────────────────────────────────────────────────────────────
    #  Public API
    # ─────────────────────────────────────────────────────────────────────────
    def all_apps(self) -> List[Candidate]:
        apps = self._cache.get()
        if apps is None:
            logger.info("[AppCatalog] refreshing cache …")
            apps = self._dedupe(self._scanner())
            self._cache.set(apps)
            logger.info(f"[AppCatalog] cache ready: {len(apps)} apps")
        return apps

    def search(self, query: str) -> List[Candidate]:
        """Apps whose name matches ``query`` at all; ordering is left to the ranker."""
        q = (query or "").strip()
        if not q:
            return []
        return [app for app in self.all_apps() if score(q, app.display_name) > 0]

    def find_best(self, name: str) -> Optional[Candidate]:
        matches = sorted(
            self.search(name),
            key=lambda app: (-score(name, app.display_name), app.display_name.lower()),
        )
        return matches[0] if matches else None

    def refresh(self) -> int:
        self._cache.clear()
        return len(self.all_apps())

    @staticmethod
    def _dedupe(apps: List[Candidate]) -> List[Candidate]:
        seen: Dict[str, Candidate] = {}
        for app in apps:
            key = app.display_name.strip().lower()
            if key and key not in seen:
                seen[key] = app
        return sorted(seen.values(), key=lambda a: a.display_name.lower())

    # ─────────────────────────────────────────────────────────────────────────
    #  Scanners
    # ─────────────────────────────────────────────────────────────────────────
    def _scan(self) -> List[Candidate]:
        if self._os == "win32":
            return self._scan_windows()
        if self._os == "darwin":
            return self._scan_macos()
        return self._scan_linux()

    def _scan_windows(self) -> List[Candidate]:
        roots = [
            Path(os.environ.get("PROGRAMDATA", r"C:\ProgramData")) / "Microsoft" / "Windows" / "Start Menu" / "Programs",
            Path.home() / "AppData" / "Roaming" / "Microsoft" / "Windows" / "Start Menu" / "Programs",
        ]
        apps: List[Candidate] = []
        for root in roots:
            apps.extend(self._scan_shortcuts(root))
        apps.extend(self._win_packaged_apps())
        return apps

    @staticmethod
    def _scan_shortcuts(root: Path) -> List[Candidate]:
        apps: List[Candidate] = []
        if not root.exists():
            return apps
        for path in root.rglob("*"):
            if path.suffix.lower() not in (".lnk", ".url"):
                continue
            name = path.stem
            if any(word in name.lower() for word in _SHORTCUT_BLACKLIST_WORDS):
                continue
            apps.append(Candidate(
                display_name=name,
                action_key=str(path),
                kind=CandidateKind.APP,
                working_directory=str(path.parent),
            ))
        return apps

    @staticmethod
    def _win_packaged_apps() -> List[Candidate]:
        try:
            r = subprocess.run(
                ["powershell", "-NoProfile", "-Command", _START_APPS_PS],
                capture_output=True, text=True, timeout=10,
            )
            raw = r.stdout.strip()
            if not raw:
                return []
            parsed = json.loads(raw)
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            logger.debug(f"[AppCatalog] Get-StartApps failed: {e}")
            return []

        entries = parsed if isinstance(parsed, list) else [parsed]
        apps = []
        for entry in entries:
            app_id = (entry or {}).get("AppID") or ""
            name = (entry or {}).get("Name") or ""
            # Classic desktop apps show up as paths; only keep packaged ids
            if not name or "!" not in app_id:
                continue
            apps.append(Candidate(display_name=name, action_key=app_id, is_packaged_app=True))
        return apps

    def _scan_macos(self) -> List[Candidate]:
        apps: List[Candidate] = []
        for base in (Path("/Applications"), Path("/System/Applications"), Path.home() / "Applications"):
            if not base.exists():
                continue
            for bundle in base.glob("**/*.app"):
                # Skip helper apps nested inside other bundles
                if any(part.endswith(".app") for part in bundle.relative_to(base).parts[:-1]):
                    continue
                apps.append(Candidate(display_name=bundle.stem, action_key=str(bundle)))
        return apps

    def _scan_linux(self) -> List[Candidate]:
        dirs = [
            Path("/usr/share/applications"),
            Path("/usr/local/share/applications"),
            Path.home() / ".local/share/applications",
            Path("/var/lib/flatpak/exports/share/applications"),
            Path("/var/lib/snapd/desktop/applications"),
        ]
        apps: List[Candidate] = []
        for d in dirs:
            if not d.exists():
                continue
            for entry in d.glob("*.desktop"):
                app = parse_desktop_entry(entry)
                if app:
                    apps.append(app)
        return apps


def parse_desktop_entry(path: Path) -> Optional[Candidate]:
    """Read a freedesktop ``.desktop`` file; None for hidden or malformed entries."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError, OSError) as e:
        logger.debug(f"[AppCatalog] skipping {path}: {e}")
        return None

    if not parser.has_section("Desktop Entry"):
        return None
    section = parser["Desktop Entry"]
    if section.get("Type", "Application") != "Application":
        return None
    if section.get("NoDisplay", "false").lower() == "true" or section.get("Hidden", "false").lower() == "true":
        return None

    name = section.get("Name", "").strip()
    if not name:
        return None
    return Candidate(
        display_name=name,
        action_key=str(path),
        working_directory=section.get("Path", ""),
        detail=section.get("Exec", ""),
    )
