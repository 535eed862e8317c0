"""
ProcessManager - running application listing, focus and termination
====================================================================

Core Functions Available:
------------------------
1. list_running_processes()
   → Returns: List[RunningProcess] with {name, window_title}, one entry per
     application, system/shell processes excluded

2. find_process(app_name: str)
   → psutil.Process list matching a name (case-insensitive, extension-less)

3. bring_to_focus(app_name: str)
   → Raise the application's window via the platform's window tool

4. close_process(app_name: str, grace_seconds: float = 3.0)
   → Terminate, then kill whatever survives the grace period

Platform Support: Windows · Linux (X11) · macOS
"""

from __future__ import annotations

import json
import logging
import os
import platform
import shutil
import subprocess
from typing import Dict, List, Optional

import psutil

from navi.models import RunningProcess

logger = logging.getLogger(__name__)

_PLATFORM: str = platform.system()
IS_WIN: bool = _PLATFORM == "Windows"
IS_LIN: bool = _PLATFORM == "Linux"
IS_MAC: bool = _PLATFORM == "Darwin"

# Never offered for switch/quit
EXCLUDED_PROCESSES = {
    "idle", "system", "dwm", "csrss", "winlogon", "services", "lsass",
    "svchost", "explorer", "searchindexer", "searchapp", "runtimebroker",
    "applicationframehost", "navi", "python", "pythonw",
    "bash", "zsh", "sh", "fish", "systemd", "kthreadd", "dbus-daemon",
    "loginwindow", "windowserver", "dock", "finder", "systemuiserver",
}

_POWERSHELL_LIST = (
    "Get-Process | Where-Object { $_.MainWindowTitle -ne '' } | "
    "Select-Object ProcessName, MainWindowTitle, Id | ConvertTo-Json -Depth 2"
)
_MAC_LIST = (
    'tell application "System Events" to get name of every process '
    "whose background only is false"
)


class ProcessManagerError(Exception):
    pass


class ProcessNotFoundError(ProcessManagerError):
    pass


def _clean_name(name: str) -> str:
    return os.path.splitext(name)[0] if name.lower().endswith(".exe") else name


def _run(cmd: List[str], timeout: float = 5.0) -> str:
    return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout).stdout.strip()


class ProcessManager:
    """
    Windowed application management.

    Main Functions:
    - list_running_processes() → Applications with a visible window
    - find_process(name) → Matching psutil processes
    - bring_to_focus(name) → Focus the application's window
    - close_process(name) → Terminate (then kill) the application
    """

    def __init__(self, grace_seconds: float = 3.0) -> None:
        self.grace_seconds = grace_seconds

    # === Core Function 1: List Running Processes ===

    def list_running_processes(self) -> List[RunningProcess]:
        """
        Running applications, deduplicated case-insensitively and sorted by name.
        """
        windows = self._window_titles()
        by_name: Dict[str, RunningProcess] = {}

        if windows is not None:
            for name, title in windows:
                self._add(by_name, name, title)
        else:
            for proc in psutil.process_iter(attrs=["pid", "name", "username"]):
                info = proc.info
                if not info.get("name") or info.get("pid", 0) < 10:
                    continue
                if info.get("username") is None:
                    continue
                self._add(by_name, info["name"], "")

        results = sorted(by_name.values(), key=lambda p: p.name.lower())
        logger.info(f"Found {len(results)} running apps")
        return results

    @staticmethod
    def _add(by_name: Dict[str, RunningProcess], raw_name: str, title: str) -> None:
        name = _clean_name((raw_name or "").strip())
        key = name.lower()
        if not name or key in EXCLUDED_PROCESSES or key in by_name:
            return
        by_name[key] = RunningProcess(name=name, window_title=title or "")

    def _window_titles(self) -> Optional[List[tuple]]:
        """(process name, window title) pairs, or None when no window tool is usable."""
        try:
            if IS_WIN:
                return self._windows_titles_win()
            if IS_LIN and shutil.which("wmctrl"):
                return self._window_titles_linux()
            if IS_MAC:
                return [(name, "") for name in _run(["osascript", "-e", _MAC_LIST]).split(", ") if name]
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            logger.warning(f"Window listing failed, falling back to psutil: {e}")
        return None

    @staticmethod
    def _windows_titles_win() -> List[tuple]:
        raw = _run(["powershell", "-NoProfile", "-Command", _POWERSHELL_LIST], timeout=10.0)
        if not raw:
            return []
        parsed = json.loads(raw)
        entries = parsed if isinstance(parsed, list) else [parsed]
        return [(e.get("ProcessName", ""), e.get("MainWindowTitle", "")) for e in entries if e]

    @staticmethod
    def _window_titles_linux() -> List[tuple]:
        pairs = []
        for line in _run(["wmctrl", "-l", "-p"]).splitlines():
            parts = line.split(None, 4)
            if len(parts) < 5:
                continue
            _wid, _desk, pid_str, _host, title = parts
            if not pid_str.isdigit():
                continue
            try:
                name = psutil.Process(int(pid_str)).name()
            except psutil.Error:
                continue
            pairs.append((name, title))
        return pairs

    # === Core Function 2: Find Process ===

    def find_process(self, app_name: str) -> List[psutil.Process]:
        wanted = _clean_name((app_name or "").strip()).lower()
        if not wanted:
            return []
        matches = []
        for proc in psutil.process_iter(attrs=["name"]):
            name = proc.info.get("name") or ""
            if _clean_name(name).lower() == wanted:
                matches.append(proc)
        return matches

    # === Core Function 3: Bring to Focus ===

    def bring_to_focus(self, app_name: str) -> bool:
        procs = self.find_process(app_name)
        if not procs:
            raise ProcessNotFoundError(f"'{app_name}' is not running")

        if IS_WIN:
            pid = procs[0].pid
            script = f"(New-Object -ComObject WScript.Shell).AppActivate({pid})"
            ok = _run(["powershell", "-NoProfile", "-Command", script]).lower() == "true"
        elif IS_MAC:
            ok = subprocess.run(
                ["osascript", "-e", f'tell application "{app_name}" to activate'],
                capture_output=True,
            ).returncode == 0
        elif shutil.which("wmctrl"):
            pids = {p.pid for p in procs}
            ok = False
            for line in _run(["wmctrl", "-l", "-p"]).splitlines():
                parts = line.split(None, 4)
                if len(parts) >= 3 and parts[2].isdigit() and int(parts[2]) in pids:
                    ok = subprocess.run(["wmctrl", "-i", "-a", parts[0]]).returncode == 0
                    break
        else:
            raise ProcessManagerError("No window tool available (install wmctrl)")

        if ok:
            logger.info(f"✓ Focused: {app_name}")
        return ok

    # === Core Function 4: Close Process ===

    def close_process(self, app_name: str) -> int:
        """Terminate every matching process; returns how many were stopped."""
        procs = self.find_process(app_name)
        if not procs:
            raise ProcessNotFoundError(f"'{app_name}' is not running")

        for proc in procs:
            try:
                proc.terminate()
            except psutil.NoSuchProcess:
                continue

        _gone, alive = psutil.wait_procs(procs, timeout=self.grace_seconds)
        for proc in alive:
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                continue

        logger.info(f"✓ Closed: {app_name} ({len(procs)} process(es))")
        return len(procs)
