"""
Recently used files and folders.

Windows reads the shell ``Recent`` folder shortcuts through PowerShell;
other platforms read the XDG ``recently-used.xbel`` bookmark file.
Items are returned newest first and only when the target still exists.
"""

import json
import logging
import os
import subprocess
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlparse

from navi.models import RecentItem

logger = logging.getLogger(__name__)

MAX_ITEMS = 20

_RECENT_PS = r"""
$recentPath = [Environment]::GetFolderPath('Recent')
$shell = New-Object -ComObject WScript.Shell
$items = New-Object System.Collections.ArrayList
Get-ChildItem -Path $recentPath -Filter "*.lnk" -ErrorAction SilentlyContinue |
  Sort-Object LastWriteTime -Descending |
  Select-Object -First 30 |
  ForEach-Object {
    try {
      $target = $shell.CreateShortcut($_.FullName).TargetPath
      if ($target -and (Test-Path -LiteralPath $target)) {
        $item = Get-Item -LiteralPath $target
        $null = $items.Add([PSCustomObject]@{
          Name = $item.Name; Path = $target; IsFolder = $item.PSIsContainer
        })
      }
    } catch {}
  }
$items | ConvertTo-Json -Depth 2 -Compress
"""


class RecentItemsReader:

    def __init__(self, platform_name: Optional[str] = None, xbel_path: Optional[Path] = None):
        self._os = platform_name or sys.platform
        self._xbel_path = xbel_path or Path.home() / ".local" / "share" / "recently-used.xbel"

    def list_items(self, type_filter: Optional[str] = None, limit: int = MAX_ITEMS) -> List[RecentItem]:
        """
        Args:
            type_filter: ``files``, ``folders`` or None for both.
        """
        items = self._read_windows() if self._os == "win32" else self._read_xbel()
        if type_filter == "files":
            items = [i for i in items if not i.is_folder]
        elif type_filter == "folders":
            items = [i for i in items if i.is_folder]
        return items[:limit]

    @staticmethod
    def _read_windows() -> List[RecentItem]:
        try:
            r = subprocess.run(
                ["powershell", "-NoProfile", "-Command", _RECENT_PS],
                capture_output=True, text=True, timeout=10,
            )
            raw = r.stdout.strip()
            if not raw:
                return []
            parsed = json.loads(raw)
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            logger.warning(f"Could not read recent items: {e}")
            return []

        entries = parsed if isinstance(parsed, list) else [parsed]
        return [
            RecentItem(name=e.get("Name", ""), path=e.get("Path", ""), is_folder=bool(e.get("IsFolder")))
            for e in entries
            if e and e.get("Path")
        ]

    def _read_xbel(self) -> List[RecentItem]:
        if not self._xbel_path.exists():
            return []
        try:
            root = ET.parse(self._xbel_path).getroot()
        except (ET.ParseError, OSError) as e:
            logger.warning(f"Could not parse {self._xbel_path}: {e}")
            return []

        dated = []
        for bookmark in root.iter("bookmark"):
            href = bookmark.get("href", "")
            parsed = urlparse(href)
            if parsed.scheme != "file":
                continue
            path = unquote(parsed.path)
            if not os.path.exists(path):
                continue
            stamp = bookmark.get("visited") or bookmark.get("modified") or bookmark.get("added") or ""
            item = RecentItem(
                name=os.path.basename(path.rstrip("/")) or path,
                path=path,
                is_folder=os.path.isdir(path),
            )
            dated.append((stamp, item))

        # ISO-8601 timestamps sort lexicographically
        dated.sort(key=lambda pair: pair[0], reverse=True)
        return [item for _, item in dated]
