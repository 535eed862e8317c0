"""
Web tool: open a URL, or search the web for free text.
"""

import webbrowser
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from navi.config import settings
from navi.models import ErrorKind
from ..base import BaseTool, ToolOutput


def build_search_url(query: str, base_url: Optional[str] = None) -> str:
    return (base_url or settings.search_url) + quote_plus(query.strip())


def looks_like_url(text: str) -> bool:
    lowered = text.strip().lower()
    return lowered.startswith(("http://", "https://")) or "://" in lowered


class WebOpenTool(BaseTool):

    params = {"text": {"type": "string", "required": True}}

    def __init__(self, search_url: Optional[str] = None):
        super().__init__()
        self.search_url = search_url

    def get_tool_name(self) -> str:
        return "web_open"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        text = inputs.get("text", "").strip()
        if not text:
            return ToolOutput(success=False, data={}, error="Nothing to open", error_kind=ErrorKind.INVALID)

        is_url = looks_like_url(text)
        url = text if is_url else build_search_url(text, self.search_url)
        if not webbrowser.open(url):
            return ToolOutput(success=False, data={"url": url}, error="No browser available",
                              error_kind=ErrorKind.UNAVAILABLE)

        message = f"Opened {url}" if is_url else f"Searching for: {text}"
        return ToolOutput(success=True, data={"url": url, "search": not is_url}, message=message)
