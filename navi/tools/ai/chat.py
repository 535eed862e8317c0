"""
Chat tool: forwards natural-language prompts to the configured assistant.

The assistant is an HTTP endpoint taking ``{"prompt": text}`` and answering
``{"message": str, "workflow": {"steps": [...]} | null}``.
"""

from typing import Any, Dict, Optional

import httpx

from navi.config import settings
from navi.models import ErrorKind
from ..base import BaseTool, ToolOutput


class ChatTool(BaseTool):

    params = {"text": {"type": "string", "required": True}}

    def __init__(self, endpoint: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__()
        self.endpoint = endpoint if endpoint is not None else settings.chat_endpoint
        self.timeout = timeout if timeout is not None else settings.chat_timeout_seconds

    def get_tool_name(self) -> str:
        return "chat"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        text = inputs.get("text", "").strip()
        if not self.endpoint:
            return ToolOutput(success=False, data={}, error="Chat is not configured (set NAVI_CHAT_ENDPOINT)",
                              error_kind=ErrorKind.UNAVAILABLE)
        if not text:
            return ToolOutput(success=False, data={}, error="Ask me something", error_kind=ErrorKind.INVALID)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.endpoint, json={"prompt": text})
                resp.raise_for_status()
                body = resp.json()
        except httpx.TimeoutException:
            return ToolOutput(success=False, data={}, error="Assistant did not answer in time",
                              error_kind=ErrorKind.TIMEOUT)
        except httpx.HTTPStatusError as e:
            return ToolOutput(success=False, data={}, error=f"Assistant error: HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            return ToolOutput(success=False, data={}, error=f"Assistant unreachable: {e}",
                              error_kind=ErrorKind.UNAVAILABLE)
        except ValueError:
            return ToolOutput(success=False, data={}, error="Assistant returned invalid JSON")

        message = body.get("message") or body.get("response") or ""
        workflow = body.get("workflow")
        return ToolOutput(success=True, data={"message": message, "workflow": workflow}, message=message)
