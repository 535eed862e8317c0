# tools/base.py
"""
Base classes for action tools with parameter validation.
"""

from typing import Dict, Any, Optional
from abc import ABC, abstractmethod
import logging

from navi.models import ActionError, ActionOk, ErrorKind

logger = logging.getLogger(__name__)


class ToolOutput:
    """
    Tool execution output.

    Converts to the dispatcher's ``ActionResult`` with ``to_result()``.
    """
    def __init__(
        self,
        success: bool,
        data: Dict[str, Any],
        error: Optional[str] = None,
        error_kind: ErrorKind = ErrorKind.FAILED,
        message: str = "",
    ):
        self.success = success
        self.data = data
        self.error = error
        self.error_kind = error_kind
        self.message = message

    def to_result(self):
        if self.success:
            return ActionOk(message=self.message, data=self.data)
        return ActionError(kind=self.error_kind, message=self.error or "Unknown error", data=self.data)


class BaseTool(ABC):
    """
    Base class for all action tools.

    Provides:
    - Input validation against ``params``
    - Error handling
    - Logging

    Subclasses must implement:
    - get_tool_name() -> str
    - _execute(inputs) -> ToolOutput

    ``params`` maps parameter names to ``{"type": ..., "required": ...,
    "default": ...}``.
    """

    params: Dict[str, Dict[str, Any]] = {}

    def __init__(self):
        self.tool_name = self.get_tool_name()
        self.logger = logging.getLogger(f"navi.tool.{self.tool_name}")

    @abstractmethod
    def get_tool_name(self) -> str:
        """Return tool name (registry key)."""
        pass

    @abstractmethod
    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        """
        Execute the tool (implement this in child classes).

        Args:
            inputs: Validated inputs

        Returns:
            ToolOutput with results
        """
        pass

    async def execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        """
        Execute with validation and error handling.

        This is the PUBLIC method called by the desktop service.
        """
        try:
            validation_error = self._validate_inputs(inputs)
            if validation_error:
                return ToolOutput(
                    success=False,
                    data={},
                    error=f"Input validation failed: {validation_error}",
                    error_kind=ErrorKind.INVALID,
                )

            self.logger.info(f"Executing {self.tool_name}")
            result = await self._execute(inputs)

            if result.success:
                self.logger.info(f"✅ {self.tool_name} succeeded")
            else:
                self.logger.warning(f"⚠️  {self.tool_name} failed: {result.error}")

            return result

        except Exception as e:
            self.logger.error(f"❌ {self.tool_name} error: {e}")
            return ToolOutput(
                success=False,
                data={},
                error=str(e)
            )

    def _validate_inputs(self, inputs: Dict[str, Any]) -> Optional[str]:
        """
        Validate inputs against ``params``.

        Returns:
            Error message if validation fails, None if success
        """
        for param_name, param_def in self.params.items():
            required = param_def.get("required", False)
            param_type = param_def.get("type")

            if required and param_name not in inputs:
                return f"Missing required parameter: {param_name}"

            if param_name in inputs:
                value = inputs[param_name]

                if param_type == "string" and not isinstance(value, str):
                    return f"Parameter '{param_name}' must be string, got {type(value).__name__}"

                elif param_type == "boolean" and not isinstance(value, bool):
                    return f"Parameter '{param_name}' must be boolean, got {type(value).__name__}"

                elif param_type == "array" and not isinstance(value, list):
                    return f"Parameter '{param_name}' must be array, got {type(value).__name__}"

        return None

    def get_input(self, inputs: Dict[str, Any], param_name: str, default: Any = None) -> Any:
        """
        Get input value with default fallback.
        """
        if param_name in inputs:
            return inputs[param_name]

        schema_default = self.params.get(param_name, {}).get("default")
        if schema_default is not None:
            return schema_default

        return default


class ToolInstanceRegistry:
    """
    Registry that holds tool INSTANCES.
    Loaded once at startup.
    """

    def __init__(self):
        self.tool_instances: Dict[str, BaseTool] = {}
        self.logger = logging.getLogger("navi.ToolInstanceRegistry")

    def register(self, tool: BaseTool):
        """Register a tool instance."""
        tool_name = tool.get_tool_name()
        self.tool_instances[tool_name] = tool
        self.logger.info(f"✅ Registered tool: {tool_name}")

    def get(self, tool_name: str) -> Optional[BaseTool]:
        return self.tool_instances.get(tool_name)

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self.tool_instances.keys())

    def count(self) -> int:
        return len(self.tool_instances)

    def clear(self):
        self.tool_instances.clear()


# Global instance registry
_tool_registry = ToolInstanceRegistry()


def get_tool_registry() -> ToolInstanceRegistry:
    """Get global tool instance registry."""
    return _tool_registry
