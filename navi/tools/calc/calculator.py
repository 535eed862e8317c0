"""
Calculator tool.

Expressions are sanitized down to digits, ``+ - * / ( ) .`` and whitespace,
then evaluated by walking a whitelisted AST (no ``eval``).
"""

import ast
import operator
import re
from typing import Any, Dict, Union

from navi.models import ErrorKind
from ..base import BaseTool, ToolOutput

Number = Union[int, float]

_DISALLOWED = re.compile(r"[^0-9+\-*/().\s]")
_PRECISION = 10

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class CalculationError(ValueError):
    pass


def sanitize(expression: str) -> str:
    return _DISALLOWED.sub("", expression or "").strip()


def _eval_node(node: ast.AST) -> Number:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise CalculationError(f"Unsupported expression element: {type(node).__name__}")


def evaluate(expression: str) -> Number:
    """Evaluate an arithmetic expression, rounded to 10 decimal places."""
    cleaned = sanitize(expression)
    if not cleaned:
        raise CalculationError("Empty expression")
    try:
        tree = ast.parse(cleaned, mode="eval")
    except SyntaxError as e:
        raise CalculationError(f"Invalid expression: {cleaned}") from e
    try:
        value = _eval_node(tree)
    except ZeroDivisionError as e:
        raise CalculationError("Division by zero") from e
    return round(value, _PRECISION)


def format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CalculateTool(BaseTool):

    params = {"expression": {"type": "string", "required": True}}

    def get_tool_name(self) -> str:
        return "calculate"

    async def _execute(self, inputs: Dict[str, Any]) -> ToolOutput:
        expression = inputs.get("expression", "")
        try:
            value = evaluate(expression)
        except CalculationError as e:
            return ToolOutput(success=False, data={"expression": expression}, error=str(e),
                              error_kind=ErrorKind.INVALID)

        text = format_number(value)
        return ToolOutput(
            success=True,
            data={"expression": sanitize(expression), "result": value, "formatted": text},
            message=f"{sanitize(expression)} = {text}",
        )
