# models/result.py
"""
Normalized outcome of every side-effecting operation.

Collaborators report success, failure or "needs confirmation" in many ad hoc
shapes; everything is folded into one discriminated union so the dispatcher
and presenter handle outcomes uniformly.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    FAILED = "failed"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    INVALID = "invalid"
    BUSY = "busy"
    UNAVAILABLE = "unavailable"


class ActionOk(BaseModel):
    status: Literal["ok"] = "ok"
    message: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)


class ActionError(BaseModel):
    status: Literal["error"] = "error"
    kind: ErrorKind = ErrorKind.FAILED
    message: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)


class PendingConfirmation(BaseModel):
    """A deferred action waiting for an explicit yes/no."""
    status: Literal["pending_confirmation"] = "pending_confirmation"
    id: str
    message: str = ""
    context: Dict[str, Any] = Field(default_factory=dict)


ActionResult = Annotated[
    Union[ActionOk, ActionError, PendingConfirmation],
    Field(discriminator="status"),
]


class ActionFailed(Exception):
    """Raised by collaborators that cannot express failure as a result (chat)."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.FAILED):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def to_result(self) -> ActionError:
        return ActionError(kind=self.kind, message=self.message)


class ChatReply(BaseModel):
    """
    Response of the chat collaborator.

    ``workflow`` is the raw step list the assistant wants run locally; it is
    validated by the workflow runner, not here.
    """
    message: str = ""
    workflow: Optional[Dict[str, Any]] = None
