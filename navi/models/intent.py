# models/intent.py
"""
Intent model - the classified purpose of a palette input.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IntentType(str, Enum):
    PATH = "path"
    APP = "app"
    CALCULATE = "calculate"
    SEARCH = "search"
    CHAT = "chat"
    QUIT = "quit"
    SWITCH = "switch"
    RECENT = "recent"
    URL = "url"
    UNKNOWN = "unknown"


class Intent(BaseModel):
    """
    Immutable classification result.

    ``value`` is the input with routing prefixes/keywords stripped.
    ``confidence`` is only used as a gating threshold, never for ranking.
    """
    model_config = ConfigDict(frozen=True)

    type: IntentType
    value: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
