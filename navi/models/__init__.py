from pydantic import BaseModel, ConfigDict


def to_camel(string: str) -> str:
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True
    )


from .intent import Intent, IntentType  # noqa: E402
from .candidate import (  # noqa: E402
    Candidate,
    CandidateKind,
    RecentItem,
    RunningProcess,
    SystemCommand,
    SYSTEM_COMMANDS,
    find_system_command,
)
from .result import (  # noqa: E402
    ActionError,
    ActionFailed,
    ActionOk,
    ActionResult,
    ChatReply,
    ErrorKind,
    PendingConfirmation,
)
