from typing import Optional

from pydantic import Field

from navi.models import CamelModel, Candidate


class DispatchRequest(CamelModel):
    """Either a selected candidate or raw text to classify and run."""
    text: str = ""
    candidate: Optional[Candidate] = None


class OpenAppRequest(CamelModel):
    app_name: str = Field(..., min_length=1)
    app_path: str = ""
    is_packaged_app: bool = False
    working_directory: str = ""
    launch_arguments: str = ""


class OpenPathRequest(CamelModel):
    path: str = Field(..., min_length=1)
    skip_check: bool = False


class AppNameRequest(CamelModel):
    app_name: str = Field(..., min_length=1)


class CalculateRequest(CamelModel):
    expression: str = Field(..., min_length=1)


class SearchWebRequest(CamelModel):
    query: str = Field(..., min_length=1)


class SystemRequest(CamelModel):
    action: str = Field(..., min_length=1)


class PromptRequest(CamelModel):
    prompt: str = Field(..., min_length=1, max_length=4000)


class ConfirmRequest(CamelModel):
    confirmation_id: str = Field(..., min_length=1)
    confirmed: bool = False
