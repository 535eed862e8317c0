import logging
from typing import Optional

from fastapi import APIRouter, Depends

from navi import __version__
from navi.config import Preferences, load_preferences, save_preferences, settings
from navi.core.action_dispatcher import ActionDispatcher
from navi.core.candidate_ranker import rank_apps
from navi.core.intent_classifier import classify
from navi.core.suggestion_presenter import suggest
from navi.dependencies import get_dispatcher, get_service
from navi.helper.response_helper import send_error, send_response, send_result
from navi.models import Candidate, CandidateKind, Intent, IntentType, find_system_command
from navi.schemas.palette_schema import (
    AppNameRequest,
    CalculateRequest,
    ConfirmRequest,
    DispatchRequest,
    OpenAppRequest,
    OpenPathRequest,
    PromptRequest,
    SearchWebRequest,
    SystemRequest,
)
from navi.services.desktop_service import DesktopService
from navi.tools.system.terminal import installed_terminals
from navi.utils.async_utils import run_in_executor

logger = logging.getLogger(__name__)
router = APIRouter()


def _direct(intent_type: IntentType, value: str) -> Intent:
    """Intent for an explicit endpoint call (no classification needed)."""
    return Intent(type=intent_type, value=value.strip(), confidence=1.0)


@router.get("/health")
async def health(service: DesktopService = Depends(get_service)):
    return send_response(
        data={"status": "healthy", "version": __version__, "tools": service.registry.list_tools()},
        message="Navi is running",
    )


# ================= QUERIES ================= #

@router.get("/classify")
async def classify_text(q: str = ""):
    return send_response(data=classify(q).model_dump(mode="json"))


@router.get("/suggest")
async def suggest_for_text(q: str = "", service: DesktopService = Depends(get_service)):
    items = await suggest(service, q, settings.suggestion_limit)
    return send_response(data={
        "intent": classify(q).model_dump(mode="json"),
        "suggestions": [{**c.model_dump(mode="json", by_alias=True), "label": c.label} for c in items],
    })


@router.get("/search-apps")
async def search_apps(q: str = "", service: DesktopService = Depends(get_service)):
    apps = rank_apps(await service.search_installed_apps(q), q, settings.suggestion_limit)
    return send_response(data=[a.model_dump(mode="json", by_alias=True) for a in apps])


@router.get("/running-apps")
async def running_apps(service: DesktopService = Depends(get_service)):
    processes = await service.list_running_processes()
    return send_response(data=[p.model_dump(mode="json", by_alias=True) for p in processes])


@router.get("/recent-files")
async def recent_files(type: Optional[str] = None, service: DesktopService = Depends(get_service)):
    if type not in (None, "files", "folders"):
        return send_error(message="type must be 'files' or 'folders'", status_code=400)
    items = await service.list_recent_items(type)
    return send_response(data=[i.model_dump(mode="json", by_alias=True) for i in items])


@router.get("/terminals")
async def terminals():
    return send_response(data={"terminals": await run_in_executor(installed_terminals)})


# ================= ACTIONS ================= #

@router.post("/dispatch")
async def dispatch(request: DispatchRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    if request.candidate is not None:
        return send_result(await dispatcher.dispatch(request.candidate, raw_text=request.text))
    if not request.text.strip():
        return send_error(message="Either text or candidate is required", status_code=400)
    result = await dispatcher.dispatch(classify(request.text), raw_text=request.text)
    return send_result(result)


@router.post("/open-app")
async def open_app(request: OpenAppRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    candidate = Candidate(
        display_name=request.app_name,
        action_key=request.app_path,
        is_packaged_app=request.is_packaged_app,
        working_directory=request.working_directory,
        launch_arguments=request.launch_arguments,
    )
    return send_result(await dispatcher.dispatch(candidate))


@router.post("/open-path")
async def open_path(request: OpenPathRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    if request.skip_check:
        return send_result(await dispatcher.open_path_anyway(request.path))
    return send_result(await dispatcher.dispatch(_direct(IntentType.PATH, request.path)))


@router.post("/quit-app")
async def quit_app(request: AppNameRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    candidate = Candidate(display_name=request.app_name, action_key=request.app_name, kind=CandidateKind.QUIT)
    return send_result(await dispatcher.dispatch(candidate))


@router.post("/focus-app")
async def focus_app(request: AppNameRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    candidate = Candidate(display_name=request.app_name, action_key=request.app_name, kind=CandidateKind.SWITCH)
    return send_result(await dispatcher.dispatch(candidate))


@router.post("/calculate")
async def calculate(request: CalculateRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    return send_result(await dispatcher.dispatch(_direct(IntentType.CALCULATE, request.expression)))


@router.post("/search-web")
async def search_web(request: SearchWebRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    return send_result(await dispatcher.dispatch(_direct(IntentType.SEARCH, request.query)))


@router.post("/system")
async def system_action(request: SystemRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    command = find_system_command(request.action)
    if command is None:
        return send_error(message=f"Unknown system action: {request.action}", status_code=400)
    return send_result(await dispatcher.dispatch(command.to_candidate()))


@router.post("/prompt")
async def prompt(request: PromptRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    return send_result(await dispatcher.dispatch(_direct(IntentType.CHAT, request.prompt), raw_text=request.prompt))


@router.post("/confirm")
async def confirm(request: ConfirmRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    result = await dispatcher.resolve_confirmation(request.confirmation_id, request.confirmed)
    return send_result(result)


# ================= PREFERENCES ================= #

@router.get("/preferences")
async def get_preferences():
    # Read from disk on every request
    return send_response(data=load_preferences().model_dump(mode="json", by_alias=True))


@router.post("/preferences")
async def update_preferences(preferences: Preferences):
    path = save_preferences(preferences)
    logger.info(f"Preferences updated ({len(preferences.projects)} projects)")
    return send_response(
        data=load_preferences(path).model_dump(mode="json", by_alias=True),
        message="Preferences saved",
    )