# navi/helper/response_helper.py
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from navi.models import ErrorKind

# ActionError kind -> HTTP status
ERROR_STATUS = {
    ErrorKind.INVALID: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BUSY: 409,
    ErrorKind.FAILED: 500,
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.TIMEOUT: 504,
}


def send_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = 200,
) -> JSONResponse:
    """Send a success envelope"""
    payload = {
        "success": True,
        "message": message,
        "data": jsonable_encoder(data),
    }
    return JSONResponse(status_code=status_code, content=payload)


def send_error(
    message: str = "An error occurred",
    status_code: int = 400,
    errors: Optional[Any] = None
) -> JSONResponse:
    """Send an error response"""
    content = {
        "success": False,
        "message": message
    }
    if errors is not None:
        content["errors"] = jsonable_encoder(errors)

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def send_result(result) -> JSONResponse:
    """Envelope for an ActionResult; pending confirmations answer 202."""
    body = result.model_dump(mode="json")
    if result.status == "ok":
        return send_response(data=body, message=result.message or "Success")
    if result.status == "pending_confirmation":
        return send_response(data=body, message=result.message, status_code=202)
    return send_error(
        message=result.message,
        status_code=ERROR_STATUS.get(result.kind, 500),
        errors=body,
    )
