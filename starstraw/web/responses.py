"""JSON envelope shared by every API response."""

from typing import Any

from fastapi.responses import JSONResponse

from starstraw.errors import StarstrawError


def default_return(success: bool, message: str = "", payload: Any = None) -> dict[str, Any]:
    return {"success": success, "message": message, "payload": payload}


def error_response(error: StarstrawError) -> JSONResponse:
    return JSONResponse(
        default_return(False, error.message, error.details or None),
        status_code=error.kind.status_code,
    )
