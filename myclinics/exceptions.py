from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional

from . import messages


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: Optional[str] = None, code: Optional[str] = None,
                 errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(status_code=status_code, detail=detail or messages.message_for(status_code, code))
        self.code = code
        self.errors = errors


def create_error_response(error_message: str, code: Optional[str] = None,
                          errors: Optional[Dict[str, List[str]]] = None) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "message": error_message,
        "code": code,
        "errors": errors,
    }


def create_success_response(data: Any = None, message: Optional[str] = None, **extra: Any) -> dict:
    """Create a standardized success response"""
    body = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    body.update(extra)
    return body


def _detail_text(detail: Any, status_code: int) -> str:
    if isinstance(detail, str) and detail:
        return detail
    return messages.status_message(status_code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # HTTPBearer answers 403 "Not authenticated" when the header is missing
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response(messages.status_message(401)),
        )

    code = getattr(exc, "code", None)
    errors = getattr(exc, "errors", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(_detail_text(exc.detail, exc.status_code), code, errors),
        headers=getattr(exc, "headers", None),
    )


def group_validation_errors(raw_errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        field = ".".join(loc) or "__root__"
        msg = err.get("msg") or ""
        if err.get("type") == "value_error" and msg.startswith("Value error, "):
            # Raised by our own validators, already user facing
            msg = msg[len("Value error, "):]
        else:
            msg = messages.validation_message(err.get("type"), err.get("ctx"))
        grouped.setdefault(field, []).append(msg)
    return grouped


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = group_validation_errors(exc.errors())
    first = next(iter(errors.values()), [messages.status_message(422)])[0]
    return JSONResponse(
        status_code=422,
        content=create_error_response(first, messages.VALIDATION_ERROR, errors),
    )
