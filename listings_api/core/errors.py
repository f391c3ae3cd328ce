from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_404_NOT_FOUND

from ..schemas import ErrorBody


class ConfigError(RuntimeError):
    """Raised before serving when required settings are missing."""


class PropertiesError(Exception):
    """
    Base for failures surfaced to API callers.
    Carries the HTTP status and the message rendered as {"error": message}.
    """
    status_code: int = HTTP_404_NOT_FOUND

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidChannel(PropertiesError):
    def __init__(self, message: str = "Source not accepted."):
        super().__init__(message)


class UpstreamFetchFailed(PropertiesError):
    """Network error, timeout or error status from the upstream catalog."""


class UpstreamDecodeFailed(PropertiesError):
    """Upstream answered, but not with a JSON array of listings."""


async def properties_error_handler(request: Request, exc: PropertiesError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=ErrorBody(error=exc.message).model_dump())
