from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def api_response(
    *,
    data: Any,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Single source of truth for successful API responses.
    Pydantic models are dumped with their camelCase aliases, leaving out
    optional fields that were never set.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_unset=True)

    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def error_response(
    *,
    error: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    details: Optional[Any] = None,
    stack: Optional[str] = None,
) -> JSONResponse:
    """
    Every failure leaves the service as `{"error": ...}`, optionally with
    `details` and, outside production, the `stack` it came from.
    """
    content = {"error": error}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    if stack:
        content["stack"] = stack

    return JSONResponse(status_code=status_code, content=content)
