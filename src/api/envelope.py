from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

MOCK_MARKER = "(MOCK - No DB)"


def success(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
    mock: bool = False,
) -> JSONResponse:
    content: dict = {"status": "success"}
    if message is not None:
        content["message"] = f"{message} {MOCK_MARKER}" if mock else message
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )
