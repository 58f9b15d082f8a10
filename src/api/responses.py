from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(data: Any, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """Wrap a payload in the success envelope shared by every endpoint."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "status_code": status_code,
            "data": data,
            "message": message,
            "success": status_code < 400,
        }),
    )


def error_response(status_code: int, message: str, errors: Optional[List[Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "status_code": status_code,
            "message": message,
            "success": False,
            "errors": errors or [],
        }),
    )
