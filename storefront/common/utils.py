import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from storefront.common.constants import request_id_ctx


def now() -> datetime:
    return datetime.now(timezone.utc)


def build_success(data: Any,
                  trace_id: Optional[str] = None, request_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "status": "ok",
        "data": data,
        "error": None,
        "trace_id": trace_id,
        "request_id": request_id or request_id_ctx.get(),
    }


def build_error(code: Union[str, int] = "UNKNOWN_ERROR",
                details: Optional[Any] = None,
                request_id: Optional[str] = None,
                trace_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "status": "error",
        "data": None,
        "error": {"code": code, "details": details},
        "trace_id": trace_id,
        "request_id": request_id or request_id_ctx.get(),
    }


def json_ok(content: Dict[str, Any], status_code: int = 200, headers=None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code, headers=headers)


def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code, headers=headers)


def success_response(data: Any, status_code: int = 200, headers: Optional[Dict[str, Any]] = None,
                     trace_id: Optional[str] = None, request_id: Optional[str] = None) -> JSONResponse:
    content = build_success(data, request_id=request_id, trace_id=trace_id)
    return json_ok(content, status_code=status_code, headers=headers)


def page_meta(total: int, page: int, limit: int, count: int) -> Dict[str, int]:
    return {
        "count": count,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "current_page": page,
    }


def parse_public_id(value) -> Optional[uuid.UUID]:
    """Public ids arrive as strings from paths and tokens; anything unparsable is treated as unknown."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None
