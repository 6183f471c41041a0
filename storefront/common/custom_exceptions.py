from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from storefront import logger
from storefront.common.constants import request_id_ctx
from storefront.common.errors import StorefrontError, ValidationError
from storefront.common.utils import build_error, json_error


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": rid,
        },
        exc_info=exc,
    )

    payload = build_error(code="SERVER_ERROR", details={"message": "Internal Server Error"}, request_id=rid)
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def storefront_exception_handler(request: Request, exc: StorefrontError):
    rid = request_id_ctx.get(None)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request.rejected",
        extra={
            "code": exc.code,
            "reason": exc.message,
            "path": request.url.path,
            "method": request.method,
            "request_id": rid,
        },
    )

    payload = build_error(code=exc.code, details=exc.to_details(), request_id=rid)
    return json_error(payload, status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": exc.errors(),
            "path": request.url.path,
            "request_id": rid,
        },
    )

    # body and query errors share the shape of the domain validation rejections
    details = {"message": ValidationError.default_message, "errors": exc.errors()}
    payload = build_error(code=ValidationError.code, details=details, request_id=rid)
    return json_error(payload, status_code=ValidationError.status_code)


async def http_exception_handler(request: Request, exc: HTTPException):

    rid = request_id_ctx.get(None)

    payload = build_error(code=f"HTTP_{exc.status_code}", details={"message": exc.detail}, request_id=rid)
    return json_error(payload, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception,  # anything not mapped below
        fallback_handler
    )

    app.add_exception_handler(
        StorefrontError,
        storefront_exception_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        HTTPException,
        http_exception_handler
    )
