from typing import Iterable
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from storefront.auth.dependencies import Authentication
from storefront.auth.repository import identify_user_by_pid
from storefront.common.utils import build_error, json_error
from storefront.middlewares.constants import logger


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Resolves the bearer token to an account for every path not listed in `paths`."""

    def __init__(self, app, *, session_maker, paths: Iterable[str]):
        super().__init__(app)
        self.session_maker = session_maker
        self.paths = tuple(paths)

    async def dispatch(self, request: Request, call_next):

        if request.url.path.startswith(self.paths):
            return await call_next(request)

        try:
            claims = await Authentication()(request)
        except Exception as e:
            reason = getattr(e, "detail", "Missing or Invalid Auth Headers")
            logger.warning("auth.middleware.failed", extra={
                "reason": reason,
                "path": request.url.path,
                "method": request.method
            })
            payload = build_error(code="INVALID_AUTH", details={"message": "Not authorized to access this route"})
            return json_error(payload, status_code=status.HTTP_401_UNAUTHORIZED)

        user_pid = claims.get("sub")
        async with self.session_maker() as session:
            user = await identify_user_by_pid(session, user_pid)

        if not user:
            logger.warning("auth.middleware.user_not_found", extra={
                "user_public_id": user_pid,
                "path": request.url.path
            })
            payload = build_error(code="INVALID_AUTH", details={"message": "User not found"})
            return json_error(payload, status_code=status.HTTP_401_UNAUTHORIZED)

        request.state.user_identifier = user["id"]
        request.state.user_public_id = str(user["public_id"])
        request.state.user_email = user["email"]
        request.state.user_role = user["role"]

        return await call_next(request)
