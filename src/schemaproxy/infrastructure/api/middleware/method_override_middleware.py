"""Method override middleware.

Lets clients that can only send POST reach PUT routes, either with a
``_method`` query parameter (``POST /resources?_method=PUT``) or with an
``X-HTTP-Method-Override`` header.
"""

from urllib.parse import parse_qs

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from schemaproxy.core.logging import get_logger

logger = get_logger(__name__)

OVERRIDE_PARAM = "_method"
OVERRIDE_HEADER = "X-HTTP-Method-Override"
ALLOWED_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


class MethodOverrideMiddleware(BaseHTTPMiddleware):
    """Rewrite the method of overridden POST requests before routing."""

    def __init__(
        self,
        app: ASGIApp,
        param: str = OVERRIDE_PARAM,
        header: str = OVERRIDE_HEADER,
    ) -> None:
        super().__init__(app)
        self.param = param
        self.header = header

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "POST":
            override = self._requested_method(request)
            if override is not None:
                logger.debug(
                    "Request method overridden",
                    path=str(request.url.path),
                    method=override,
                )
                request.scope["method"] = override
        return await call_next(request)

    def _requested_method(self, request: Request) -> str | None:
        candidates = parse_qs(request.scope.get("query_string", b"").decode("latin-1")).get(
            self.param, []
        )
        header_value = request.headers.get(self.header)
        if header_value:
            candidates.append(header_value)
        for candidate in candidates:
            method = candidate.strip().upper()
            if method in ALLOWED_METHODS:
                return method
        return None
