"""
CORS Middleware - Cross-Origin Resource Sharing for the web front end.

Browsers only let the SkillSwap web client call this API from origins listed
in settings.CORS_ALLOWED_ORIGINS. A single "*" entry opens the API to any
origin, but then credentials are never advertised.

Usage:
    from app.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allowed_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
    )

Headers added:
- Access-Control-Allow-Origin: Which origin is allowed
- Access-Control-Allow-Methods / -Headers: Preflight answers
- Access-Control-Allow-Credentials: Whether the bearer token may be sent
- Access-Control-Expose-Headers: Lets the client read X-Request-ID
- Vary: Origin, so shared caches don't mix responses across origins
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
DEFAULT_HEADERS = ["Accept", "Content-Type", "Authorization", "X-Request-ID"]
EXPOSED_HEADERS = ["X-Request-ID"]


class CORSMiddleware(BaseHTTPMiddleware):
    """
    Handles preflight OPTIONS requests and adds CORS headers to responses.
    """

    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_credentials: bool = True,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        """
        Args:
            app: ASGI application
            allowed_origins: Exact origins, or ["*"] for any
            allow_credentials: Whether the browser may send the Authorization header
            allow_methods: Allowed HTTP methods
            allow_headers: Allowed request headers
            max_age: How long (seconds) browsers may cache preflight responses
        """
        super().__init__(app)
        self.allowed_origins = allowed_origins or []
        self.allow_any_origin = "*" in self.allowed_origins
        # Browsers reject credentials on wildcard responses
        self.allow_credentials = allow_credentials and not self.allow_any_origin
        self.allow_methods = allow_methods or DEFAULT_METHODS
        self.allow_headers = allow_headers or DEFAULT_HEADERS
        self.max_age = max_age

        logger.info(
            "CORS middleware initialized",
            allowed_origins=self.allowed_origins,
            allow_credentials=self.allow_credentials,
        )

    def is_allowed(self, origin: str | None) -> bool:
        if not origin:
            return False
        return self.allow_any_origin or origin in self.allowed_origins

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        allowed = self.is_allowed(origin)

        if request.method == "OPTIONS" and request.headers.get("access-control-request-method"):
            if allowed:
                return self._preflight_response(origin)
            logger.warning("CORS preflight rejected", origin=origin)
            return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if allowed:
            response.headers.update(self._origin_headers(origin))
            response.headers["Access-Control-Expose-Headers"] = ", ".join(EXPOSED_HEADERS)
        elif origin:
            logger.warning("CORS request from disallowed origin", origin=origin, path=request.url.path)

        return response

    def _origin_headers(self, origin: str) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": "*" if self.allow_any_origin else origin,
            "Vary": "Origin",
        }
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def _preflight_response(self, origin: str) -> Response:
        headers = {
            **self._origin_headers(origin),
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
            "X-Content-Type-Options": "nosniff",
        }
        logger.debug("CORS preflight handled", origin=origin)
        return Response(status_code=204, headers=headers)
