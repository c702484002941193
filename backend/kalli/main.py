"""Kalli Badge Server - Entry point.

Runs the MCP tool server plus the badge gallery endpoint over HTTP.
Token verification happens at the fronting gateway, which forwards the
verified user id in the X-User-Id header.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, Mount

from .shell.mcp_server import mcp, current_user_id, get_badge_service


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"

DEFAULT_ORIGINS = "https://kalli.app,http://localhost:5173"


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for Cloud Run."""
    return JSONResponse({"status": "healthy", "service": "kalli-badges"})


async def get_badges(request: Request) -> JSONResponse:
    """Badge gallery for the calling user."""
    user_id = current_user_id.get()
    if user_id is None:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        badges = get_badge_service().get_user_badges(user_id)
    except Exception as e:
        logger.error("Failed to load badges: %s", str(e))
        return JSONResponse({"error": "Failed to load badges."}, status_code=500)

    return JSONResponse(badges.model_dump(mode="json", by_alias=True))


# ==================== Identity Middleware ====================


class UserContextMiddleware(BaseHTTPMiddleware):
    """Bind the gateway-verified user id to the request context."""

    async def dispatch(self, request: Request, call_next):
        user_id = request.headers.get(USER_ID_HEADER, "").strip()
        token = current_user_id.set(user_id or None)
        if user_id:
            logger.debug("Request for user: %s", user_id[:8])
        try:
            return await call_next(request)
        finally:
            current_user_id.reset(token)


# ==================== Create ASGI App ====================


def create_app() -> Starlette:
    """Create the Starlette application with MCP at root.

    The MCP streamable_http_app() handles /mcp/ internally when mounted at root.
    We use its lifespan context to ensure proper initialization.
    """
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/badges", get_badges, methods=["GET"]),
        Mount("/", app=mcp_app),
    ]

    origins = os.environ.get("ALLOWED_ORIGINS", DEFAULT_ORIGINS).split(",")

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=[o.strip() for o in origins if o.strip()],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(UserContextMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )

    return app


# Create app at module level for Cloud Run
app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting Kalli badge server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
