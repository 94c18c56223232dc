"""Maxcro Tracker MCP Server - Entry point.

Serves the MCP tools over streamable HTTP next to the small account API
used by the web client (anonymous sign-in and key validation).
"""

import contextlib
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

from .shell.mcp_server import mcp, close_ai_coach, current_user_id, get_auth_client
from .shell.auth import validate_api_key_format, hash_api_key


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = ["https://maxcro.app", "http://localhost:5173"]


# ==================== Account Routes ====================


async def health_check(request: Request) -> JSONResponse:
    """Liveness probe."""
    return JSONResponse({"status": "healthy", "service": "maxcro-mcp"})


async def sign_in_anonymously(request: Request) -> JSONResponse:
    """Create an anonymous account.

    The API key is returned exactly once; only its hash is stored.
    """
    try:
        api_key, user_id = get_auth_client().sign_in_anonymously()
    except Exception as e:
        logger.error("Anonymous sign-in failed: %s", str(e))
        return JSONResponse({"error": "Sign-in failed. Please try again."}, status_code=500)

    base_url = os.environ.get("BASE_URL", "http://localhost:8080")
    return JSONResponse({
        "api_key": api_key,
        "user_id": user_id,
        "message": "Signed in! Save your API key - it won't be shown again.",
        "mcp_url": f"{base_url}/mcp",
    })


async def validate_key(request: Request) -> JSONResponse:
    """Tell the web client whether a stored API key still works."""
    try:
        body = await request.json()
    except ValueError:
        body = {}

    api_key = body.get("api_key") if isinstance(body, dict) else None
    if not api_key:
        return JSONResponse({"valid": False, "error": "API key required"})

    user_id = get_auth_client().validate_api_key(api_key)
    return JSONResponse({"valid": user_id is not None})


# ==================== Auth Middleware ====================


def _user_from_authorization(header: str) -> str | None:
    """Resolve a `Bearer <api key>` header to a known user id."""
    if not header.startswith("Bearer "):
        return None

    api_key = header.removeprefix("Bearer ")
    if not validate_api_key_format(api_key):
        return None

    user_id = hash_api_key(api_key)
    if not get_auth_client().user_exists(user_id):
        return None
    return user_id


class AuthMiddleware(BaseHTTPMiddleware):
    """Bind the caller's user id for MCP requests.

    Requests without a valid key still reach the MCP app; tools then
    refuse to run because no user is bound.
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/mcp"):
            user_id = _user_from_authorization(request.headers.get("Authorization", ""))
            if user_id is not None:
                current_user_id.set(user_id)
                logger.debug("Authenticated user: %s", user_id[:8])

        return await call_next(request)


# ==================== Create ASGI App ====================


def create_app() -> Starlette:
    """Create the Starlette application.

    Account routes come first; the MCP app is mounted at root and serves
    /mcp itself. Its lifespan must run for the session manager to start.
    """
    mcp_app = mcp.streamable_http_app()

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        async with mcp_app.router.lifespan_context(app):
            yield
        await close_ai_coach()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/auth/anonymous", sign_in_anonymously, methods=["POST"]),
        Route("/auth/validate", validate_key, methods=["POST"]),
        Mount("/", app=mcp_app),
    ]

    return Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=ALLOWED_ORIGINS,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(AuthMiddleware),
        ],
        lifespan=lifespan,
    )


app = create_app()


def main() -> None:
    """Run the server with uvicorn."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting Maxcro MCP server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
