# server/http_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.di import Container, build_container
from app.errors import ApiError
from app.logging import configure_logging
from server.routes.auth import register_auth_routes
from server.routes.directories import register_directory_routes
from server.routes.files import register_file_routes

logger = logging.getLogger(__name__)


# ---------- Security: Origin validation ----------

def _origin_allowed(settings: Settings, req: Request) -> bool:
    origin = req.headers.get("origin")
    if not origin:
        return settings.HTTP_ALLOW_NO_ORIGIN
    allowed = {o.strip().lower() for o in settings.HTTP_ALLOWED_ORIGINS.split(",") if o.strip()}
    return "*" in allowed or origin.lower() in allowed


def _error_response(status_code: int, error: str, code: str) -> JSONResponse:
    return JSONResponse({"error": error, "code": code}, status_code=status_code)


def create_http_app(container: Container | None = None) -> FastAPI:
    """
    Build the REST surface over the container's services.
    Routing stays thin; sandboxing and checks live in the services.
    """
    container = container or build_container()
    settings = container.settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Local Filesystem API", version="0.1.0")
    app.state.container = container

    @app.middleware("http")
    async def origin_validation_mw(request: Request, call_next):
        # Browser requests from unknown origins are refused outright
        if not _origin_allowed(settings, request):
            return _error_response(403, "Forbidden origin", "FORBIDDEN_ORIGIN")
        return await call_next(request)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return _error_response(400, f"Invalid request body: {message}", "BAD_REQUEST")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error", "INTERNAL")

    def require_token(request: Request) -> None:
        container.token_store.check_authorization(request.headers.get("authorization"))

    register_auth_routes(app, container.token_store)
    register_file_routes(app, container.fs_service, require_token)
    register_directory_routes(app, container.fs_service, require_token)

    logger.info("serving %s", container.fs_service.root)
    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "server.http_app:create_http_app",
        factory=True,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
