"""
salon_identity.stub.app

FastAPI app factory for the stub backend.

Responsibilities:
- Build the app, register routers under `/api`.
- Hold settings and the stub directory on app.state.
- Render errors as `{success: false, message}` like the real backend.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from salon_identity.observability.logging import configure_logging, get_logger
from salon_identity.settings import Settings
from salon_identity.stub.directory import StubDirectory, demo_directory
from salon_identity.stub.routers.employees import router as employees_router
from salon_identity.stub.routers.face_login import router as face_login_router
from salon_identity.stub.routers.notifications import router as notifications_router

log = get_logger(__name__)


def create_app(*, settings: Settings, directory: StubDirectory | None = None) -> FastAPI:
    configure_logging(service_name=f"{settings.service_name}-stub", level=settings.log_level)

    app = FastAPI(title="Salon backend stub", version="0.1.0")
    app.state.settings = settings
    app.state.directory = directory if directory is not None else demo_directory()

    app.include_router(face_login_router, prefix="/api")
    app.include_router(employees_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        log.info("stub_http_error", path=request.url.path, status=exc.status_code, detail=exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
        )

    return app


# --- Module Notes -----------------------------------------------------------
# The stub is for local development and tests only; `env=prod` refuses to start it.
