"""
FastAPI application entry point.
Builds the app: lifespan (AppContext), middleware (method override, sessions),
routes, static files, metrics, and the central error pages.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from listings_web.config import Settings, get_settings
from listings_web.context import AppContext
from listings_web.core.dependencies import resolve_session_user
from listings_web.core.exceptions import AppError, LoginRequired
from listings_web.core.flash import flash
from listings_web.core.method_override import MethodOverrideMiddleware
from listings_web.core.sessions import SessionMiddleware
from listings_web.web.rendering import redirect, render_error
from listings_web.web.router import site_router

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Page Not Found!"
DEFAULT_ERROR_MESSAGE = "Something went wrong."


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build the context and check the database. Shutdown: close the pool."""
    logger.info(f"Starting {app.state.settings.app_name}...")
    context = AppContext(app.state.settings)
    await context.startup()
    app.state.context = context
    try:
        yield
    finally:
        logger.info(f"Shutting down {app.state.settings.app_name}...")
        await context.shutdown()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        flash(request, "error", exc.message)
        return redirect("/login")

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return render_error(request, exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        await resolve_session_user(request)
        # A known path with the wrong method is still a page that does not exist
        if exc.status_code in (404, 405):
            return render_error(request, 404, NOT_FOUND_MESSAGE)
        return render_error(request, exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = ",".join(str(error.get("msg", "")) for error in exc.errors())
        return render_error(request, 400, message or "Bad request")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Last resort: log it and show the generic error page."""
        logger.error(f"Unhandled exception: {exc}", exc_info=exc)
        return render_error(request, 500, DEFAULT_ERROR_MESSAGE)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Server-rendered listings site with accounts, sessions and flash messages.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings

    # Added last = runs first: the method is rewritten before routing
    app.add_middleware(SessionMiddleware)
    app.add_middleware(MethodOverrideMiddleware)

    register_error_handlers(app)

    app.mount("/metrics", make_asgi_app())

    static_dir = Path(__file__).resolve().parent / "static"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    app.include_router(site_router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
