import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .container import Container, build_container
from .logging_setup import configure_logging
from .migrations import init_db
from .routers import reports, transactions

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> FastAPI:
    """Build the read-only HTTP API. A container passed in is used as is."""
    settings = container.settings if container else get_settings()

    app = FastAPI(title="Finance Bot API", version="1.0.0")
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transactions.router, prefix=settings.api_prefix)
    app.include_router(reports.router, prefix=settings.api_prefix)

    @app.on_event("startup")
    def on_startup() -> None:
        """Build the container when none was given and ensure tables exist."""
        if app.state.container is None:
            configure_logging(settings)
            app.state.container = build_container(settings)
            init_db(app.state.container.engine)
            logger.info("HTTP API ready")

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        if app.state.container is not None:
            app.state.container.dispose()

    @app.get("/")
    def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
