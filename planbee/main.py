import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware

from planbee import __version__
from planbee.core.config import get_settings
from planbee.core.logging import configure_logging
from planbee.infrastructure.database import close_db, init_db
from planbee.interfaces.http import create_api_router
from planbee.interfaces.http.errors import install_error_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database ready")
    yield
    await close_db()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.project_name,
        description="Registration, login and tag changes for Plan Bee accounts",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/", response_class=PlainTextResponse)
    async def homepage():
        return "API Running"

    return app


app = create_app()


def run() -> None:
    """Console entry point that serves the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "planbee.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    run()
