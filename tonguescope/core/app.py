from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from tonguescope.api.main import api_router
from tonguescope.services.analysis_client import AnalysisClient
from tonguescope.services.profile_service import ProfileService
from tonguescope.services.profile_store import ProfileStore

from .config import settings
from .version import __version__


def create_app(
    store: ProfileStore | None = None,
    analysis_client: AnalysisClient | None = None,
) -> FastAPI:
    """
    Build the application. The store and analysis client are created once here
    (or passed in) and shared with every request through `app.state`.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.profile_store = store or ProfileStore()
        app.state.profile_service = ProfileService(app.state.profile_store)
        app.state.analysis_client = analysis_client or AnalysisClient()
        logger.info(f"{settings.APP_NAME} {__version__} started ({settings.APP_ENV})")
        yield
        try:
            await app.state.analysis_client.close()
            logger.info("Analysis client closed")
        except Exception as exc:
            logger.warning(f"Failed to close analysis client: {exc}")
        try:
            await app.state.profile_store.close()
            logger.info("ProfileStore closed")
        except Exception as exc:
            logger.warning(f"Failed to close ProfileStore: {exc}")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Tongue image analysis with per-user history",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.APP_ENV == "production" else "/docs",
        redoc_url=None if settings.APP_ENV == "production" else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(redis.RedisError)
    @app.exception_handler(OSError)
    async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable."})

    app.include_router(api_router)
    return app


app = create_app()
