"""ClipDesk API"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clipdesk.config import Settings
from clipdesk.utils.logging_setup import setup_logging
from errors import register_exception_handlers
from routes.downloads import router as downloads_router
from routes.health import router as health_router
from routes.processing import router as processing_router
from routes.profanity import router as profanity_router
from routes.sessions import router as sessions_router
from routes.transcription import router as transcription_router
from routes.uploads import router as uploads_router
from services.app_services import AppServices

settings = Settings()
setup_logging(settings)
logger = logging.getLogger("clipdesk.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.settings = settings
    app.state.services = AppServices.from_settings(settings)
    logger.info("API starting (data_dir=%s)", settings.data_dir)
    try:
        yield
    finally:
        services: AppServices | None = getattr(app.state, "services", None)
        if services is not None:
            await services.close()


app = FastAPI(
    title="ClipDesk API",
    description="Video and audio editing with version history",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

for router in (
    sessions_router,
    uploads_router,
    transcription_router,
    profanity_router,
    processing_router,
    downloads_router,
    health_router,
):
    app.include_router(router, prefix="/api")
