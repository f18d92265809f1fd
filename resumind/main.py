import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resumind.api.routes import router
from resumind.config import Settings, settings
from resumind.db.connection import run_migrations
from resumind.repositories.file_storage import LocalFileStorage
from resumind.repositories.kv_repository import SqliteKeyValueStore
from resumind.services.attempt_registry import AttemptRegistry
from resumind.services.conversion_service import PdfToImageConverter
from resumind.services.feedback_service import HttpAIFeedbackClient
from resumind.services.submission_service import SubmissionService


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def configure_services(app: FastAPI, config: Settings) -> None:
    """Wire collaborators onto app.state. Each upload gets a fresh SubmissionService."""
    storage = LocalFileStorage(config.STORAGE_DIR)
    kv = SqliteKeyValueStore(config.DB_PATH)
    converter = PdfToImageConverter(scale=config.PDF_RENDER_SCALE)
    ai = HttpAIFeedbackClient(config.AI_FEEDBACK_URL, storage, timeout=config.AI_REQUEST_TIMEOUT)

    def service_factory() -> SubmissionService:
        return SubmissionService(
            storage=storage,
            converter=converter,
            kv=kv,
            ai=ai,
            analysis_timeout_ms=config.ANALYSIS_TIMEOUT_MS,
        )

    app.state.storage = storage
    app.state.kv = kv
    app.state.service_factory = service_factory
    app.state.attempts = AttemptRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    logger = logging.getLogger(__name__)
    logger.info("Resumind starting | db=%s | storage=%s | port=%s", settings.DB_PATH, settings.STORAGE_DIR, settings.PORT)
    run_migrations(settings.DB_PATH)
    configure_services(app, settings)
    yield
    logger.info("Resumind shutting down")


def create_app() -> FastAPI:
    app = FastAPI(title="Resumind", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logging.getLogger(__name__).exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Internal server error"},
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("resumind.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL)
