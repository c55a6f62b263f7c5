"""
Main FastAPI application.

This is the entry point for the API server.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from productflow import __version__
from productflow.core.config import settings
from productflow.db.session import async_session_maker
from productflow.errors import AppError, app_error_handler
from productflow.routers import analyses, billing, data_files, health, projects, proposals, research, tasks
from productflow.services.llm_client import LlmClient
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.storage import ContentFetcher, LocalBlobStorage
from productflow.workers.stale_run_sweeper import StaleRunSweeper

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: build the shared collaborators, sweep stale runs left by a
      previous process and start the periodic sweeper.
    - On shutdown: stop the sweeper and give in-flight pipeline runs a chance
      to finish.
    """
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)

    app.state.session_factory = async_session_maker
    app.state.runner = PipelineRunner()
    app.state.llm = LlmClient()
    app.state.fetcher = ContentFetcher()
    app.state.notifier = Notifier()
    app.state.storage = LocalBlobStorage()

    sweeper_task = None
    sweeper = None
    if settings.STALE_RUN_SWEEP_ENABLED:
        sweeper = StaleRunSweeper(async_session_maker)
        sweeper_task = asyncio.create_task(sweeper.run_forever(), name="stale-run-sweeper")

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)
    if sweeper is not None:
        sweeper.request_stop()
        sweeper_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper_task
    await app.state.runner.shutdown(timeout=10.0)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Backend API for ProductFlow product discovery",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(projects.router)
app.include_router(data_files.router)
app.include_router(analyses.router)
app.include_router(proposals.router)
app.include_router(tasks.router)
app.include_router(research.router)
app.include_router(billing.router)

# Uploaded blobs; pipelines read them back over HTTP
app.mount("/files", StaticFiles(directory=settings.STORAGE_ROOT, check_dir=False), name="files")
