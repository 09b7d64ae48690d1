"""
WordBin - Main FastAPI application.
"""
import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from wordbin.config import Settings, settings as default_settings
from wordbin.database import PasteStore
from wordbin.errors import WordbinError
from wordbin.files import FilePayloadStore
from wordbin.pages import render_error
from wordbin.persistence import build_storage
from wordbin.routes import health, pastes

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "This paste was not found or has expired."


async def sweep_periodically(store: PasteStore, interval: float) -> None:
    """Drop expired pastes every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await run_in_threadpool(store.sweep)
        except WordbinError as e:
            logger.error(f"Background sweep failed: {e.message}")
        except Exception:
            logger.exception("Background sweep failed unexpectedly")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and load the paste snapshot.

    Raises:
        PersistenceCorrupt: If the snapshot cannot be parsed; the server must
            not start with an empty store in that case
    """
    settings = settings or default_settings

    files = FilePayloadStore(settings.files_dir)
    store = PasteStore(
        build_storage(settings),
        files=files,
        id_bits=settings.ID_BITS,
        unique_ids=settings.UNIQUE_IDS,
    )
    store.load()

    app = FastAPI(
        title="WordBin",
        description="Share text, links and files under memorable animal-name ids",
        version="1.0.0",
        debug=settings.DEBUG,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.files = files
    app.state.sweeper = None

    app.include_router(health.router)
    app.include_router(pastes.router)

    @app.exception_handler(WordbinError)
    async def wordbin_error_handler(request: Request, exc: WordbinError):
        if exc.http_status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path}: {exc.message}")
        if request.url.path.startswith("/api/"):
            return JSONResponse(exc.to_response(), status_code=exc.http_status)
        message = NOT_FOUND_MESSAGE if exc.http_status == 404 else exc.message
        return HTMLResponse(render_error(exc.http_status, message), status_code=exc.http_status)

    @app.on_event("startup")
    async def startup_event():
        """Startup event handler."""
        logger.info("WordBin application starting...")
        logger.info(f"Storing data in {settings.DATA_DIR} ({settings.PERSISTENCE_BACKEND} snapshot)")
        if settings.SWEEP_INTERVAL_SECONDS > 0:
            app.state.sweeper = asyncio.create_task(
                sweep_periodically(store, settings.SWEEP_INTERVAL_SECONDS)
            )
            logger.info(f"Background sweep every {settings.SWEEP_INTERVAL_SECONDS}s")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Shutdown event handler."""
        sweeper = app.state.sweeper
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
        logger.info("WordBin application shutting down...")

    return app


def run() -> None:
    logger.info(f"WordBin listening on http://{default_settings.HOST}:{default_settings.PORT}")
    uvicorn.run(
        "wordbin.main:create_app",
        factory=True,
        host=default_settings.HOST,
        port=default_settings.PORT,
    )


if __name__ == "__main__":
    run()
