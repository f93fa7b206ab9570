"""Main module for the stock price-drop monitoring service."""
import asyncio
import logging
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockdrop_monitor import __version__
from stockdrop_monitor.config import Settings, load_settings
from stockdrop_monitor.container import close_container, init_container
from stockdrop_monitor.db import init_db
from stockdrop_monitor.routers import monitor_router
from stockdrop_monitor.utils import configure_logging

logger = logging.getLogger(__name__)


def signal_shutdown(fastapi_app: FastAPI) -> None:
    """Tell running cycles to finish their current sends and start no new ones."""
    event = getattr(fastapi_app.state, "shutdown_event", None)
    if event is not None and not event.is_set():
        logger.info("Shutdown requested, running cycles stop dispatching")
        event.set()


class MonitorServer(uvicorn.Server):
    """Uvicorn server that signals shutdown to running cycles as soon as exit begins.

    Uvicorn drains in-flight requests before the lifespan shutdown runs, so a
    cycle waiting on the lifespan would always run to completion.
    """

    def __init__(self, config: uvicorn.Config, fastapi_app: FastAPI) -> None:
        super().__init__(config)
        self.fastapi_app = fastapi_app

    async def on_tick(self, counter: int) -> bool:
        should_exit = await super().on_tick(counter)
        if should_exit:
            signal_shutdown(self.fastapi_app)
        return should_exit


def create_app(settings: Settings | None = None, *, create_tables: bool = False) -> FastAPI:
    """Build the FastAPI app around one immutable Settings instance."""

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create the container at startup; close providers on shutdown."""
        resolved = settings or load_settings()
        container = init_container(resolved)
        if create_tables:
            init_db(container.engine())
        missing = resolved.missing_credentials()
        if missing:
            logger.warning("Provider credentials not configured: %s", ", ".join(missing))

        fastapi_app.state.container = container
        fastapi_app.state.shutdown_event = asyncio.Event()

        yield

        signal_shutdown(fastapi_app)
        try:
            await close_container(container)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing providers: %s", exc)

    fastapi_app = FastAPI(
        title="StockDrop Monitor",
        description="Price-drop alerting pipeline for favorited stocks",
        version=__version__,
        lifespan=lifespan,
    )
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    fastapi_app.include_router(monitor_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Use for `poetry run stockdrop-monitor`."""
    configure_logging(load_settings().log_level)
    server = MonitorServer(uvicorn.Config(app, host="127.0.0.1", port=8001), app)
    server.run()


def run_dev():
    """Run the development server with Postgres running via Docker.

    Uses the reloader, so running cycles are not told to stop on exit.
    """
    configure_logging("DEBUG")
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    uvicorn.run("stockdrop_monitor.main:app", host="0.0.0.0", port=8000, reload=True)
