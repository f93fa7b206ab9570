"""FastAPI dependency injection: app.state holds the container; Depends() resolves from it."""
import asyncio
from typing import Annotated

from fastapi import Depends, Request

from stockdrop_monitor.services import CycleOrchestrator


def get_orchestrator(request: Request) -> CycleOrchestrator:
    """Resolve the process-wide CycleOrchestrator (created at startup)."""
    return request.app.state.container.orchestrator()


def get_shutdown_event(request: Request) -> asyncio.Event:
    """Event set on application shutdown; cycles stop starting new sends."""
    return request.app.state.shutdown_event


OrchestratorDep = Annotated[CycleOrchestrator, Depends(get_orchestrator)]
ShutdownEventDep = Annotated[asyncio.Event, Depends(get_shutdown_event)]
