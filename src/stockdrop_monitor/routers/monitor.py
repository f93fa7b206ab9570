"""Monitoring cycle invocation routes.

The scheduler (cron, Supabase schedule, Cloud Scheduler...) POSTs here once
per interval; each request runs exactly one cycle synchronously.
"""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from stockdrop_monitor.deps import OrchestratorDep, ShutdownEventDep
from stockdrop_monitor.schemas import MonitorRunResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/monitor", tags=["monitor"])


@router.post("/run", response_model=MonitorRunResponse)
async def run_cycle(
    orchestrator: OrchestratorDep,
    shutdown_event: ShutdownEventDep,
) -> JSONResponse:
    """Run one monitoring cycle and return its summary.

    200 with success=true for completed or cancelled cycles; 500 with
    success=false and an error message when the cycle failed.
    """
    summary = await orchestrator.run(cancel_event=shutdown_event)
    body = MonitorRunResponse.from_summary(summary)
    return JSONResponse(
        status_code=200 if body.success else 500,
        content=body.model_dump(mode="json", by_alias=True),
    )
