import asyncio

import httpx
import uvicorn
from fastapi.testclient import TestClient

from stockdrop_monitor.config import DatabaseConfig, Settings
from stockdrop_monitor.deps import get_orchestrator
from stockdrop_monitor.main import MonitorServer, create_app
from stockdrop_monitor.schemas import CycleStatus, CycleSummary, ProcessedCounts


class StubOrchestrator:
    def __init__(self, summary: CycleSummary) -> None:
        self.summary = summary
        self.cancel_event = None

    async def run(self, cancel_event=None) -> CycleSummary:
        self.cancel_event = cancel_event
        return self.summary


def make_client(summary: CycleSummary) -> tuple[TestClient, StubOrchestrator]:
    app = create_app(Settings(database=DatabaseConfig(url="sqlite://")), create_tables=True)
    stub = StubOrchestrator(summary)
    app.dependency_overrides[get_orchestrator] = lambda: stub
    return TestClient(app), stub


def test_health():
    client, _ = make_client(CycleSummary())
    with client:
        assert client.get("/").json() == {"status": "ok"}


def test_successful_cycle_returns_camel_case_counts():
    summary = CycleSummary(
        message="Stock monitoring completed successfully",
        processed=ProcessedCounts(favorite_entries=3, unique_symbols=2, stock_prices_retrieved=2, alerts_sent=1),
    )
    client, _ = make_client(summary)

    with client:
        response = client.post("/monitor/run")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "completed"
    assert body["processed"]["favoriteEntries"] == 3
    assert body["processed"]["uniqueSymbols"] == 2
    assert body["processed"]["stockPricesRetrieved"] == 2
    assert body["processed"]["alertsSent"] == 1


def test_failed_cycle_returns_500_with_error_message():
    summary = CycleSummary(
        status=CycleStatus.FAILED,
        error="Missing required environment variables: FMP_API_KEY",
    )
    client, _ = make_client(summary)

    with client:
        response = client.post("/monitor/run")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "FMP_API_KEY" in body["error"]
    assert "processed" in body


class SlowOrchestrator:
    """Holds the request open until shutdown is signalled (or gives up)."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.saw_cancel = False

    async def run(self, cancel_event=None) -> CycleSummary:
        self.started.set()
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=5)
            self.saw_cancel = True
        except asyncio.TimeoutError:
            pass
        status = CycleStatus.CANCELLED if self.saw_cancel else CycleStatus.COMPLETED
        return CycleSummary(status=status)


def test_server_exit_cancels_a_running_cycle():
    async def scenario():
        app = create_app(Settings(database=DatabaseConfig(url="sqlite://")))
        stub = SlowOrchestrator()
        app.dependency_overrides[get_orchestrator] = lambda: stub
        config = uvicorn.Config(app, host="127.0.0.1", port=0, log_level="warning")
        server = MonitorServer(config, app)
        serving = asyncio.create_task(server.serve())
        while not server.started:
            await asyncio.sleep(0.01)
        port = server.servers[0].sockets[0].getsockname()[1]

        async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{port}", timeout=10, trust_env=False) as client:
            request = asyncio.create_task(client.post("/monitor/run"))
            await stub.started.wait()
            server.should_exit = True
            response = await request
        await serving
        return stub, response

    stub, response = asyncio.run(scenario())

    assert stub.saw_cancel
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
