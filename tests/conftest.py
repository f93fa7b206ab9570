import asyncio
import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

import httpx
import pytest
from sqlmodel import select

from stockdrop_monitor.config import (DatabaseConfig, MonitorConfig,
                                      PushProviderConfig, QuoteProviderConfig,
                                      Settings)
from stockdrop_monitor.db import (Favorite, NotificationLog, SqlAlertStore,
                                  UserSetting, create_db_engine, get_session,
                                  init_db)
from stockdrop_monitor.providers import FmpQuoteProvider, OneSignalPushProvider
from stockdrop_monitor.services import (CycleOrchestrator, NotificationRecorder,
                                        QuoteBatchFetcher,
                                        SubscriptionIndexLoader)

NOW = datetime(2024, 12, 17, 15, 30, 0, tzinfo=timezone.utc)


def fmp_item(symbol: str, change_percent: float, price: float = 100.0) -> dict:
    return {
        "symbol": symbol,
        "price": price,
        "change": round(price * change_percent / 100, 2),
        "changesPercentage": change_percent,
        "volume": 1000,
    }


def requested_symbols(request: httpx.Request) -> list[str]:
    """Symbols from an FMP /quote/A,B,C request path."""
    return unquote(request.url.path).rsplit("/", 1)[-1].split(",")


class FmpMarket:
    """MockTransport handler serving fixed % changes; records every request."""

    def __init__(self, changes: dict[str, float], failing: set[str] | None = None) -> None:
        self.changes = changes
        self.failing = failing or set()
        self.requests: list[list[str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        symbols = requested_symbols(request)
        self.requests.append(symbols)
        if self.failing & set(symbols):
            return httpx.Response(500, json={"error": "boom"})
        items = [fmp_item(s, self.changes[s]) for s in symbols if s in self.changes]
        return httpx.Response(200, json=items)


class OneSignalInbox:
    """MockTransport handler accepting (or rejecting) push requests."""

    def __init__(self, reject: bool = False) -> None:
        self.reject = reject
        self.sent: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        if self.reject:
            return httpx.Response(200, json={"id": "", "errors": ["All included players are not subscribed"]})
        self.sent.append(payload)
        return httpx.Response(200, json={"id": f"notif-{len(self.sent)}", "recipients": 1})

    def targets(self) -> list[str]:
        return [p["filters"][0]["value"] for p in self.sent]


def make_fmp_provider(handler: Callable, **kwargs) -> FmpQuoteProvider:
    client = httpx.AsyncClient(
        base_url=FmpQuoteProvider.BASE_URL, transport=httpx.MockTransport(handler)
    )
    return FmpQuoteProvider("test-key", client=client, **kwargs)


def make_push_provider(handler: Callable) -> OneSignalPushProvider:
    client = httpx.AsyncClient(
        base_url=OneSignalPushProvider.BASE_URL, transport=httpx.MockTransport(handler)
    )
    return OneSignalPushProvider("app-id", "rest-key", client=client)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        quotes=QuoteProviderConfig(api_key="test-key"),
        push=PushProviderConfig(app_id="app-id", rest_api_key="rest-key", max_concurrency=1),
        database=DatabaseConfig(url="sqlite://"),
        monitor=MonitorConfig(request_timeout_seconds=2.0),
    )


@pytest.fixture
def store(settings) -> SqlAlertStore:
    engine = create_db_engine(settings.database)
    init_db(engine)
    yield SqlAlertStore(engine)
    engine.dispose()


def add_favorites(store: SqlAlertStore, *pairs: tuple[str, str]) -> None:
    with get_session(store.engine) as session:
        for user_id, symbol in pairs:
            session.add(Favorite(user_id=user_id, symbol=symbol))


def set_threshold(store: SqlAlertStore, user_id: str, threshold: int | None) -> None:
    with get_session(store.engine) as session:
        session.add(UserSetting(user_id=user_id, notification_threshold=threshold))


def add_notifications(store: SqlAlertStore, user_id: str, count: int, at: datetime = NOW) -> None:
    for i in range(count):
        store.add_notification(
            NotificationLog(
                user_id=user_id,
                symbol="OLD",
                message="OLD dropped 6.00% to $10.00",
                price=10.0,
                change_percent=-6.0,
                threshold=5,
                created_at=at - timedelta(minutes=i),
            )
        )


def all_notifications(store: SqlAlertStore) -> list[NotificationLog]:
    with get_session(store.engine) as session:
        rows = session.exec(select(NotificationLog).order_by(NotificationLog.created_at)).all()
        session.expunge_all()
        return list(rows)


def build_orchestrator(
    settings: Settings,
    store: SqlAlertStore,
    market: Callable,
    inbox: Callable,
    clock: Callable[[], datetime] = lambda: NOW,
) -> CycleOrchestrator:
    quote_provider = make_fmp_provider(market)
    return CycleOrchestrator(
        settings,
        store,
        SubscriptionIndexLoader(store, settings.monitor.default_threshold),
        QuoteBatchFetcher(quote_provider, batch_size=settings.quotes.batch_size, timeout=2.0),
        make_push_provider(inbox),
        NotificationRecorder(store, clock=clock),
        clock=clock,
    )


def run(coro):
    return asyncio.run(coro)
