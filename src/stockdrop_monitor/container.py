"""DI container: the composition root. Build via init_container(settings)."""
from dependency_injector import containers, providers

from stockdrop_monitor.config import Settings
from stockdrop_monitor.db import SqlAlertStore, create_db_engine
from stockdrop_monitor.providers import FmpQuoteProvider, OneSignalPushProvider
from stockdrop_monitor.services import (CycleOrchestrator, NotificationRecorder,
                                        QuoteBatchFetcher,
                                        SubscriptionIndexLoader)


class Container(containers.DeclarativeContainer):
    settings = providers.Dependency(instance_of=Settings)

    engine = providers.Singleton(
        lambda s: create_db_engine(s.database), settings
    )
    store = providers.Singleton(SqlAlertStore, engine)

    quote_provider = providers.Singleton(
        lambda s: FmpQuoteProvider(
            s.quotes.api_key,
            base_url=s.quotes.base_url,
            timeout=s.monitor.request_timeout_seconds,
            max_batch_size=s.quotes.batch_size,
        ),
        settings,
    )
    push_provider = providers.Singleton(
        lambda s: OneSignalPushProvider(
            s.push.app_id,
            s.push.rest_api_key,
            base_url=s.push.base_url,
            timeout=s.monitor.request_timeout_seconds,
            android_accent_color=s.push.android_accent_color,
            small_icon=s.push.small_icon,
            large_icon=s.push.large_icon,
        ),
        settings,
    )

    subscriptions = providers.Singleton(
        lambda store, s: SubscriptionIndexLoader(store, s.monitor.default_threshold),
        store,
        settings,
    )
    fetcher = providers.Singleton(
        lambda provider, s: QuoteBatchFetcher(
            provider,
            batch_size=s.quotes.batch_size,
            max_concurrency=s.quotes.max_concurrency,
            timeout=s.monitor.request_timeout_seconds,
        ),
        quote_provider,
        settings,
    )
    recorder = providers.Singleton(NotificationRecorder, store)

    orchestrator = providers.Singleton(
        CycleOrchestrator,
        settings=settings,
        store=store,
        subscriptions=subscriptions,
        fetcher=fetcher,
        push_provider=push_provider,
        recorder=recorder,
    )


def init_container(settings: Settings) -> Container:
    """Create the container around immutable process settings."""
    return Container(settings=providers.Object(settings))


async def close_container(container: Container) -> None:
    """Close provider HTTP clients and dispose of the DB engine."""
    for provider in (container.quote_provider(), container.push_provider()):
        await provider.close()
    container.engine().dispose()
