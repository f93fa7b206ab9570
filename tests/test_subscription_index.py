import pytest

from conftest import add_favorites, run, set_threshold
from stockdrop_monitor.db import Favorite, UserSetting
from stockdrop_monitor.services import (SubscriptionIndexLoader,
                                        build_subscription_index,
                                        resolve_threshold)


def test_user_without_settings_gets_default_threshold():
    index = build_subscription_index([Favorite(user_id="u1", symbol="XYZ")], [])

    assert index.groups["XYZ"][0].threshold == 5


@pytest.mark.parametrize("raw,expected", [(None, 5), (0, 5), (3, 3), (100, 100)])
def test_resolve_threshold(raw, expected):
    assert resolve_threshold(raw) == expected


def test_groups_symbols_across_users_and_normalizes_case():
    favorites = [
        Favorite(user_id="u1", symbol="AAPL"),
        Favorite(user_id="u2", symbol="aapl "),
        Favorite(user_id="u2", symbol="MSFT"),
    ]
    settings = [UserSetting(user_id="u2", notification_threshold=8)]

    index = build_subscription_index(favorites, settings)

    assert index.symbols == ["AAPL", "MSFT"]
    assert [(s.user_id, s.threshold) for s in index.groups["AAPL"]] == [("u1", 5), ("u2", 8)]
    assert index.favorite_entries == 3


def test_same_user_symbol_appears_once_per_group():
    favorites = [Favorite(user_id="u1", symbol="AAPL"), Favorite(user_id="u1", symbol="aapl")]

    index = build_subscription_index(favorites, [])

    assert len(index.groups["AAPL"]) == 1


def test_loader_returns_empty_index_for_empty_store(store):
    index = run(SubscriptionIndexLoader(store).load())

    assert not index
    assert index.favorite_entries == 0


def test_loader_reads_favorites_and_thresholds(store):
    add_favorites(store, ("u1", "BBB"), ("u2", "AAA"), ("u1", "AAA"))
    set_threshold(store, "u1", 10)

    index = run(SubscriptionIndexLoader(store).load())

    assert index.symbols == ["AAA", "BBB"]
    thresholds = {s.user_id: s.threshold for s in index.groups["AAA"]}
    assert thresholds == {"u1": 10, "u2": 5}


def test_loader_falls_back_to_default_when_settings_fail(store, monkeypatch):
    add_favorites(store, ("u1", "AAA"))
    set_threshold(store, "u1", 20)

    def broken():
        raise RuntimeError("settings table unavailable")

    monkeypatch.setattr(store, "list_settings", broken)

    index = run(SubscriptionIndexLoader(store, default_threshold=5).load())

    assert index.groups["AAA"][0].threshold == 5
