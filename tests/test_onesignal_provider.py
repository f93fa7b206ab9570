import json

import httpx

from conftest import OneSignalInbox, make_push_provider, run
from stockdrop_monitor.schemas import PushMessage

MESSAGE = PushMessage(
    user_id="user-1",
    title="AAPL Price Alert",
    body="AAPL dropped 5.23% to $187.50",
    data={"type": "stock_alert", "symbol": "AAPL"},
)


def test_send_targets_user_tag_and_returns_delivery_id():
    inbox = OneSignalInbox()
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["path"] = request.url.path
        return inbox(request)

    result = run(make_push_provider(handler).send(MESSAGE))

    assert result.success
    assert result.delivery_id == "notif-1"
    assert captured["auth"] == "Basic rest-key"
    assert captured["path"].endswith("/notifications")
    payload = inbox.sent[0]
    assert payload["app_id"] == "app-id"
    assert payload["filters"] == [{"field": "tag", "key": "user_id", "relation": "=", "value": "user-1"}]
    assert payload["headings"] == {"en": "AAPL Price Alert"}
    assert payload["contents"] == {"en": "AAPL dropped 5.23% to $187.50"}
    assert payload["data"]["symbol"] == "AAPL"


def test_error_list_in_success_response_is_a_failure():
    result = run(make_push_provider(OneSignalInbox(reject=True)).send(MESSAGE))

    assert not result.success
    assert result.errors == ["All included players are not subscribed"]


def test_non_success_status_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"errors": {"invalid_external_user_ids": ["x"]}})

    result = run(make_push_provider(handler).send(MESSAGE))

    assert not result.success
    assert result.errors == ["invalid_external_user_ids: ['x']"]


def test_unparseable_error_body_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    result = run(make_push_provider(handler).send(MESSAGE))

    assert not result.success
    assert result.errors and "unparseable" in result.errors[0]
    assert json.dumps(result.model_dump())
