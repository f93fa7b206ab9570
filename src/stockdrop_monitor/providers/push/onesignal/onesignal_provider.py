"""OneSignal push notification provider."""
import logging

import httpx
from pydantic import ValidationError

from stockdrop_monitor.providers.core import PushProviderError
from stockdrop_monitor.providers.push.onesignal.models import (
    OneSignalNotification, OneSignalResponse, OneSignalTagFilter)
from stockdrop_monitor.providers.push.push_provider_abc import PushProviderABC
from stockdrop_monitor.schemas import PushMessage, PushResult

logger = logging.getLogger(__name__)


class OneSignalPushProvider(PushProviderABC):
    """Targets users through the `user_id` device tag set by the mobile app."""

    BASE_URL = "https://onesignal.com/api/v1"

    def __init__(
        self,
        app_id: str | None,
        rest_api_key: str | None,
        *,
        base_url: str | None = None,
        timeout: float = 12.0,
        android_accent_color: str | None = None,
        small_icon: str | None = None,
        large_icon: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._app_id = app_id
        self._android_accent_color = android_accent_color
        self._small_icon = small_icon
        self._large_icon = large_icon
        headers = {"Content-Type": "application/json"}
        if rest_api_key:
            headers["Authorization"] = f"Basic {rest_api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=base_url or self.BASE_URL,
            headers=headers,
            timeout=timeout,
        )

    def build_payload(self, message: PushMessage) -> OneSignalNotification:
        if not self._app_id:
            raise PushProviderError("OneSignal app id is not configured")
        return OneSignalNotification(
            app_id=self._app_id,
            filters=[OneSignalTagFilter(value=message.user_id)],
            headings={"en": message.title},
            contents={"en": message.body},
            data=message.data,
            android_accent_color=self._android_accent_color,
            small_icon=self._small_icon,
            large_icon=self._large_icon,
        )

    async def send(self, message: PushMessage) -> PushResult:
        payload = self.build_payload(message)
        response = await self._client.post(
            "/notifications", json=payload.model_dump(exclude_none=True)
        )
        try:
            body = OneSignalResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            body = OneSignalResponse(errors=[f"unparseable response: {response.text[:200]}"])

        if not response.is_success:
            errors = body.error_messages() or [f"HTTP {response.status_code}"]
            logger.warning("OneSignal API error for user %s: %s", message.user_id, errors)
            return PushResult(success=False, errors=errors)
        errors = body.error_messages()
        if errors:
            logger.warning("OneSignal notification errors for user %s: %s", message.user_id, errors)
            return PushResult(success=False, delivery_id=body.id, errors=errors)
        return PushResult(success=True, delivery_id=body.id)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
