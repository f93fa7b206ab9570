"""Abstract base class for push notification providers."""
from abc import abstractmethod

from stockdrop_monitor.providers.core import ProviderABC
from stockdrop_monitor.schemas import PushMessage, PushResult


class PushProviderABC(ProviderABC):
    """Send-and-acknowledge delivery of one notification to one user."""

    @abstractmethod
    async def send(self, message: PushMessage) -> PushResult:
        """Deliver `message` to every device tagged with `message.user_id`.

        Provider-level rejections are returned as PushResult(success=False);
        transport errors and timeouts propagate as httpx exceptions.
        """
