# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Notification client — outbound email requests.
Posts to an external notification service with a short timeout; the inbox
message is the record of truth, email is best effort.
"""

import httpx

from clubflow.core.config import settings
from clubflow.core.logging import get_logger
from clubflow.metrics import NOTIFICATIONS_SENT

logger = get_logger(__name__)


class NotificationClient:
    """Fire-and-forget notification sender."""

    def __init__(self, base_url: str | None = None) -> None:
        self._base_url = settings.NOTIFICATION_SERVICE_URL if base_url is None else base_url

    @property
    def enabled(self) -> bool:
        return bool(self._base_url)

    def send(self, recipient: str, subject: str, message: str, channel: str = "email") -> bool:
        """Send a notification. Failures are logged but never raised."""
        if not self.enabled:
            return False
        try:
            with httpx.Client(timeout=settings.NOTIFICATION_TIMEOUT) as client:
                resp = client.post(
                    f"{self._base_url}/api/v1/notify",
                    json={
                        "channel": channel,
                        "recipient": recipient,
                        "subject": subject,
                        "message": message,
                    },
                )
            NOTIFICATIONS_SENT.labels(channel=channel).inc()
            logger.info(
                "Notification sent: recipient=%s, channel=%s, status=%d",
                recipient, channel, resp.status_code,
            )
            return resp.is_success
        except httpx.HTTPError as exc:
            logger.warning("Notification failed: recipient=%s error=%s", recipient, exc)
            return False
