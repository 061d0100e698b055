import httpx

from app.config.settings import Settings
from app.logging.logger import Log


class EmailNotifier:
    """Best-effort operator alerts through the e-mail notification service."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            url=settings.notification_url,
            timeout_seconds=settings.notification_timeout_seconds,
        )

    def notify(self, subject: str, text_body: str, html_body: str) -> None:
        """Send an alert. Never raises."""
        try:
            response = self._client.post(
                self._url,
                json={"subject": subject, "textPart": text_body, "htmlPart": html_body},
            )
            response.raise_for_status()
            Log.info(f"Notification sent: {subject}")
        except Exception as exc:
            Log.error(f"Notification failed ({subject}): {exc}")

    def close(self) -> None:
        self._client.close()
