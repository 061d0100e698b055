import mimetypes
from pathlib import Path

import httpx

from app.transport.base import BaseTransport
from app.transport.exceptions import TransportError


class GatewayTransport(BaseTransport):
    """Delivers messages through an HTTP WhatsApp gateway holding the paired session."""

    def __init__(
        self,
        *,
        base_url: str,
        api_token: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_seconds,
        )

    def send_text(self, recipient: str, text: str) -> None:
        self._post("/send-text", json={"number": recipient, "message": text})

    def send_media(self, recipient: str, file_path: Path) -> None:
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        with file_path.open("rb") as fh:
            self._post(
                "/send-media",
                data={"number": recipient},
                files={"file": (file_path.name, fh, content_type)},
            )

    def status(self) -> str:
        try:
            response = self._client.get("/status")
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TransportError(f"Gateway status check failed: {exc}") from exc
        if isinstance(payload, dict):
            return str(payload.get("status", "unknown"))
        return "unknown"

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, **kwargs: object) -> None:
        try:
            response = self._client.post(path, **kwargs)  # type: ignore[arg-type]
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Gateway rejected {path}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Gateway network error on {path}: {exc}") from exc
