"""Example transport adapter.

Logs every outbound message instead of delivering it. Used for local
development and as a template for real gateway adapters.
"""

from pathlib import Path

from app.logging.logger import Log
from app.transport.base import BaseTransport


class ExampleTransport(BaseTransport):
    """Transport that records sends in memory and the log. No network calls."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_text(self, recipient: str, text: str) -> None:
        Log.info(f"[example transport] text to {recipient}: {len(text)} chars")
        self.sent.append((recipient, text))

    def send_media(self, recipient: str, file_path: Path) -> None:
        size = file_path.stat().st_size
        Log.info(f"[example transport] media to {recipient}: {file_path.name} ({size} bytes)")
        self.sent.append((recipient, file_path.name))

    def status(self) -> str:
        return "example"
