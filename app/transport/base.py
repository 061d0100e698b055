from abc import ABC, abstractmethod
from pathlib import Path


class BaseTransport(ABC):
    """Contract for WhatsApp delivery adapters."""

    @abstractmethod
    def send_text(self, recipient: str, text: str) -> None:
        """Send a plain text message.

        Raises:
            TransportError: if the message could not be delivered.
        """

    @abstractmethod
    def send_media(self, recipient: str, file_path: Path) -> None:
        """Send a file from disk as a media/document message.

        Raises:
            TransportError: if the file could not be delivered.
        """

    @abstractmethod
    def status(self) -> str:
        """Return the session status reported by the transport (e.g. 'connected')."""

    def close(self) -> None:
        """Release network resources. No-op for transports that hold none."""
