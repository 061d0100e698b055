import time
from abc import ABC, abstractmethod

from app.logging.logger import Log
from app.pdf.exceptions import PdfCompressionError
from app.pdf.models import CompressionOptions
from app.pdf.sizing import format_mb, size_mb


class BasePdfCompressor(ABC):
    """Contract for all structural PDF compression adapters."""

    engine: str = "base"

    def compress(self, pdf_bytes: bytes, options: CompressionOptions) -> bytes:
        """Rewrite the PDF object graph according to options.

        Never raises for document problems: a failed compression is a no-op and
        the original buffer is returned unchanged.
        """
        try:
            return self.compress_or_raise(pdf_bytes, options)
        except PdfCompressionError as exc:
            Log.warning(f"{exc}, keeping original")
            return pdf_bytes

    def compress_or_raise(self, pdf_bytes: bytes, options: CompressionOptions) -> bytes:
        """Same as compress() but reports engine failures.

        Raises:
            PdfCompressionError: if the engine could not produce output.
        """
        start = time.perf_counter()
        try:
            compressed = self._compress(pdf_bytes, options)
        except Exception as exc:
            raise PdfCompressionError(f"{self.engine} compression failed: {exc}") from exc
        elapsed_ms = (time.perf_counter() - start) * 1000
        Log.info(
            f"{self.engine} compression: {format_mb(size_mb(pdf_bytes))} -> "
            f"{format_mb(size_mb(compressed))} in {elapsed_ms:.2f}ms"
        )
        return compressed

    @abstractmethod
    def _compress(self, pdf_bytes: bytes, options: CompressionOptions) -> bytes:
        """Engine-specific compression. May raise; callers go through compress()."""
