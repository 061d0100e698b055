import re

from app.logging.logger import Log
from app.pdf.models import CompressionStrategy, PdfProfile
from app.pdf.sizing import format_mb, size_mb

SCAN_WINDOW = 10_000

_VERSION_RE = re.compile(r"%PDF-(\d+\.\d+)")
_PAGE_RE = re.compile(r"/Type\s*/Page[^s]")


def strategy_for_size(size: float) -> CompressionStrategy:
    """Map a size in MB onto the fixed 10/25/50 MB strategy thresholds."""
    if size > 50:
        return CompressionStrategy.ULTRA_AGGRESSIVE
    if size > 25:
        return CompressionStrategy.AGGRESSIVE
    if size > 10:
        return CompressionStrategy.MODERATE
    return CompressionStrategy.BASIC


class PdfAnalyzer:
    """Heuristic PDF scan over the first 10,000 bytes.

    Page counts and image detection are best-effort: objects that appear past
    the scan window are not seen.
    """

    def analyze(self, pdf_bytes: bytes) -> PdfProfile:
        try:
            return self._analyze(pdf_bytes)
        except Exception as exc:
            Log.warning(f"PDF analysis failed, using basic profile: {exc}")
            return PdfProfile()

    def _analyze(self, pdf_bytes: bytes) -> PdfProfile:
        size = size_mb(pdf_bytes)
        content = pdf_bytes[:SCAN_WINDOW].decode("ascii", errors="replace")

        version_match = _VERSION_RE.search(content)
        profile = PdfProfile(
            size_mb=size,
            declared_version=version_match.group(1) if version_match else "unknown",
            page_count=len(_PAGE_RE.findall(content)),
            has_images="/Image" in content or "/XObject" in content,
            has_annotations="/Annot" in content,
            has_metadata="/Info" in content or "/Metadata" in content,
            strategy=strategy_for_size(size),
        )
        Log.info(
            f"PDF analysis: {format_mb(size)}, version {profile.declared_version}, "
            f"{profile.page_count} pages, strategy {profile.strategy.value}"
        )
        return profile
