from dataclasses import dataclass
from enum import Enum

from app.config.settings import Settings
from app.pdf.models import PdfArtifact


class AdmissionAction(str, Enum):
    PASS_THROUGH = "pass-through"
    COMPRESSED = "compressed"
    URL_REFERENCE = "url-reference"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AdmissionDecision:
    """Terminal outcome of admitting one PDF field."""

    action: AdmissionAction
    reason: str
    artifact: PdfArtifact | None = None
    reference_url: str | None = None
    original_size_mb: float | None = None
    final_size_mb: float | None = None

    @property
    def delivers_attachment(self) -> bool:
        return self.action in (AdmissionAction.PASS_THROUGH, AdmissionAction.COMPRESSED)


@dataclass(frozen=True)
class AdmissionLimits:
    """Size thresholds in MB."""

    compression_threshold_mb: float = 8.0
    compression_target_mb: float = 25.0
    max_compressed_mb: float = 45.0
    business_limit_mb: float = 100.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdmissionLimits":
        return cls(
            compression_threshold_mb=settings.pdf_compression_threshold_mb,
            compression_target_mb=settings.pdf_compression_target_mb,
            max_compressed_mb=settings.pdf_max_compressed_mb,
            business_limit_mb=settings.pdf_business_limit_mb,
        )
