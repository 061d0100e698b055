from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property

from app.pdf.sizing import size_mb
from app.pdf.validator import is_valid_pdf


class CompressionStrategy(str, Enum):
    """Compression strategy, ordered from least to most aggressive."""

    BASIC = "basic"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"
    ULTRA_AGGRESSIVE = "ultra-aggressive"


@dataclass(frozen=True)
class PdfArtifact:
    """Immutable PDF payload. Compression produces a new artifact, never mutates one."""

    data: bytes

    @cached_property
    def size_mb(self) -> float:
        return size_mb(self.data)

    @cached_property
    def is_structurally_valid(self) -> bool:
        return is_valid_pdf(self.data)


@dataclass(frozen=True)
class PdfProfile:
    """Heuristic summary used to pick a compression strategy."""

    size_mb: float = 0.0
    declared_version: str = "unknown"
    page_count: int = 0
    has_images: bool = False
    has_annotations: bool = False
    has_metadata: bool = False
    strategy: CompressionStrategy = CompressionStrategy.BASIC


@dataclass(frozen=True)
class CompressionOptions:
    """Knobs for one structural compression pass."""

    remove_annotations: bool = True
    remove_metadata: bool = True
    optimize_structure: bool = True
    compress_images: bool = True
    image_quality: int = 60
    max_image_width: int = 1200
    max_image_height: int = 1600


@dataclass(frozen=True)
class CompressionAttempt:
    """Outcome of one orchestrator stage. Lives only for the duration of a run."""

    stage_index: int
    stage_name: str
    input_size_mb: float
    output_size_mb: float
    elapsed_ms: float
    succeeded: bool
    valid_after: bool
    error: str = ""


@dataclass(frozen=True)
class CompressionReport:
    """Result of a full orchestrator run."""

    original_size_mb: float
    final_size_mb: float
    target_mb: float
    output: bytes = field(repr=False)
    profile: PdfProfile = field(default_factory=PdfProfile)
    attempts: list[CompressionAttempt] = field(default_factory=list)

    @property
    def target_met(self) -> bool:
        return self.final_size_mb <= self.target_mb

    @property
    def compression_ratio(self) -> float:
        """Size reduction in percent relative to the original."""
        if self.original_size_mb == 0:
            return 0.0
        return (self.original_size_mb - self.final_size_mb) / self.original_size_mb * 100
