from abc import ABC, abstractmethod

from app.pdf.base import BasePdfCompressor
from app.pdf.byte_optimizer import optimize_bytes
from app.pdf.models import CompressionOptions


class CompressionStage(ABC):
    """One step of the escalating compression pipeline."""

    name: str = "stage"
    # When set, the stage starts over from the untouched input instead of the best buffer so far.
    uses_original_input: bool = False

    @abstractmethod
    def run(self, pdf_bytes: bytes) -> bytes:
        raise NotImplementedError


class StructuralCompressionStage(CompressionStage):
    def __init__(
        self,
        name: str,
        compressor: BasePdfCompressor,
        options: CompressionOptions,
        *,
        uses_original_input: bool = False,
    ) -> None:
        self.name = name
        self.uses_original_input = uses_original_input
        self._compressor = compressor
        self._options = options

    @property
    def options(self) -> CompressionOptions:
        return self._options

    def run(self, pdf_bytes: bytes) -> bytes:
        return self._compressor.compress_or_raise(pdf_bytes, self._options)


class ByteOptimizationStage(CompressionStage):
    name = "byte-optimization"

    def run(self, pdf_bytes: bytes) -> bytes:
        return optimize_bytes(pdf_bytes)


def default_stages(compressor: BasePdfCompressor) -> list[CompressionStage]:
    """The four escalating stages, in execution order."""
    return [
        StructuralCompressionStage(
            "structural",
            compressor,
            CompressionOptions(image_quality=70),
        ),
        StructuralCompressionStage(
            "structural-aggressive",
            compressor,
            CompressionOptions(image_quality=50, max_image_width=1000, max_image_height=1400),
        ),
        ByteOptimizationStage(),
        StructuralCompressionStage(
            "structural-last-resort",
            compressor,
            CompressionOptions(image_quality=30, max_image_width=800, max_image_height=1000),
            uses_original_input=True,
        ),
    ]
