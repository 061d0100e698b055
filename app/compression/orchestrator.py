import time

from app.compression.stages import CompressionStage, default_stages
from app.logging.logger import Log
from app.pdf.analyzer import PdfAnalyzer
from app.pdf.base import BasePdfCompressor
from app.pdf.models import CompressionAttempt, CompressionReport, PdfArtifact
from app.pdf.sizing import format_mb


class CompressionOrchestrator:
    """Drives the staged pipeline until the target size is met or stages run out.

    Stages execute strictly in order. Each stage works on the best buffer found
    so far (or on the original input when the stage asks for it). A stage
    output is only kept when the stage finished without raising and the output
    passes the structural validator. The best buffer is the smallest valid one
    seen, so the result never grows past what an earlier stage achieved and
    never turns a valid input into an invalid one. The target is best-effort:
    when every stage falls short the best buffer is returned anyway.
    """

    def __init__(
        self,
        stages: list[CompressionStage],
        analyzer: PdfAnalyzer | None = None,
    ) -> None:
        self._stages = stages
        self._analyzer = analyzer if analyzer is not None else PdfAnalyzer()

    def compress_to_target(self, pdf_bytes: bytes, target_mb: float) -> bytes:
        return self.run(pdf_bytes, target_mb).output

    def run(self, pdf_bytes: bytes, target_mb: float) -> CompressionReport:
        original = PdfArtifact(pdf_bytes)
        profile = self._analyzer.analyze(pdf_bytes)

        if original.size_mb <= target_mb:
            Log.info(
                f"PDF already within target ({format_mb(original.size_mb)} <= "
                f"{format_mb(target_mb)})"
            )
            return CompressionReport(
                original_size_mb=original.size_mb,
                final_size_mb=original.size_mb,
                target_mb=target_mb,
                output=pdf_bytes,
                profile=profile,
            )

        Log.info(
            f"Starting staged compression: {format_mb(original.size_mb)} -> "
            f"target {format_mb(target_mb)}"
        )
        start = time.perf_counter()
        best = original
        attempts: list[CompressionAttempt] = []

        for index, stage in enumerate(self._stages, start=1):
            source = original if stage.uses_original_input else best
            attempt, candidate = self._run_stage(index, stage, source)
            attempts.append(attempt)
            if candidate is not None and self._is_better(candidate, best):
                best = candidate
            if best.size_mb <= target_mb:
                Log.info(f"Target achieved at stage {index} ({stage.name})")
                break

        report = CompressionReport(
            original_size_mb=original.size_mb,
            final_size_mb=best.size_mb,
            target_mb=target_mb,
            output=best.data,
            profile=profile,
            attempts=attempts,
        )
        elapsed_ms = (time.perf_counter() - start) * 1000
        Log.info(
            f"Compression finished in {elapsed_ms:.2f}ms: final {format_mb(report.final_size_mb)}, "
            f"ratio {report.compression_ratio:.1f}%, target met: {report.target_met}"
        )
        return report

    def _run_stage(
        self,
        index: int,
        stage: CompressionStage,
        source: PdfArtifact,
    ) -> tuple[CompressionAttempt, PdfArtifact | None]:
        start = time.perf_counter()
        try:
            output = PdfArtifact(stage.run(source.data))
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            Log.warning(f"Stage {index} ({stage.name}) failed: {exc}")
            attempt = CompressionAttempt(
                stage_index=index,
                stage_name=stage.name,
                input_size_mb=source.size_mb,
                output_size_mb=source.size_mb,
                elapsed_ms=elapsed_ms,
                succeeded=False,
                valid_after=False,
                error=str(exc),
            )
            return attempt, None

        elapsed_ms = (time.perf_counter() - start) * 1000
        valid = output.is_structurally_valid
        Log.info(
            f"Stage {index} ({stage.name}): {format_mb(source.size_mb)} -> "
            f"{format_mb(output.size_mb)} in {elapsed_ms:.2f}ms, valid: {valid}"
        )
        attempt = CompressionAttempt(
            stage_index=index,
            stage_name=stage.name,
            input_size_mb=source.size_mb,
            output_size_mb=output.size_mb,
            elapsed_ms=elapsed_ms,
            succeeded=True,
            valid_after=valid,
        )
        return attempt, output if valid else None

    @staticmethod
    def _is_better(candidate: PdfArtifact, best: PdfArtifact) -> bool:
        """Valid beats invalid; among equals, strictly smaller wins."""
        if not best.is_structurally_valid:
            return candidate.is_structurally_valid
        return candidate.is_structurally_valid and len(candidate.data) < len(best.data)


def build_orchestrator(compressor: BasePdfCompressor) -> CompressionOrchestrator:
    return CompressionOrchestrator(default_stages(compressor))
