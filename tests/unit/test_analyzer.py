from unittest.mock import patch

import pytest

from app.pdf.analyzer import PdfAnalyzer, strategy_for_size
from app.pdf.models import CompressionStrategy


class TestStrategyThresholds:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0.0, CompressionStrategy.BASIC),
            (10.0, CompressionStrategy.BASIC),
            (10.01, CompressionStrategy.MODERATE),
            (25.0, CompressionStrategy.MODERATE),
            (25.01, CompressionStrategy.AGGRESSIVE),
            (50.0, CompressionStrategy.AGGRESSIVE),
            (50.01, CompressionStrategy.ULTRA_AGGRESSIVE),
        ],
    )
    def test_maps_size_to_strategy(self, size: float, expected: CompressionStrategy) -> None:
        assert strategy_for_size(size) is expected

    def test_strategy_never_decreases_with_size(self) -> None:
        sizes = [s / 4 for s in range(0, 300)]
        order = list(CompressionStrategy)
        ranks = [order.index(strategy_for_size(s)) for s in sizes]
        assert ranks == sorted(ranks)


class TestAnalyze:
    def test_reads_version_and_pages(self, annotated_pdf_bytes: bytes) -> None:
        profile = PdfAnalyzer().analyze(annotated_pdf_bytes)
        assert profile.declared_version != "unknown"
        assert profile.page_count == 2
        assert profile.has_annotations is True
        assert profile.strategy is CompressionStrategy.BASIC

    def test_detects_images(self, image_pdf_bytes: bytes) -> None:
        profile = PdfAnalyzer().analyze(image_pdf_bytes)
        assert profile.has_images is True

    def test_unknown_version_for_non_pdf(self) -> None:
        profile = PdfAnalyzer().analyze(b"plain text, no header")
        assert profile.declared_version == "unknown"
        assert profile.page_count == 0

    def test_strategy_follows_size(self, padded_pdf) -> None:  # type: ignore[no-untyped-def]
        profile = PdfAnalyzer().analyze(padded_pdf(12))
        assert profile.strategy is CompressionStrategy.MODERATE

    def test_degrades_to_basic_profile_on_error(self) -> None:
        with patch("app.pdf.analyzer.size_mb", side_effect=RuntimeError("boom")):
            profile = PdfAnalyzer().analyze(b"%PDF-1.4")
        assert profile.strategy is CompressionStrategy.BASIC
        assert profile.page_count == 0
        assert profile.has_images is False
