import base64
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from app.admission.exceptions import InvalidPdfPayloadError
from app.admission.models import AdmissionAction, AdmissionLimits
from app.admission.policy import AdmissionPolicy, is_http_url, load_pdf_bytes
from app.compression.orchestrator import build_orchestrator
from app.pdf.pymupdf_adapter import PyMuPdfCompressor
from app.pdf.validator import is_valid_pdf


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _make_policy(compressed: bytes | None = None) -> tuple[AdmissionPolicy, MagicMock]:
    orchestrator = MagicMock()
    if compressed is not None:
        orchestrator.compress_to_target.return_value = compressed
    return AdmissionPolicy(orchestrator, AdmissionLimits()), orchestrator


class TestIsHttpUrl:
    @pytest.mark.parametrize(
        "value",
        ["http://example.com/a.pdf", "https://cdn.example.com/x?y=1", "  https://h/p  "],
    )
    def test_accepts_http_urls(self, value: str) -> None:
        assert is_http_url(value) is True

    @pytest.mark.parametrize("value", ["ftp://host/file.pdf", "JVBERi0xLjQ=", "/tmp/a.pdf", "http://"])
    def test_rejects_other_values(self, value: str) -> None:
        assert is_http_url(value) is False


class TestLoadPdfBytes:
    def test_reads_file_under_local_root(self, tmp_path: Path, sample_pdf_bytes: bytes) -> None:
        path = tmp_path / "invoice.pdf"
        path.write_bytes(sample_pdf_bytes)
        assert load_pdf_bytes(str(path), tmp_path) == sample_pdf_bytes

    def test_relative_name_is_taken_from_local_root(
        self, tmp_path: Path, sample_pdf_bytes: bytes
    ) -> None:
        (tmp_path / "invoice.pdf").write_bytes(sample_pdf_bytes)
        assert load_pdf_bytes("invoice.pdf", tmp_path) == sample_pdf_bytes

    def test_ignores_paths_without_local_root(self, tmp_path: Path, sample_pdf_bytes: bytes) -> None:
        path = tmp_path / "invoice.pdf"
        path.write_bytes(sample_pdf_bytes)
        with pytest.raises(InvalidPdfPayloadError):
            load_pdf_bytes(str(path))

    def test_refuses_paths_outside_local_root(
        self, tmp_path: Path, sample_pdf_bytes: bytes
    ) -> None:
        root = tmp_path / "invoices"
        root.mkdir()
        outside = tmp_path / "secret.pdf"
        outside.write_bytes(sample_pdf_bytes)
        with pytest.raises(InvalidPdfPayloadError):
            load_pdf_bytes(str(outside), root)
        with pytest.raises(InvalidPdfPayloadError):
            load_pdf_bytes("../secret.pdf", root)

    def test_decodes_base64_with_whitespace(self, sample_pdf_bytes: bytes) -> None:
        encoded = _b64(sample_pdf_bytes)
        wrapped = "\n".join(encoded[i : i + 76] for i in range(0, len(encoded), 76))
        assert load_pdf_bytes(wrapped) == sample_pdf_bytes

    def test_rejects_garbage(self) -> None:
        with pytest.raises(InvalidPdfPayloadError):
            load_pdf_bytes("not base64 at all!!")

    def test_rejects_empty_payload(self) -> None:
        with pytest.raises(InvalidPdfPayloadError):
            load_pdf_bytes("")


class TestAdmissionPolicy:
    def test_url_is_referenced_without_compression(self) -> None:
        policy, orchestrator = _make_policy()

        decision = policy.decide("https://files.example.com/invoice.pdf", 500)

        assert decision.action is AdmissionAction.URL_REFERENCE
        assert decision.reference_url == "https://files.example.com/invoice.pdf"
        assert decision.delivers_attachment is False
        orchestrator.compress_to_target.assert_not_called()

    def test_request_over_business_cap_is_rejected(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        policy, orchestrator = _make_policy()

        decision = policy.decide(_b64(padded_pdf(1)), 120)

        assert decision.action is AdmissionAction.REJECTED
        assert "120.00 MB" in decision.reason
        assert "100.00 MB" in decision.reason
        orchestrator.compress_to_target.assert_not_called()

    def test_small_pdf_passes_through_unchanged(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        pdf = padded_pdf(2)
        policy, orchestrator = _make_policy()

        decision = policy.decide(_b64(pdf), 3)

        assert decision.action is AdmissionAction.PASS_THROUGH
        assert decision.artifact is not None
        assert decision.artifact.data == pdf
        orchestrator.compress_to_target.assert_not_called()

    def test_small_invalid_pdf_is_rejected(self) -> None:
        policy, _ = _make_policy()

        decision = policy.decide(_b64(b"B" * 4096), 1)

        assert decision.action is AdmissionAction.REJECTED
        assert "not a structurally valid" in decision.reason

    def test_local_path_is_admitted(self, tmp_path: Path, sample_pdf_bytes: bytes) -> None:
        path = tmp_path / "invoice.pdf"
        path.write_bytes(sample_pdf_bytes)
        policy = AdmissionPolicy(MagicMock(), AdmissionLimits(), local_root=tmp_path)

        decision = policy.decide(str(path), 0.01)

        assert decision.action is AdmissionAction.PASS_THROUGH

    def test_invalid_base64_is_rejected(self) -> None:
        policy, _ = _make_policy()

        decision = policy.decide("%%% definitely not base64 %%%", 0.01)

        assert decision.action is AdmissionAction.REJECTED
        assert "base64" in decision.reason

    def test_large_pdf_is_compressed_to_target(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        compressed = padded_pdf(20)
        policy, orchestrator = _make_policy(compressed)

        decision = policy.decide(_b64(padded_pdf(12)), 17)

        assert decision.action is AdmissionAction.COMPRESSED
        assert decision.artifact is not None
        assert decision.artifact.data == compressed
        assert orchestrator.compress_to_target.call_args.args[1] == 25

    def test_compressed_over_ceiling_is_rejected(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        policy, _ = _make_policy(padded_pdf(50))

        decision = policy.decide(_b64(padded_pdf(60)), 80)

        assert decision.action is AdmissionAction.REJECTED
        assert "50.00 MB exceeds the 45.00 MB limit" in decision.reason
        assert "original 60.00 MB" in decision.reason

    def test_compressed_but_invalid_is_rejected(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        policy, _ = _make_policy(b"C" * 2048)

        decision = policy.decide(_b64(padded_pdf(12)), 17)

        assert decision.action is AdmissionAction.REJECTED
        assert "not a structurally valid" in decision.reason

    def test_uncompressible_corrupt_buffer_is_rejected(self) -> None:
        corrupt = b"A" * (60 * 1024 * 1024)
        policy = AdmissionPolicy(build_orchestrator(PyMuPdfCompressor()))

        decision = policy.decide(_b64(corrupt), 80)

        assert decision.action is AdmissionAction.REJECTED
        assert "60.00 MB" in decision.reason
        assert "45.00 MB" in decision.reason

    def test_padded_pdf_is_compressed_end_to_end(
        self, padded_pdf: Callable[[float], bytes]
    ) -> None:
        policy = AdmissionPolicy(build_orchestrator(PyMuPdfCompressor()))

        decision = policy.decide(_b64(padded_pdf(30)), 40)

        assert decision.action is AdmissionAction.COMPRESSED
        assert decision.final_size_mb is not None and decision.final_size_mb <= 25
        assert decision.artifact is not None
        assert is_valid_pdf(decision.artifact.data)
