import base64
import binascii
from pathlib import Path
from urllib.parse import urlparse

from app.admission.exceptions import InvalidPdfPayloadError
from app.admission.models import AdmissionAction, AdmissionDecision, AdmissionLimits
from app.compression.orchestrator import CompressionOrchestrator
from app.logging.logger import Log
from app.pdf.models import PdfArtifact
from app.pdf.sizing import format_mb

MAX_PATH_LENGTH = 1024


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _read_local_file(pdf_field: str, local_root: Path) -> bytes | None:
    """Bytes of a file under local_root named by pdf_field, or None."""
    if len(pdf_field) > MAX_PATH_LENGTH:
        return None
    try:
        root = local_root.resolve()
        path = (root / pdf_field).resolve()
        if not path.is_file():
            return None
        if not path.is_relative_to(root):
            Log.warning(f"Refusing local PDF outside {root}: {path}")
            return None
        return path.read_bytes()
    except (OSError, ValueError):
        return None


def load_pdf_bytes(pdf_field: str, local_root: Path | None = None) -> bytes:
    """Resolve the pdf field to bytes: a file under local_root, else strict base64.

    Local paths are only honored when local_root is set; relative paths are
    taken from local_root.

    Raises:
        InvalidPdfPayloadError: if the field is neither.
    """
    if local_root is not None:
        local = _read_local_file(pdf_field, local_root)
        if local is not None:
            return local

    compact = "".join(pdf_field.split())
    try:
        decoded = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPdfPayloadError(
            "pdf is neither valid base64 nor a readable file path"
        ) from exc
    if not decoded:
        raise InvalidPdfPayloadError("pdf decoded to an empty document")
    return decoded


class AdmissionPolicy:
    """Decides, per request, how a PDF field is delivered.

    Order of checks: URL reference, request-level size cap, decode, then
    pass-through below the compression threshold or compression with a hard
    ceiling above it.
    """

    def __init__(
        self,
        orchestrator: CompressionOrchestrator,
        limits: AdmissionLimits | None = None,
        *,
        local_root: Path | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._limits = limits if limits is not None else AdmissionLimits()
        self._local_root = local_root

    def decide(self, pdf_field: str, total_request_size_mb: float) -> AdmissionDecision:
        decision = self._decide(pdf_field, total_request_size_mb)
        Log.info(f"PDF admission: {decision.action.value} ({decision.reason})")
        return decision

    def _decide(self, pdf_field: str, total_request_size_mb: float) -> AdmissionDecision:
        limits = self._limits

        if is_http_url(pdf_field):
            return AdmissionDecision(
                action=AdmissionAction.URL_REFERENCE,
                reason="pdf provided as URL, sent as link",
                reference_url=pdf_field.strip(),
            )

        if total_request_size_mb > limits.business_limit_mb:
            return AdmissionDecision(
                action=AdmissionAction.REJECTED,
                reason=(
                    f"PDF omitted: request size {format_mb(total_request_size_mb)} "
                    f"exceeds the {format_mb(limits.business_limit_mb)} limit"
                ),
                original_size_mb=total_request_size_mb,
            )

        try:
            artifact = PdfArtifact(load_pdf_bytes(pdf_field, self._local_root))
        except InvalidPdfPayloadError as exc:
            return AdmissionDecision(action=AdmissionAction.REJECTED, reason=str(exc))

        if artifact.size_mb <= limits.compression_threshold_mb:
            return self._pass_through(artifact)
        return self._compress(artifact)

    def _pass_through(self, artifact: PdfArtifact) -> AdmissionDecision:
        if not artifact.is_structurally_valid:
            return AdmissionDecision(
                action=AdmissionAction.REJECTED,
                reason=f"PDF of {format_mb(artifact.size_mb)} is not a structurally valid document",
                original_size_mb=artifact.size_mb,
            )
        return AdmissionDecision(
            action=AdmissionAction.PASS_THROUGH,
            reason=(
                f"{format_mb(artifact.size_mb)} within the "
                f"{format_mb(self._limits.compression_threshold_mb)} threshold"
            ),
            artifact=artifact,
            original_size_mb=artifact.size_mb,
            final_size_mb=artifact.size_mb,
        )

    def _compress(self, artifact: PdfArtifact) -> AdmissionDecision:
        limits = self._limits
        compressed = PdfArtifact(
            self._orchestrator.compress_to_target(artifact.data, limits.compression_target_mb)
        )
        sizes = (
            f"original {format_mb(artifact.size_mb)}, "
            f"compressed {format_mb(compressed.size_mb)}, "
            f"limit {format_mb(limits.max_compressed_mb)}"
        )

        if compressed.size_mb > limits.max_compressed_mb:
            reason = (
                f"PDF too large after compression: {format_mb(compressed.size_mb)} exceeds "
                f"the {format_mb(limits.max_compressed_mb)} limit ({sizes})"
            )
        elif not compressed.is_structurally_valid:
            reason = f"PDF is not a structurally valid document ({sizes})"
        else:
            return AdmissionDecision(
                action=AdmissionAction.COMPRESSED,
                reason=f"compressed ({sizes})",
                artifact=compressed,
                original_size_mb=artifact.size_mb,
                final_size_mb=compressed.size_mb,
            )

        return AdmissionDecision(
            action=AdmissionAction.REJECTED,
            reason=reason,
            original_size_mb=artifact.size_mb,
            final_size_mb=compressed.size_mb,
        )
