import base64
import binascii
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.schemas import CompressionBody, InvoiceBody, MessageBody
from app.compression.orchestrator import CompressionOrchestrator
from app.config.settings import Settings
from app.invoices.client import InvoiceClient
from app.invoices.exceptions import InvoiceError
from app.logging.logger import Log
from app.pdf.sizing import BYTES_PER_MB, format_mb
from app.relay.dispatcher import MessageDispatcher
from app.relay.exceptions import InvalidAttachmentError
from app.relay.models import MessageRequest
from app.transport.base import BaseTransport
from app.transport.exceptions import TransportError


def declared_size_mb(request: Request) -> float | None:
    """Content-Length in MB, or None when absent or malformed."""
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw) / BYTES_PER_MB
    except ValueError:
        return None


async def measure_request_mb(request: Request) -> float:
    """Request body size in MB: Content-Length when declared, else the bytes actually received.

    Chunked uploads carry no Content-Length, so their body is read and counted.
    """
    declared = declared_size_mb(request)
    if declared is not None:
        return declared
    return len(await request.body()) / BYTES_PER_MB


def request_size_mb(request: Request, *fields: str | None) -> float:
    """Size handed to admission: the measured body, never less than the parsed fields."""
    measured: float = getattr(request.state, "payload_size_mb", 0.0)
    return max(measured, sum(len(f) for f in fields if f) / BYTES_PER_MB)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


def create_app(
    settings: Settings,
    *,
    dispatcher: MessageDispatcher,
    orchestrator: CompressionOrchestrator,
    transport: BaseTransport,
    invoice_client: InvoiceClient,
) -> FastAPI:
    """Build the HTTP facade around already-wired collaborators."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        Log.info("Shutting down: closing outbound clients")
        dispatcher.close()
        invoice_client.close()

    app = FastAPI(title="Invoice Relay", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def enforce_transport_limit(request: Request, call_next):  # type: ignore[no-untyped-def]
        size = await measure_request_mb(request)
        request.state.payload_size_mb = size
        if size > settings.transport_payload_limit_mb:
            Log.warning(f"Refused {request.url.path}: payload {format_mb(size)}")
            return _error(
                413,
                f"Payload of {format_mb(size)} exceeds the "
                f"{format_mb(settings.transport_payload_limit_mb)} transport limit",
            )
        return await call_next(request)

    def _deliver(message: MessageRequest, total_mb: float, endpoint: str) -> JSONResponse:
        try:
            result = dispatcher.deliver(message, total_mb, endpoint=endpoint)
        except InvalidAttachmentError as exc:
            return _error(400, f"Invalid attachment: {exc}")
        except Exception as exc:
            return _error(500, f"Error sending message: {exc}")
        content = {k: v for k, v in asdict(result).items() if v is not None}
        return JSONResponse(status_code=200, content=content)

    @app.post("/v1/messages")
    def send_message(body: MessageBody, request: Request) -> JSONResponse:
        total_mb = request_size_mb(request, body.message, body.pdf, body.xml)
        return _deliver(body.to_request(), total_mb, "/v1/messages")

    @app.post("/v1/invoices")
    def send_invoice(body: InvoiceBody, request: Request) -> JSONResponse:
        try:
            pdf_base64 = invoice_client.fetch_invoice_pdf_base64(body.token, body.path)
        except InvoiceError as exc:
            Log.error(f"Invoice fetch for {body.number} failed: {exc}")
            return _error(502, f"Could not fetch invoice: {exc}")
        message = MessageRequest(
            number=body.number,
            message=body.message,
            pdf=pdf_base64,
            xml=body.xml,
            customer_name=body.customer_name,
        )
        total_mb = (
            request_size_mb(request, body.message, body.xml) + len(pdf_base64) / BYTES_PER_MB
        )
        return _deliver(message, total_mb, "/v1/invoices")

    @app.post("/v1/test-compression")
    def test_compression(body: CompressionBody) -> JSONResponse:
        try:
            pdf_bytes = base64.b64decode("".join(body.pdf.split()), validate=True)
        except (binascii.Error, ValueError):
            return _error(400, "pdf must be base64 encoded")
        target_mb = body.target_size_mb or settings.pdf_compression_target_mb
        report = orchestrator.run(pdf_bytes, target_mb)
        return JSONResponse(
            status_code=200,
            content={
                "status": "ok",
                "originalSizeMB": round(report.original_size_mb, 2),
                "finalSizeMB": round(report.final_size_mb, 2),
                "targetSizeMB": round(target_mb, 2),
                "targetMet": report.target_met,
                "compressionRatio": round(report.compression_ratio, 1),
                "profile": {**asdict(report.profile), "strategy": report.profile.strategy.value},
                "attempts": [asdict(attempt) for attempt in report.attempts],
            },
        )

    @app.get("/v1/status")
    def status() -> dict[str, object]:
        try:
            transport_status = transport.status()
        except TransportError as exc:
            Log.warning(f"Transport status unavailable: {exc}")
            transport_status = "unavailable"
        return {
            "status": "ok",
            "transport": transport_status,
            "limits": {
                "compressionThresholdMB": settings.pdf_compression_threshold_mb,
                "compressionTargetMB": settings.pdf_compression_target_mb,
                "maxCompressedMB": settings.pdf_max_compressed_mb,
                "businessLimitMB": settings.pdf_business_limit_mb,
                "transportLimitMB": settings.transport_payload_limit_mb,
            },
        }

    return app
