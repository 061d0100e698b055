import html
import traceback
from datetime import datetime, timezone

from app.admission.models import AdmissionAction, AdmissionDecision
from app.admission.policy import AdmissionPolicy
from app.artifacts.temp_files import TempArtifactManager
from app.config.settings import Settings
from app.database.models import HistoryRecord
from app.database.repositories.history_repository import HistoryRepository
from app.logging.logger import Log
from app.notifications.notifier import EmailNotifier
from app.relay.models import DeliveryResult, MessageRequest
from app.relay.xml_payload import decode_xml
from app.transport.base import BaseTransport


class MessageDispatcher:
    """Delivers one invoice message: text, PDF, XML, footer, history.

    Pipeline: admit PDF -> send text -> send PDF (file or link) -> send XML ->
    send footer -> record history. A rejected PDF does not stop the rest of the
    message; the omission is noted in the text and reported as a warning.
    """

    def __init__(
        self,
        *,
        transport: BaseTransport,
        policy: AdmissionPolicy,
        temp_files: TempArtifactManager,
        notifier: EmailNotifier,
        history: HistoryRepository | None = None,
        default_message: str = "Attached are the PDF and XML of your invoice",
        footer_brand: str = "PSA-SYSTEMS",
        footer_url: str = "",
    ) -> None:
        self._transport = transport
        self._policy = policy
        self._temp_files = temp_files
        self._notifier = notifier
        self._history = history
        self._default_message = default_message
        self._footer_brand = footer_brand
        self._footer_url = footer_url

    def deliver(
        self,
        request: MessageRequest,
        total_request_size_mb: float,
        endpoint: str = "/v1/messages",
    ) -> DeliveryResult:
        """Send the whole message or raise after notifying operators."""
        Log.info(f"Delivering message to {request.number} via {endpoint}")
        try:
            decision = (
                self._policy.decide(request.pdf, total_request_size_mb) if request.pdf else None
            )
            text = self._compose_text(request, decision)
            self._transport.send_text(request.number, text)
            if decision is not None:
                self._send_pdf(request.number, decision)
            if request.xml:
                self._send_xml(request.number, request.xml)
            self._transport.send_text(request.number, self._footer(request.customer_name))
        except Exception as exc:
            Log.exception(f"Delivery to {request.number} failed: {exc}")
            self._report_failure(endpoint, request, exc)
            raise

        self._record_history(request, text, decision)
        warning = (
            decision.reason
            if decision is not None and decision.action is AdmissionAction.REJECTED
            else None
        )
        return DeliveryResult(
            status="ok",
            message=f"Message sent to {request.number}",
            pdf_action=decision.action.value if decision is not None else None,
            warning=warning,
        )

    def _compose_text(self, request: MessageRequest, decision: AdmissionDecision | None) -> str:
        text = request.message if request.message and request.message.strip() else self._default_message
        if decision is not None and decision.action is AdmissionAction.REJECTED:
            text = f"{text}\n\nNote: the PDF could not be attached. {decision.reason}"
        return text

    def _send_pdf(self, number: str, decision: AdmissionDecision) -> None:
        if decision.action is AdmissionAction.URL_REFERENCE and decision.reference_url:
            self._transport.send_text(number, decision.reference_url)
            return
        if not decision.delivers_attachment or decision.artifact is None:
            return
        with self._temp_files.materialize(decision.artifact.data, "invoice_pdf", ".pdf") as handle:
            self._transport.send_media(number, handle.path)

    def _send_xml(self, number: str, xml_field: str) -> None:
        content = decode_xml(xml_field)
        with self._temp_files.materialize(content.encode("utf-8"), "invoice_xml", ".xml") as handle:
            self._transport.send_media(number, handle.path)

    def _footer(self, customer_name: str | None) -> str:
        lines = ["-" * 23, f"Sent from {self._footer_brand}", "Point of Sale System", ""]
        if customer_name:
            lines += [f"Sent by: {customer_name}", ""]
        if self._footer_url:
            lines.append(f"More information: {self._footer_url}")
        lines.append("-" * 23)
        return "\n".join(lines)

    def _record_history(
        self,
        request: MessageRequest,
        text: str,
        decision: AdmissionDecision | None,
    ) -> None:
        if self._history is None:
            return
        try:
            self._history.append_record(
                HistoryRecord(
                    phone=request.number,
                    keyword="api_message",
                    answer=text,
                    options={
                        "pdf_action": decision.action.value if decision is not None else None,
                        "xml": bool(request.xml),
                        "customer_name": request.customer_name,
                    },
                )
            )
        except Exception as exc:
            Log.warning(f"Could not record history for {request.number}: {exc}")

    def _report_failure(self, endpoint: str, request: MessageRequest, exc: Exception) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        stack = "".join(traceback.format_exception(exc))
        summary = (
            f"number={request.number}, message_chars={len(request.message or '')}, "
            f"pdf_chars={len(request.pdf or '')}, xml_chars={len(request.xml or '')}, "
            f"customer={request.customer_name or '-'}"
        )
        text_body = (
            f"Endpoint: {endpoint}\nTimestamp: {timestamp}\nError: {exc}\n"
            f"Request: {summary}\nStack: {stack}"
        )
        html_body = (
            "<h2>Invoice relay error</h2>"
            f"<p><strong>Endpoint:</strong> {html.escape(endpoint)}</p>"
            f"<p><strong>Timestamp:</strong> {timestamp}</p>"
            f"<p><strong>Error:</strong> {html.escape(str(exc))}</p>"
            f"<p><strong>Request:</strong> {html.escape(summary)}</p>"
            f"<pre>{html.escape(stack)}</pre>"
        )
        self._notifier.notify(f"Invoice relay error - {endpoint}", text_body, html_body)

    def close(self) -> None:
        self._transport.close()
        self._notifier.close()


def build_dispatcher(
    settings: Settings,
    *,
    transport: BaseTransport,
    policy: AdmissionPolicy,
    notifier: EmailNotifier,
    history: HistoryRepository | None,
) -> MessageDispatcher:
    return MessageDispatcher(
        transport=transport,
        policy=policy,
        temp_files=TempArtifactManager(settings.temp_dir),
        notifier=notifier,
        history=history,
        default_message=settings.default_message,
        footer_brand=settings.footer_brand,
        footer_url=settings.footer_url,
    )
