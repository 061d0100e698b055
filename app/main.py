import uvicorn
from fastapi import FastAPI

from app.admission.models import AdmissionLimits
from app.admission.policy import AdmissionPolicy
from app.api.app import create_app
from app.compression.orchestrator import build_orchestrator
from app.config.settings import Settings
from app.database.connection import close_history_pool, open_history_pool
from app.database.repositories.history_repository import HistoryRepository
from app.invoices.client import InvoiceClient
from app.logging.logger import Log
from app.notifications.notifier import EmailNotifier
from app.pdf.factory import PdfCompressorFactory
from app.relay.dispatcher import build_dispatcher
from app.transport.factory import TransportFactory


def build_app(settings: Settings) -> FastAPI:
    """Wire every collaborator from settings and return the HTTP app."""
    orchestrator = build_orchestrator(PdfCompressorFactory.create(settings))
    policy = AdmissionPolicy(
        orchestrator,
        AdmissionLimits.from_settings(settings),
        local_root=settings.pdf_local_root,
    )
    transport = TransportFactory.create(settings)
    dispatcher = build_dispatcher(
        settings,
        transport=transport,
        policy=policy,
        notifier=EmailNotifier.from_settings(settings),
        history=HistoryRepository(),
    )
    return create_app(
        settings,
        dispatcher=dispatcher,
        orchestrator=orchestrator,
        transport=transport,
        invoice_client=InvoiceClient.from_settings(settings),
    )


def main() -> None:
    """Entry point: configure logging -> open history pool -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    open_history_pool(settings)

    try:
        app = build_app(settings)
        Log.info(f"Invoice relay listening on {settings.http_host}:{settings.http_port}")
        uvicorn.run(app, host=settings.http_host, port=settings.http_port)
    finally:
        close_history_pool()


if __name__ == "__main__":
    main()
