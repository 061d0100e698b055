from app.config.settings import PDF_COMPRESSION_ENGINES, Settings
from app.logging.logger import Log
from app.pdf.base import BasePdfCompressor
from app.pdf.pikepdf_adapter import PikePdfCompressor
from app.pdf.pymupdf_adapter import PyMuPdfCompressor


class PdfCompressorFactory:
    """Creates the structural compressor named by PDF_COMPRESSION_ENGINE.

    Settings already rejects unknown engine names at startup; the check here
    covers settings objects built without validation.
    """

    ADAPTERS: dict[str, type[BasePdfCompressor]] = {
        "pymupdf": PyMuPdfCompressor,
        "pikepdf": PikePdfCompressor,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfCompressor:
        engine = settings.pdf_compression_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF compression engine '{engine}'. Choose from: {list(PDF_COMPRESSION_ENGINES)}"
            )
        Log.info(f"Using {engine} for structural PDF compression")
        return adapter_cls()
