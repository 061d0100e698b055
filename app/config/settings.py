import tempfile
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PDF_COMPRESSION_ENGINES = ("pymupdf", "pikepdf")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    http_host: str = "0.0.0.0"
    http_port: int = 4008

    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_database: str = "chatbot"
    db_username: str = "chatbot"
    db_password: str = "secret"
    db_pool_timeout_seconds: float = 5.0

    pdf_compression_engine: str = "pymupdf"
    pdf_compression_threshold_mb: float = 8.0
    pdf_compression_target_mb: float = 25.0
    pdf_max_compressed_mb: float = 45.0
    pdf_business_limit_mb: float = 100.0
    transport_payload_limit_mb: float = 250.0

    temp_dir: Path = Path(tempfile.gettempdir()) / "invoice-relay"
    # Local file paths in the pdf field are only read from below this directory.
    pdf_local_root: Path | None = None

    transport_provider: str = "example"
    transport_gateway_base_url: str = "http://127.0.0.1:3008"
    transport_gateway_api_token: str = ""
    transport_timeout_seconds: int = 300

    invoice_api_url: str = "https://aut-api.cloud:82/getPdfL"
    invoice_api_timeout_seconds: int = 30
    invoice_api_verify_tls: bool = True

    notification_url: str = "http://127.0.0.1:3333/sendEmailFCB"
    notification_timeout_seconds: int = 10

    default_message: str = "Attached are the PDF and XML of your invoice"
    footer_brand: str = "PSA-SYSTEMS"
    footer_url: str = "https://psa-systems.com/#/home"

    @field_validator("pdf_compression_engine")
    @classmethod
    def _known_engine(cls, value: str) -> str:
        engine = value.strip().lower()
        if engine not in PDF_COMPRESSION_ENGINES:
            raise ValueError(
                f"Unknown PDF compression engine '{value}'. Choose from: {list(PDF_COMPRESSION_ENGINES)}"
            )
        return engine
