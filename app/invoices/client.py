import httpx

from app.config.settings import Settings
from app.invoices.exceptions import InvoiceFetchError
from app.invoices.models import decode_invoice_response
from app.logging.logger import Log


class InvoiceClient:
    """Fetches invoice PDFs (base64) from the point-of-sale invoice API."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        verify_tls: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds, verify=verify_tls)

    @classmethod
    def from_settings(cls, settings: Settings) -> "InvoiceClient":
        return cls(
            url=settings.invoice_api_url,
            timeout_seconds=settings.invoice_api_timeout_seconds,
            verify_tls=settings.invoice_api_verify_tls,
        )

    def fetch_invoice_pdf_base64(self, token: str, path: str) -> str:
        """Return the base64 PDF stored at path on the invoice server.

        Raises:
            InvoiceFetchError: on network or HTTP errors, or a non-JSON body.
            InvoiceResponseShapeError: if the JSON body has no recognizable PDF.
        """
        try:
            response = self._client.post(
                self._url,
                json={"pathPdfLocal": path},
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise InvoiceFetchError(
                f"Invoice API returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise InvoiceFetchError(f"Invoice API network error: {exc}") from exc
        except ValueError as exc:
            raise InvoiceFetchError(f"Invoice API returned invalid JSON: {exc}") from exc

        payload = decode_invoice_response(body)
        Log.info(f"Invoice fetched ({type(payload).__name__}, {len(payload.data)} base64 chars)")
        return payload.data

    def close(self) -> None:
        self._client.close()
