from dataclasses import dataclass
from typing import Literal

from app.invoices.exceptions import InvoiceResponseShapeError


@dataclass(frozen=True)
class RawBase64Payload:
    """The API answered with the base64 string itself."""

    data: str


@dataclass(frozen=True)
class WrappedPayload:
    """The API answered with an object carrying the base64 under 'pdf' or 'data'."""

    data: str
    field: Literal["pdf", "data"]


InvoicePayload = RawBase64Payload | WrappedPayload


def decode_invoice_response(body: object) -> InvoicePayload:
    """Classify an invoice API response body.

    Raises:
        InvoiceResponseShapeError: if the body matches no known shape.
    """
    if isinstance(body, str) and body.strip():
        return RawBase64Payload(data=body.strip())
    if isinstance(body, dict):
        for field in ("pdf", "data"):
            value = body.get(field)
            if isinstance(value, str) and value.strip():
                return WrappedPayload(data=value.strip(), field=field)
        raise InvoiceResponseShapeError(
            f"Invoice response object has no 'pdf' or 'data' string (keys: {sorted(body)})"
        )
    raise InvoiceResponseShapeError(
        f"Unexpected invoice response type: {type(body).__name__}"
    )
