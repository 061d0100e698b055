class InvoiceError(Exception):
    """Base exception for invoice API errors."""


class InvoiceFetchError(InvoiceError):
    """Raised when the invoice API call fails due to network or HTTP errors."""


class InvoiceResponseShapeError(InvoiceError):
    """Raised when the invoice API answers with neither a base64 string nor a wrapped one."""
