from dataclasses import dataclass


@dataclass(frozen=True)
class MessageRequest:
    """An outbound message as received from the point-of-sale system."""

    number: str
    message: str | None = None
    pdf: str | None = None
    xml: str | None = None
    customer_name: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    status: str
    message: str
    method: str = "whatsapp"
    pdf_action: str | None = None
    warning: str | None = None
