from pydantic import BaseModel, ConfigDict, Field

from app.relay.models import MessageRequest


class MessageBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number: str = Field(min_length=1)
    message: str | None = None
    pdf: str | None = None
    xml: str | None = None
    customer_name: str | None = Field(default=None, alias="customerName")

    def to_request(self) -> MessageRequest:
        return MessageRequest(
            number=self.number,
            message=self.message,
            pdf=self.pdf,
            xml=self.xml,
            customer_name=self.customer_name,
        )


class InvoiceBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number: str = Field(min_length=1)
    token: str = Field(min_length=1)
    path: str = Field(min_length=1)
    message: str | None = None
    xml: str | None = None
    customer_name: str | None = Field(default=None, alias="customerName")


class CompressionBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pdf: str = Field(min_length=1)
    target_size_mb: float | None = Field(default=None, alias="targetSizeMB", gt=0)
