from app.config.settings import Settings
from app.transport.base import BaseTransport
from app.transport.example_adapter import ExampleTransport
from app.transport.gateway_adapter import GatewayTransport


class TransportFactory:
    """Creates the configured transport adapter."""

    PROVIDERS = ("example", "gateway")

    @classmethod
    def create(cls, settings: Settings) -> BaseTransport:
        provider = settings.transport_provider.lower()
        if provider == "example":
            return ExampleTransport()
        if provider == "gateway":
            return GatewayTransport(
                base_url=settings.transport_gateway_base_url,
                api_token=settings.transport_gateway_api_token,
                timeout_seconds=settings.transport_timeout_seconds,
            )
        raise ValueError(
            f"Unknown transport provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
