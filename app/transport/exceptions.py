class TransportError(Exception):
    """Raised when the messaging gateway fails to deliver a message."""
