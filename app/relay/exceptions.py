class RelayError(Exception):
    """Base exception for message delivery errors."""


class InvalidAttachmentError(RelayError):
    """Raised when an attachment field cannot be decoded into its expected format."""
