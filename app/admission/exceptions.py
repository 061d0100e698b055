class AdmissionError(Exception):
    """Base exception for PDF admission errors."""


class InvalidPdfPayloadError(AdmissionError):
    """Raised when the pdf field is neither decodable base64 nor a readable file."""
