class PdfCompressionError(Exception):
    """Raised when a compression engine cannot rewrite a document."""
