from app.logging.logger import Log

MIN_PDF_BYTES = 100
HEADER_WINDOW = 8
TRAILER_WINDOW = 100
BODY_WINDOW = 5000


def is_valid_pdf(buffer: bytes | None) -> bool:
    """Cheap structural sanity check, not a conformant parse.

    A buffer passes when it is at least 100 bytes long, starts with a ``%PDF-``
    header, carries ``%%EOF`` in its last 100 bytes and mentions both ``obj``
    and ``endobj`` in its first 5000 bytes. Any error fails closed.
    """
    try:
        if not buffer or len(buffer) < MIN_PDF_BYTES:
            return False
        if not buffer[:HEADER_WINDOW].startswith(b"%PDF-"):
            return False
        if b"%%EOF" not in buffer[-TRAILER_WINDOW:]:
            return False
        body = buffer[:BODY_WINDOW]
        return b"obj" in body and b"endobj" in body
    except Exception as exc:
        Log.warning(f"PDF validation error: {exc}")
        return False
