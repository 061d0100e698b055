"""Byte-level PDF shrinking used when structural compression falls short.

The buffer is treated as an opaque byte string; nothing is parsed. Each
transformation runs on the original input and the smallest result that still
passes the structural validator wins.
"""

import re
from collections.abc import Callable

from app.logging.logger import Log
from app.pdf.validator import is_valid_pdf

_WHITESPACE_RUN_RE = re.compile(rb"\s{2,}")
_COMMENT_LINE_RE = re.compile(rb"^%(?!PDF-|%EOF)[^\r\n]*(?:\r\n|\r|\n)?", re.MULTILINE)
_BLANK_LINES_RE = re.compile(rb"\n{2,}")


def collapse_whitespace(data: bytes) -> bytes:
    return _WHITESPACE_RUN_RE.sub(b" ", data)


def strip_comments(data: bytes) -> bytes:
    """Drop ``%`` comment lines, keeping the ``%PDF-`` header and ``%%EOF``."""
    return _COMMENT_LINE_RE.sub(b"", data)


def normalize_line_endings(data: bytes) -> bytes:
    unified = data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")
    return _BLANK_LINES_RE.sub(b"\n", unified)


TRANSFORMATIONS: tuple[tuple[str, Callable[[bytes], bytes]], ...] = (
    ("collapse_whitespace", collapse_whitespace),
    ("strip_comments", strip_comments),
    ("normalize_line_endings", normalize_line_endings),
)


def optimize_bytes(pdf_bytes: bytes) -> bytes:
    """Return the smallest valid variant, or the input when none is smaller."""
    best = pdf_bytes
    best_name = ""
    for name, transform in TRANSFORMATIONS:
        try:
            candidate = transform(pdf_bytes)
        except Exception as exc:
            Log.warning(f"Byte optimization '{name}' failed: {exc}")
            continue
        if len(candidate) < len(best) and is_valid_pdf(candidate):
            best = candidate
            best_name = name

    if best is pdf_bytes:
        Log.info("Byte optimization found no smaller valid variant")
        return pdf_bytes

    reduction = (len(pdf_bytes) - len(best)) / len(pdf_bytes) * 100
    Log.info(f"Byte optimization via {best_name}: {reduction:.1f}% reduction")
    return best
