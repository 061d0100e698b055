import io
from collections.abc import Callable

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.pdf.sizing import BYTES_PER_MB

_MINIMAL_OBJECTS = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
    b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>\nendobj\n"
)
_MINIMAL_TRAILER = b"\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def build_padded_pdf(total_bytes: int) -> bytes:
    """Structurally valid PDF padded with whitespace up to total_bytes."""
    padding = max(0, total_bytes - len(_MINIMAL_OBJECTS) - len(_MINIMAL_TRAILER))
    return _MINIMAL_OBJECTS + b" " * padding + _MINIMAL_TRAILER


@pytest.fixture()
def padded_pdf() -> Callable[[float], bytes]:
    """Factory: minimal valid PDF of the requested size in MB."""

    def _make(size_mb: float) -> bytes:
        return build_padded_pdf(int(size_mb * BYTES_PER_MB))

    return _make


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Invoice 0001")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def annotated_pdf_bytes() -> bytes:
    """Two-page PDF carrying document metadata and a text annotation per page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle("Invoice 0002")
    c.setAuthor("Point of Sale")
    c.setSubject("Monthly invoice")
    c.setKeywords("invoice, sale")
    c.drawString(72, 720, "Page one content")
    c.textAnnotation("First note", Rect=(72, 600, 200, 650))
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.textAnnotation("Second note", Rect=(72, 600, 200, 650))
    c.save()
    return buf.getvalue()


@pytest.fixture()
def image_pdf_bytes() -> bytes:
    """Single-page PDF embedding a 1500x1500 noisy grayscale image."""
    image = Image.effect_noise((1500, 1500), 64)
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawImage(ImageReader(image), 36, 36, width=540, height=540)
    c.save()
    return buf.getvalue()
