import pymupdf

from app.logging.logger import Log
from app.pdf.base import BasePdfCompressor
from app.pdf.images import recompress_image_bytes
from app.pdf.models import CompressionOptions

_CLEARED_METADATA = {"title": "", "author": "", "subject": "", "keywords": ""}


class PyMuPdfCompressor(BasePdfCompressor):
    """Compresses PDFs through the PyMuPDF document model."""

    engine = "pymupdf"

    def _compress(self, pdf_bytes: bytes, options: CompressionOptions) -> bytes:
        with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
            if options.remove_metadata:
                self._clear_metadata(doc)
            if options.remove_annotations:
                self._remove_annotations(doc)
            if options.compress_images:
                replaced = self._recompress_images(doc, options)
                Log.debug(f"Recompressed {replaced} images")
            return doc.tobytes(
                garbage=4 if options.optimize_structure else 1,
                deflate=True,
                clean=options.optimize_structure,
                use_objstms=1 if options.optimize_structure else 0,
            )

    def _clear_metadata(self, doc: pymupdf.Document) -> None:
        try:
            doc.set_metadata(dict(_CLEARED_METADATA))
            doc.del_xml_metadata()
        except Exception as exc:
            Log.warning(f"Could not remove all metadata: {exc}")

    def _remove_annotations(self, doc: pymupdf.Document) -> None:
        for page in doc:
            annot = page.first_annot
            while annot:
                annot = page.delete_annot(annot)

    def _recompress_images(self, doc: pymupdf.Document, options: CompressionOptions) -> int:
        seen: set[int] = set()
        replaced = 0
        for page in doc:
            for image_info in page.get_images(full=True):
                xref, smask = image_info[0], image_info[1]
                if xref in seen or smask:
                    continue
                seen.add(xref)
                try:
                    original = doc.extract_image(xref)
                    image_bytes = original.get("image") if original else None
                    if not image_bytes:
                        continue
                    result = recompress_image_bytes(
                        image_bytes,
                        quality=options.image_quality,
                        max_width=options.max_image_width,
                        max_height=options.max_image_height,
                    )
                    if len(result.data) < len(image_bytes):
                        page.replace_image(xref, stream=result.data)
                        replaced += 1
                except Exception as exc:
                    Log.warning(f"Image xref {xref} recompression skipped: {exc}")
        return replaced
