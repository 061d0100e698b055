import io

import pikepdf
from pikepdf import Name, ObjectStreamMode, PdfImage

from app.logging.logger import Log
from app.pdf.base import BasePdfCompressor
from app.pdf.images import recompress_image
from app.pdf.models import CompressionOptions

_DOCINFO_KEYS = ("/Title", "/Author", "/Subject", "/Keywords")


class PikePdfCompressor(BasePdfCompressor):
    """Compresses PDFs through qpdf (pikepdf)."""

    engine = "pikepdf"

    def _compress(self, pdf_bytes: bytes, options: CompressionOptions) -> bytes:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            if options.remove_metadata:
                self._clear_metadata(pdf)
            if options.remove_annotations:
                for page in pdf.pages:
                    if "/Annots" in page.obj:
                        del page.obj["/Annots"]
            if options.compress_images:
                replaced = self._recompress_images(pdf, options)
                Log.debug(f"Recompressed {replaced} images")
            if options.optimize_structure:
                pdf.remove_unreferenced_resources()

            out = io.BytesIO()
            pdf.save(
                out,
                compress_streams=True,
                object_stream_mode=(
                    ObjectStreamMode.generate
                    if options.optimize_structure
                    else ObjectStreamMode.preserve
                ),
            )
            return out.getvalue()

    def _clear_metadata(self, pdf: pikepdf.Pdf) -> None:
        for key in _DOCINFO_KEYS:
            if key in pdf.docinfo:
                del pdf.docinfo[key]
        if "/Metadata" in pdf.Root:
            del pdf.Root["/Metadata"]

    def _recompress_images(self, pdf: pikepdf.Pdf, options: CompressionOptions) -> int:
        seen: set[tuple[int, int]] = set()
        replaced = 0
        for page in pdf.pages:
            for name, raw_image in page.images.items():
                if raw_image.objgen in seen or "/SMask" in raw_image:
                    continue
                seen.add(raw_image.objgen)
                try:
                    original_length = len(raw_image.read_raw_bytes())
                    result = recompress_image(
                        PdfImage(raw_image).as_pil_image(),
                        quality=options.image_quality,
                        max_width=options.max_image_width,
                        max_height=options.max_image_height,
                    )
                    if len(result.data) >= original_length:
                        continue
                    raw_image.write(result.data, filter=Name.DCTDecode)
                    raw_image.Width = result.width
                    raw_image.Height = result.height
                    raw_image.ColorSpace = Name.DeviceGray if result.grayscale else Name.DeviceRGB
                    raw_image.BitsPerComponent = 8
                    for key in ("/DecodeParms", "/Decode", "/Mask"):
                        if key in raw_image:
                            del raw_image[key]
                    replaced += 1
                except Exception as exc:
                    Log.warning(f"Image {name} recompression skipped: {exc}")
        return replaced
