import io
from dataclasses import dataclass

from PIL import Image


@dataclass(frozen=True)
class RecompressedImage:
    """JPEG re-encoding of an embedded PDF image."""

    data: bytes
    width: int
    height: int
    grayscale: bool


def recompress_image(
    image: Image.Image,
    *,
    quality: int,
    max_width: int,
    max_height: int,
) -> RecompressedImage:
    """Downscale to fit max_width x max_height (aspect kept) and re-encode as JPEG."""
    if image.width > max_width or image.height > max_height:
        image = image.copy()
        image.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality, optimize=True)
    return RecompressedImage(
        data=buf.getvalue(),
        width=image.width,
        height=image.height,
        grayscale=image.mode == "L",
    )


def recompress_image_bytes(
    image_bytes: bytes,
    *,
    quality: int,
    max_width: int,
    max_height: int,
) -> RecompressedImage:
    with Image.open(io.BytesIO(image_bytes)) as image:
        image.load()
        return recompress_image(
            image, quality=quality, max_width=max_width, max_height=max_height
        )
