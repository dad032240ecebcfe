"""Local reel compositing with Pillow."""

import io
from collections.abc import Sequence

from PIL import Image, ImageOps

from photobooth_reels.domain.reels import ReelLayout

JPEG_QUALITY = 90
BACKGROUND = (255, 255, 255)


def cover_fit(image_data: bytes, size: tuple[int, int]) -> Image.Image:
    """Decode an image and crop-fill it to exactly ``size``."""
    with Image.open(io.BytesIO(image_data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
            img = _flatten_on_background(img)
        elif img.mode != "RGB":
            img = img.convert("RGB")
        return ImageOps.fit(img, size, method=Image.Resampling.LANCZOS)


def _flatten_on_background(img: Image.Image) -> Image.Image:
    """Composite transparent pixels onto the white reel background."""
    background = Image.new("RGBA", img.size, (*BACKGROUND, 255))
    return Image.alpha_composite(background, img.convert("RGBA")).convert("RGB")


def compose_reel(photos: Sequence[Image.Image], layout: ReelLayout) -> bytes:
    """Paste three fitted photos top to bottom on a white canvas and encode JPEG."""
    if len(photos) != 3:
        raise ValueError("Exactly 3 photos are required for the reel")
    canvas = Image.new("RGB", (layout.final_width, layout.final_height), BACKGROUND)
    for photo, offset in zip(photos, layout.offsets(), strict=True):
        if photo.size != layout.photo_size:
            raise ValueError(f"Photo size {photo.size} does not match the layout")
        canvas.paste(photo, offset)
    output = io.BytesIO()
    canvas.save(output, format="JPEG", quality=JPEG_QUALITY)
    return output.getvalue()
