# orchestration/watermark.py

import base64
import binascii
import io
import logging
import re

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

DEFAULT_WATERMARK_TEXT = "boldmaker.com"
MIN_FONT_SIZE = 48
WATERMARK_FILL = (255, 255, 255, 128)  # 50% white

FONT_PATHS = [
    # Linux
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
    # macOS
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    # Windows
    "C:\\Windows\\Fonts\\arialbd.ttf",
]

_DATA_URI_RE = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,(?P<data>.+)$", re.DOTALL)


def decode_data_uri(data_uri: str) -> bytes:
    if not isinstance(data_uri, str):
        raise ValueError("imageUrl must be a base64 image data URI")
    match = _DATA_URI_RE.match(data_uri)
    if not match:
        raise ValueError("imageUrl must be a base64 image data URI")
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("imageUrl contains invalid base64 data") from e


def download_filename(name: str) -> str:
    """Filesystem-safe PNG name, e.g. 'Nebula Pop!' -> 'nebula_pop_.png'."""
    if not isinstance(name, str):
        name = ""
    stem = re.sub(r"[^a-z0-9]", "_", name.strip(), flags=re.IGNORECASE).lower()
    return f"{stem or 'candy'}.png"


def get_font(size: int):
    for font_path in FONT_PATHS:
        try:
            return ImageFont.truetype(font_path, size)
        except (OSError, IOError):
            continue

    logger.warning("Could not load any system fonts, using default")
    return ImageFont.load_default(size=size)


def apply_watermark(image_bytes: bytes, text: str = DEFAULT_WATERMARK_TEXT) -> bytes:
    """Stamp text across the centre of the image and return it as PNG bytes."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as source:
            base = source.convert("RGBA")
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError("imageUrl does not contain a readable image") from e

    font_size = max(MIN_FONT_SIZE, int(base.width / 12))
    font = get_font(font_size)

    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    draw.text(
        (base.width / 2, base.height / 2),
        text,
        font=font,
        fill=WATERMARK_FILL,
        anchor="mm",
    )
    watermarked = Image.alpha_composite(base, overlay)

    output = io.BytesIO()
    watermarked.save(output, format="PNG")
    return output.getvalue()


def watermark_data_uri(data_uri: str, text: str = DEFAULT_WATERMARK_TEXT) -> bytes:
    return apply_watermark(decode_data_uri(data_uri), text)
