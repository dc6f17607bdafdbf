"""Image preparation for slip OCR.

Slips are screenshots or photos of banking apps. They are scaled down to a
bounded width, turned into a high-contrast grayscale image, and the bottom
band (where amount and memo usually sit) is cut out for the first OCR pass.
"""

from io import BytesIO
import logging
from typing import cast

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import SlipImageError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 960
DEFAULT_BOTTOM_RATIO = 0.52
DEFAULT_MIN_CROP_HEIGHT = 140

CONTRAST = 1.75
BIAS = 8
WHITE_THRESHOLD = 170
BLACK_THRESHOLD = 75


def _build_contrast_table() -> list[int]:
    table = []
    for gray in range(256):
        enhanced = (gray - 128) * CONTRAST + 128 + BIAS
        if enhanced > WHITE_THRESHOLD:
            enhanced = 255
        elif enhanced < BLACK_THRESHOLD:
            enhanced = 0
        table.append(min(255, max(0, int(enhanced + 0.5))))
    return table


CONTRAST_TABLE = _build_contrast_table()


def load_image(image_bytes: bytes) -> Image.Image:
    """Decode uploaded bytes into an upright RGB image.

    Raises:
        SlipImageError: If the bytes are empty or not a supported image
    """
    if not image_bytes:
        raise SlipImageError("Empty image file")
    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise SlipImageError(f"Unsupported image format: {e}") from e

    img = cast(Image.Image, ImageOps.exif_transpose(img))
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def fit_to_width(image: Image.Image, max_width: int = DEFAULT_MAX_WIDTH) -> Image.Image:
    """Scale an image down so its width is at most ``max_width``.

    Aspect ratio is preserved and images are never scaled up.
    """
    width, height = image.size
    ratio = max_width / width if width > max_width else 1
    new_size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
    if new_size == image.size:
        return image.copy()

    logger.debug(f"Resizing image from {image.size} to {new_size}")
    return image.resize(new_size, Image.Resampling.LANCZOS)


def enhance_for_ocr(image: Image.Image) -> Image.Image:
    """Grayscale, stretch contrast and clip near-white/near-black pixels."""
    gray = image.convert("L")
    return gray.point(CONTRAST_TABLE)


def crop_bottom(
    image: Image.Image,
    ratio: float = DEFAULT_BOTTOM_RATIO,
    min_height: int = DEFAULT_MIN_CROP_HEIGHT,
) -> Image.Image | None:
    """Cut the bottom band of an image.

    The band is ``ratio`` of the height but never shorter than ``min_height``
    (nor taller than the image).

    Returns:
        The cropped image, or None if the image has no area
    """
    width, height = image.size
    if not width or not height:
        return None

    crop_height = min(height, max(min_height, round(height * ratio)))
    top = height - crop_height
    return image.crop((0, top, width, height))


def prepare_slip_image(image: Image.Image, max_width: int = DEFAULT_MAX_WIDTH) -> Image.Image:
    """Resize and enhance a decoded slip, ready for the full-image pass."""
    return enhance_for_ocr(fit_to_width(image, max_width))
