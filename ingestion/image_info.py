# ingestion.image_info
# --------------------
# Pillow helpers used by the upload pipeline before face detection:
#
# - `inspect_image` : read the pixel dimensions of an uploaded file
# - `resize_to_width` : scale an image to a fixed width, keep aspect ratio
#
# The height returned by `resize_to_width` is the height the window
# placement is scored against, so callers must carry it forward rather
# than re-deriving it from the raw upload.

import logging
import os
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from api.errors import InvalidImageError

logger = logging.getLogger(__name__)

# Pillow format names keyed by the extensions the service writes
FORMATS_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
}


def _open(path: str) -> Image.Image:
    try:
        return Image.open(path)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Invalid file - could not read the uploaded image.") from e


def inspect_image(path: str) -> Tuple[int, int]:
    """
    Return (width, height) of the image at `path`.

    Only the header is read; raises InvalidImageError if Pillow cannot
    identify the file.
    """
    with _open(path) as img:
        return img.size


def resize_to_width(src: str, dst: str, width: int) -> Tuple[int, int]:
    """
    Resize `src` to `width` pixels wide and save it to `dst`.

    The output format follows the extension of `dst`. Height is scaled
    proportionally and rounded to the nearest pixel (minimum 1).

    Returns:
        (width, height) of the written image
    """
    ext = os.path.splitext(dst)[1].lower()
    fmt = FORMATS_BY_EXTENSION.get(ext)

    with _open(src) as img:
        src_w, src_h = img.size
        height = max(1, int(round(src_h * width / float(src_w))))

        # Pixel data is only decoded here; truncated files fail at this point
        try:
            # JPEG cannot hold alpha or palette data
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            resized = img.resize((width, height), Image.LANCZOS)
        except OSError as e:
            raise InvalidImageError("Invalid file - could not read the uploaded image.") from e
        resized.save(dst, format=fmt)

    logger.debug("Resized %s (%dx%d) -> %s (%dx%d)", src, src_w, src_h, dst, width, height)
    return resized.size
