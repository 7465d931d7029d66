"""
pipeline.py
-----------
Upload processing pipeline: validate -> inspect -> resize -> detect -> score.

Each step takes an `UploadContext` and returns a new one with its results
filled in. A step signals failure by raising an `UploadError`, which stops
the pipeline; the Flask route turns it into the error page.

The image height used for scoring is the height written by the resize step
and is carried in the context, never re-read from the raw upload.
"""

import logging
import os
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, List, Sequence, Tuple

from api.config import AppConfig
from api.errors import ImageTooSmallError, InvalidFileTypeError
from detection.face_detection import detect_faces
from framing.window_placer import CENTER_PLACEMENT, FaceBox, Placement, place_window
from ingestion.image_info import inspect_image, resize_to_width

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadContext:
    filename: str
    src_path: str
    dst_path: str
    mimetype: str
    width: int = 0
    height: int = 0
    faces: Tuple[FaceBox, ...] = field(default_factory=tuple)
    placement: Placement = CENTER_PLACEMENT


Step = Callable[[UploadContext, AppConfig], UploadContext]


def build_context(upload_name: str, mimetype: str, src_path: str, config: AppConfig) -> UploadContext:
    """
    Derive output names for a saved upload.

    The public filename is the stored upload name plus the extension that
    matches its MIME type; unknown types get no extension and are rejected
    by `check_mimetype`.
    """
    filename = upload_name + (config.extension_for(mimetype) or "")
    dst_path = os.path.join(config.image_dir, filename)
    return UploadContext(
        filename=filename,
        src_path=src_path,
        dst_path=dst_path,
        mimetype=mimetype,
    )


def new_upload_name() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------
# Steps
# ---------------------------------------------------------

def check_mimetype(ctx: UploadContext, config: AppConfig) -> UploadContext:
    if config.extension_for(ctx.mimetype) is None:
        raise InvalidFileTypeError(
            "Invalid file - please upload an image (.jpg, .png, .gif)."
        )
    return ctx


def check_dimensions(ctx: UploadContext, config: AppConfig) -> UploadContext:
    width, height = inspect_image(ctx.src_path)
    if width < config.min_width or height < config.min_height:
        raise ImageTooSmallError(
            f"Image must be at least {config.min_width} x {config.min_height} pixels"
        )
    return replace(ctx, width=width, height=height)


def resize(ctx: UploadContext, config: AppConfig) -> UploadContext:
    width, height = resize_to_width(ctx.src_path, ctx.dst_path, config.resize_width)
    return replace(ctx, width=width, height=height)


def detect(ctx: UploadContext, config: AppConfig) -> UploadContext:
    return replace(ctx, faces=tuple(detect_faces(ctx.dst_path)))


def score(ctx: UploadContext, config: AppConfig) -> UploadContext:
    return replace(ctx, placement=place_window(ctx.faces, ctx.height))


STEPS: List[Step] = [
    check_mimetype,
    check_dimensions,
    resize,
    detect,
    score,
]


def run_pipeline(ctx: UploadContext, config: AppConfig, steps: Sequence[Step] = STEPS) -> UploadContext:
    """Run `steps` in order; the first UploadError propagates to the caller."""
    for step in steps:
        logger.debug("%s: %s", ctx.filename, step.__name__)
        ctx = step(ctx, config)

    logger.info(
        "%s: %d face(s), placement %s", ctx.filename, len(ctx.faces), ctx.placement
    )
    return ctx
