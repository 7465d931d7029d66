"""
face_detection.py
-----------------
Detects face regions in an image using an OpenCV Haar cascade.

Returns `FaceBox` records (x, y, width, height) in the pixel coordinates of
the image that was passed in, which is what the window placement expects.
"""

import logging
from typing import List, Union

import cv2
import numpy as np
from PIL import Image

from api.errors import DetectionError
from framing.window_placer import FaceBox

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# CONFIG
# ---------------------------------------------------------

CASCADE_FILE = "haarcascade_frontalface_alt.xml"

# detectMultiScale tuning: a fine image pyramid and a lenient neighbour
# count, so smaller or slightly turned faces in group photos still register.
SCALE_FACTOR = 1.1
MIN_NEIGHBORS = 2
MIN_SIZE = (30, 30)

_face_cascade = None


def _load_cascade():
    """Load the frontal face cascade once per process."""
    global _face_cascade

    if _face_cascade is None:
        path = cv2.data.haarcascades + CASCADE_FILE
        cascade = cv2.CascadeClassifier(path)
        if cascade.empty():
            raise DetectionError(f"Face detector could not be loaded from {path}")
        _face_cascade = cascade
        logger.info("Loaded face cascade %s", CASCADE_FILE)

    return _face_cascade


def to_face_boxes(rects) -> List[FaceBox]:
    """Convert detectMultiScale output (N x 4 array or tuple) to FaceBox list."""
    return [FaceBox(int(x), int(y), int(w), int(h)) for x, y, w, h in rects]


def detect_faces(image: Union[str, Image.Image]) -> List[FaceBox]:
    """
    Detect faces in an image path or PIL image.

    Returns an empty list when no faces are found.
    """
    if isinstance(image, str):
        try:
            with Image.open(image) as img:
                gray = np.asarray(img.convert("L"))
        except OSError as e:
            raise DetectionError("Could not read the image for face detection.") from e
    else:
        gray = np.asarray(image.convert("L"))

    cascade = _load_cascade()

    try:
        # Cascades operate on single-channel images; equalizing helps with
        # dim or low-contrast uploads.
        gray = cv2.equalizeHist(gray)

        faces = cascade.detectMultiScale(
            gray,
            scaleFactor=SCALE_FACTOR,
            minNeighbors=MIN_NEIGHBORS,
            minSize=MIN_SIZE,
        )
    except cv2.error as e:
        raise DetectionError("Face detection failed on the uploaded image.") from e

    boxes = to_face_boxes(faces)
    logger.info("Detected %d face(s)", len(boxes))
    return boxes
