"""
window_placer.py
----------------
Chooses the vertical offset of a fixed-height viewing window that best
frames the detected faces in an image.

The window is one third of the image height. Every integer offset is
scored by summing a per-face contribution (how much of the face the window
shows, plus a bonus when the face sits centered in the window) and the
first offset with the highest score wins.

Results:
- an ``int`` pixel offset (the top of the winning window), or
- ``CENTER_PLACEMENT`` ("50%") when no window scores above zero.
"""

import math
from typing import NamedTuple, Optional, Sequence, Union

# ---------------------------------------------------------
# CONFIG
# ---------------------------------------------------------

# Window height used when the image height is unknown (0 / None)
FALLBACK_WINDOW_SIZE = 400

# Fraction of the image height covered by the window
WINDOW_FRACTION = 3

# Returned when nothing beats the zero baseline
CENTER_PLACEMENT = "50%"


class FaceBox(NamedTuple):
    """Axis-aligned face rectangle in image pixels: (x, y, width, height)."""

    x: int
    y: int
    width: int
    height: int

    @property
    def top(self):
        return self.y

    @property
    def bottom(self):
        return self.y + self.height


Placement = Union[int, str]


# ---------------------------------------------------------
# Scoring
# ---------------------------------------------------------

def window_size(image_height: Optional[float]) -> float:
    """Height of the framing window for an image of `image_height` pixels."""
    if not image_height:
        return FALLBACK_WINDOW_SIZE
    return image_height / WINDOW_FRACTION


def face_score(face: FaceBox, top: float, bottom: float, size: float) -> float:
    """
    Contribution of a single face to the window [top, bottom).

    Args:
        face: detected face box
        top, bottom: window edges in image pixels
        size: window height (bottom - top)

    Returns:
        float score; faces outside the window contribute 0
    """
    face_top = face.top
    face_bottom = face.bottom
    h = face.height

    if face_bottom < top:
        # above the window
        return 0.0
    if face_top > bottom:
        # below the window
        return 0.0

    if face_top > top and face_bottom < bottom:
        # inside: full height plus a bonus for equal margins above and below
        centeredness = abs((bottom - face_bottom) - (face_top - top)) + 1
        return h + h / centeredness

    if face_top < top and face_bottom > bottom:
        # face taller than the window
        centeredness = abs((face_bottom - bottom) - (top - face_top)) + 1
        return size + h / centeredness

    if face_top < top:
        # partially off the top
        return face_bottom - top

    # partially off the bottom, or level with an edge of the window
    return bottom - face_bottom


def window_score(faces: Sequence[FaceBox], top: float, size: float) -> float:
    """Sum of face contributions for the window starting at `top`."""
    bottom = top + size
    return sum(face_score(face, top, bottom, size) for face in faces)


# ---------------------------------------------------------
# Search
# ---------------------------------------------------------

def place_window(faces: Sequence[FaceBox], image_height: Optional[float]) -> Placement:
    """
    Find the window offset that best frames `faces`.

    Scans every integer top in [0, image_height - size). Ties keep the
    earliest offset. A zero, negative or missing `image_height` leaves the
    scan empty, which yields CENTER_PLACEMENT.
    """
    size = window_size(image_height)
    limit = (image_height or 0) - size

    best_top = None
    best_score = 0.0

    for top in range(max(0, math.ceil(limit))):
        score = window_score(faces, top, size)
        if score > best_score:
            best_score = score
            best_top = top

    if best_top is None:
        return CENTER_PLACEMENT
    return best_top


def placement_to_css(placement: Placement) -> str:
    """Render a placement as a CSS `top` value ("50%" or "-{top}px")."""
    if isinstance(placement, str):
        return placement
    return f"-{placement}px"
