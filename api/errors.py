"""
errors.py
---------
Exceptions raised by the upload pipeline.

Hierarchy:
    UploadError
    ├── InvalidFileTypeError : MIME type not in the allowlist
    ├── InvalidImageError : file cannot be read as an image
    ├── ImageTooSmallError : image below the minimum dimensions
    └── DetectionError : face detector unavailable or failed

The message of each error is shown to the user on the error page.
"""


class UploadError(Exception):
    """Base class for all upload pipeline failures."""
    pass


class InvalidFileTypeError(UploadError):
    pass


class InvalidImageError(UploadError):
    pass


class ImageTooSmallError(UploadError):
    pass


class DetectionError(UploadError):
    """Face detection could not run on the image."""
    pass
