"""
config.py
---------
Service configuration. Built once at process start with
`AppConfig.from_env()` and handed to `create_app`; request handlers read it
from `app.config["FACEFRAME"]`.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

# ---------------------------------------------------------
# CONFIG
# ---------------------------------------------------------

UPLOAD_DIR = "uploads"
IMAGE_DIR = "images"
HOST = "0.0.0.0"
PORT = 8080

# MIME type -> file extension for accepted uploads
ALLOWED_TYPES = MappingProxyType({
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
})

MIN_WIDTH = 960
MIN_HEIGHT = 300
RESIZE_WIDTH = 960
MAX_UPLOAD_BYTES = 16 * 1024 * 1024


def _env_int(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    upload_dir: str = UPLOAD_DIR
    image_dir: str = IMAGE_DIR
    host: str = HOST
    port: int = PORT
    allowed_types: Mapping[str, str] = field(default_factory=lambda: ALLOWED_TYPES)
    min_width: int = MIN_WIDTH
    min_height: int = MIN_HEIGHT
    resize_width: int = RESIZE_WIDTH
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    debug: bool = False

    @classmethod
    def from_env(cls):
        """Read overrides from FACEFRAME_* environment variables."""
        return cls(
            upload_dir=os.environ.get("FACEFRAME_UPLOAD_DIR", UPLOAD_DIR),
            image_dir=os.environ.get("FACEFRAME_IMAGE_DIR", IMAGE_DIR),
            host=os.environ.get("FACEFRAME_HOST", HOST),
            port=_env_int("FACEFRAME_PORT", PORT),
            min_width=_env_int("FACEFRAME_MIN_WIDTH", MIN_WIDTH),
            min_height=_env_int("FACEFRAME_MIN_HEIGHT", MIN_HEIGHT),
            resize_width=_env_int("FACEFRAME_RESIZE_WIDTH", RESIZE_WIDTH),
            max_upload_bytes=_env_int("FACEFRAME_MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES),
            debug=_env_bool("FACEFRAME_DEBUG"),
        )

    def extension_for(self, mimetype):
        """File extension for an accepted MIME type, or None."""
        return self.allowed_types.get(mimetype)
