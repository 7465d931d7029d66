import os
import tempfile
import unittest
from unittest.mock import patch

from PIL import Image

from api import pipeline
from api.config import AppConfig
from api.errors import ImageTooSmallError, InvalidFileTypeError, InvalidImageError
from framing.window_placer import CENTER_PLACEMENT, FaceBox


def _write_image(path, size, fmt="PNG"):
    Image.new("RGB", size, (120, 130, 140)).save(path, format=fmt)


class TestUploadPipeline(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.config = AppConfig(
            upload_dir=os.path.join(self.tmp, "uploads"),
            image_dir=os.path.join(self.tmp, "images"),
        )
        os.makedirs(self.config.upload_dir)
        os.makedirs(self.config.image_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def _context(self, size=(1920, 1080), mimetype="image/png", fmt="PNG"):
        src = os.path.join(self.config.upload_dir, "abc123")
        _write_image(src, size, fmt)
        return pipeline.build_context("abc123", mimetype, src, self.config)

    def test_build_context_appends_extension_for_mimetype(self):
        ctx = pipeline.build_context("abc123", "image/jpeg", "/tmp/abc123", self.config)
        self.assertEqual(ctx.filename, "abc123.jpg")
        self.assertEqual(ctx.dst_path, os.path.join(self.config.image_dir, "abc123.jpg"))
        self.assertEqual(ctx.placement, CENTER_PLACEMENT)

    def test_rejects_unsupported_mimetype_before_touching_file(self):
        ctx = pipeline.build_context("abc123", "text/plain", "/does/not/exist", self.config)
        with patch("api.pipeline.inspect_image") as inspect_mock:
            with self.assertRaises(InvalidFileTypeError) as raised:
                pipeline.run_pipeline(ctx, self.config)
        inspect_mock.assert_not_called()
        self.assertIn("please upload an image", str(raised.exception))

    def test_rejects_small_image_and_skips_later_steps(self):
        ctx = self._context(size=(640, 480))
        with patch("api.pipeline.detect_faces") as detect_mock:
            with self.assertRaises(ImageTooSmallError) as raised:
                pipeline.run_pipeline(ctx, self.config)
        detect_mock.assert_not_called()
        self.assertEqual(str(raised.exception), "Image must be at least 960 x 300 pixels")
        self.assertFalse(os.path.exists(ctx.dst_path))

    def test_rejects_file_that_is_not_an_image(self):
        src = os.path.join(self.config.upload_dir, "junk")
        with open(src, "wb") as f:
            f.write(b"not an image at all")
        ctx = pipeline.build_context("junk", "image/png", src, self.config)
        with self.assertRaises(InvalidImageError):
            pipeline.run_pipeline(ctx, self.config)

    def test_scores_with_resized_height(self):
        # 1920x1800 -> 960x900, window 300
        ctx = self._context(size=(1920, 1800))
        faces = [FaceBox(400, 400, 100, 100)]
        with patch("api.pipeline.detect_faces", return_value=faces) as detect_mock:
            result = pipeline.run_pipeline(ctx, self.config)

        detect_mock.assert_called_once_with(ctx.dst_path)
        self.assertEqual((result.width, result.height), (960, 900))
        self.assertEqual(result.faces, tuple(faces))
        self.assertEqual(result.placement, 300)
        with Image.open(result.dst_path) as img:
            self.assertEqual(img.size, (960, 900))

    def test_no_faces_gives_center_placement(self):
        ctx = self._context(size=(960, 600), mimetype="image/jpeg", fmt="JPEG")
        with patch("api.pipeline.detect_faces", return_value=[]):
            result = pipeline.run_pipeline(ctx, self.config)
        self.assertEqual(result.placement, CENTER_PLACEMENT)
        self.assertTrue(result.dst_path.endswith(".jpg"))

    def test_steps_return_new_context(self):
        ctx = self._context(size=(1920, 1080))
        resized = pipeline.resize(ctx, self.config)
        self.assertIsNot(resized, ctx)
        self.assertEqual(ctx.height, 0)
        self.assertEqual(resized.height, 540)

    def test_custom_steps_run_in_order(self):
        calls = []

        def first(ctx, config):
            calls.append("first")
            return ctx

        def second(ctx, config):
            calls.append("second")
            return ctx

        ctx = pipeline.build_context("abc123", "image/png", "/tmp/abc123", self.config)
        pipeline.run_pipeline(ctx, self.config, steps=[first, second])
        self.assertEqual(calls, ["first", "second"])


if __name__ == "__main__":
    unittest.main()
