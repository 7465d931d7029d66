import logging
import os

from flask import Flask, current_app, redirect, render_template, request, send_from_directory, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from api.config import AppConfig
from api.errors import UploadError
from api.pipeline import build_context, new_upload_name, run_pipeline
from framing.window_placer import placement_to_css

logger = logging.getLogger(__name__)


def create_app(config: AppConfig = None) -> Flask:
    """Build the Flask app around an immutable `AppConfig`."""
    config = config or AppConfig()

    os.makedirs(config.upload_dir, exist_ok=True)
    os.makedirs(config.image_dir, exist_ok=True)

    app = Flask(__name__)
    app.config["FACEFRAME"] = config
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes

    # HTTP routes

    @app.route("/", methods=["GET"])
    def home():
        # Upload form
        return render_template("index.html")

    @app.route("/upload", methods=["POST"])
    def upload():
        cfg = current_app.config["FACEFRAME"]

        # Validate upload presence
        if "file" not in request.files:
            return redirect(url_for("home"))

        file = request.files["file"]
        if file.filename == "":
            return redirect(url_for("home"))

        # Store the raw upload under a generated name; the resized copy the
        # result page shows is written to the static images directory.
        upload_name = new_upload_name()
        src_path = os.path.join(cfg.upload_dir, upload_name)
        file.save(src_path)

        ctx = build_context(upload_name, file.mimetype, src_path, cfg)

        try:
            ctx = run_pipeline(ctx, cfg)
        except UploadError as e:
            logger.warning("Rejected upload %s: %s", file.filename, e)
            return render_template("error.html", message=str(e)), 400
        finally:
            if os.path.exists(src_path):
                os.remove(src_path)

        return render_template(
            "result.html",
            filename=ctx.filename,
            faces=ctx.faces,
            min_top=placement_to_css(ctx.placement),
        )

    @app.route("/images/<path:filename>", methods=["GET"])
    def image(filename):
        # Resized uploads live in config.image_dir, which may sit outside static/
        image_dir = os.path.abspath(current_app.config["FACEFRAME"].image_dir)
        return send_from_directory(image_dir, filename)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        limit_mb = current_app.config["FACEFRAME"].max_upload_bytes // (1024 * 1024)
        return render_template(
            "error.html",
            message=f"File too large - uploads are limited to {limit_mb} MB.",
        ), 413

    return app


# Application entrypoint

def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    config = AppConfig.from_env()
    app = create_app(config)

    logger.info("Listening on port %d", config.port)
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
