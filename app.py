"""Flask application factory for the civic complaint desk."""
import os
from typing import Optional, Type

from flask import Flask, jsonify, render_template, request
from dotenv import load_dotenv

from config import BaseConfig, DevelopmentConfig, ProductionConfig, TestingConfig
from extensions import csrf, geocoder, media_store, workspaces
from utils.logger import init_logging
from utils.security import apply_security_headers

CONFIGS = {
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
}


def resolve_config(config_name: Optional[str] = None) -> Type[BaseConfig]:
    key = config_name or os.getenv("FLASK_CONFIG") or os.getenv("FLASK_ENV") or "production"
    return CONFIGS.get(key.lower(), ProductionConfig)


def _wants_json() -> bool:
    return request.path.endswith("/state") or request.accept_mimetypes.best == "application/json"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(error):
        app.logger.warning("not_found", extra={"path": request.path, "method": request.method})
        if _wants_json():
            return jsonify(error="not_found"), 404
        return render_template("errors/404.html", page_title="Not found"), 404

    @app.errorhandler(413)
    def payload_too_large(error):
        app.logger.warning("payload_too_large", extra={"path": request.path, "length": request.content_length})
        return render_template("errors/413.html", page_title="Upload too large"), 413

    @app.errorhandler(500)
    def server_error(error):
        app.logger.exception("server_error", extra={"path": request.path})
        if _wants_json():
            return jsonify(error="server_error"), 500
        return render_template("errors/500.html", page_title="Something went wrong"), 500


def create_app(config_name: Optional[str] = None) -> Flask:
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    config_class = resolve_config(config_name)
    app.config.from_object(config_class())
    # instance/config.py may override anything above
    app.config.from_pyfile("config.py", silent=True)

    app.logger = init_logging(app)

    csrf.init_app(app)
    media_store.init_app(app)
    geocoder.init_app(app)
    workspaces.init_app(app, media_store)

    from routes import main_bp, complaints_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(complaints_bp)

    @app.route("/favicon.ico")
    def favicon():
        if os.path.exists(os.path.join(app.static_folder or "static", "favicon.ico")):
            return app.send_static_file("favicon.ico")
        return "", 204

    register_error_handlers(app)

    @app.after_request
    def _security_headers(response):
        return apply_security_headers(response, force_https=app.config.get("PREFERRED_URL_SCHEME") == "https")

    app.logger.info(
        "Application ready",
        extra={
            "config": config_class.__name__,
            "geocoder": geocoder.url,
            "idle_minutes": app.config.get("WORKSPACE_IDLE_MINUTES"),
        },
    )
    return app


# WSGI entry point (e.g. gunicorn app:app).
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5000)), use_reloader=False)
