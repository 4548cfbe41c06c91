# caltrail/__init__.py

import os
import logging
from datetime import datetime

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

# Environment variables (.env)
load_dotenv()

# Shared extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()

DEFAULT_USDA_API_URL = "https://api.nal.usda.gov/fdc/v1"


def _check_secret_key(secret: str) -> str:
    """SECRET_KEY signs bearer tokens; require at least 32 bytes."""
    if not secret or len(secret) < 32:
        raise RuntimeError(
            "SECRET_KEY is missing or too short. "
            "Add a strong key to .env, for example:\n"
            "  SECRET_KEY="
            "pZcN3mT0f3Qh7JtBv0r6m2kF9yV1wX8qZ4s3a6g9h2j5l8p1r0t2v4x6z8b0c2"
        )
    return secret


def _configure_logging(app: Flask) -> None:
    level = logging.DEBUG if app.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def create_app(config: dict | None = None) -> Flask:
    """Application factory."""
    app = Flask(__name__, instance_relative_config=True)

    os.makedirs(app.instance_path, exist_ok=True)

    db_path = os.path.join(app.instance_path, "caltrail.db")
    default_db_uri = f"sqlite:///{db_path}"

    # -----------------------------
    # Base config
    # -----------------------------
    app.config.from_mapping(
        SECRET_KEY=os.getenv("SECRET_KEY", ""),
        SQLALCHEMY_DATABASE_URI=os.getenv("SQLALCHEMY_DATABASE_URI", default_db_uri),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JSON_SORT_KEYS=False,
        TOKEN_MAX_AGE=int(os.getenv("TOKEN_MAX_AGE", 7 * 24 * 60 * 60)),
        USDA_API_KEY=os.getenv("USDA_API_KEY", ""),
        USDA_API_URL=os.getenv("USDA_API_URL", DEFAULT_USDA_API_URL),
        USDA_TIMEOUT=float(os.getenv("USDA_TIMEOUT", 10)),
        MAX_CONTENT_LENGTH=10 * 1024 * 1024,
    )
    if config:
        app.config.update(config)
    _check_secret_key(app.config["SECRET_KEY"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    _configure_logging(app)

    # Models (imported so Flask-Migrate sees them) and auth loaders
    from caltrail.models import user, food, meal, comment  # noqa: F401
    from caltrail.services.auth import register_auth
    register_auth(login_manager)

    from caltrail.services.store import Store
    app.extensions["caltrail.store"] = Store(db)

    # ---------------------------------------------------------
    # BLUEPRINTS
    # ---------------------------------------------------------
    from caltrail.routes.auth import auth_routes
    from caltrail.routes.users import users_bp
    from caltrail.routes.foods import foods_bp
    from caltrail.routes.meals import meals_bp
    from caltrail.routes.comments import comments_bp

    app.register_blueprint(auth_routes)
    app.register_blueprint(users_bp)
    app.register_blueprint(foods_bp)
    app.register_blueprint(meals_bp)
    app.register_blueprint(comments_bp)

    from caltrail.cli import register_cli
    register_cli(app)

    # ---------------------------------------------------------
    # Healthcheck, request log and JSON errors
    # ---------------------------------------------------------
    @app.get("/health")
    def _health():
        return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}, 200

    @app.after_request
    def _log_request(response):
        app.logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    from caltrail.errors import register_error_handlers
    register_error_handlers(app)

    @app.errorhandler(400)
    @app.errorhandler(401)
    @app.errorhandler(403)
    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(409)
    @app.errorhandler(413)
    @app.errorhandler(500)
    def _http_errors(err):
        if request.is_json or request.path.startswith("/api/"):
            code = getattr(err, "code", 500) or 500
            return jsonify(error="HttpError", message=str(err)), code
        return err

    return app
