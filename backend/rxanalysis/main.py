"""
Prescription analysis backend – Flask Application Factory
Wires configuration, persistence, the extraction provider and the
prescription API.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from rxanalysis.config import Config
from rxanalysis.database import db
from rxanalysis.errors import PipelineError
from rxanalysis.middleware.audit_logger import audit_after_request
from rxanalysis.routes.prescriptions import prescriptions_bp
from rxanalysis.services.providers.base_provider import ExtractionProvider
from rxanalysis.services.providers.selection import EXTENSION_KEY, build_provider

logger = logging.getLogger("rxanalysis")

limiter = Limiter(key_func=get_remote_address, default_limits=[Config.RATE_LIMIT_DEFAULT])


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PipelineError)
    def handle_pipeline_error(err: PipelineError):
        if err.kind == "validation":
            logger.info("Rejected request: %s", err.message)
        elif err.kind == "not_found":
            logger.info("Not found: %s", err.message)
        else:
            logger.error("%s failure: %s", err.kind, err.message)
        return jsonify(err.to_dict()), err.status_code


def create_app(config_overrides: Optional[dict] = None,
               provider: Optional[ExtractionProvider] = None) -> Flask:
    Config.validate()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = Config.DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["DEBUG"] = Config.APP_ENV == "development"
    app.config["OPENAI_API_KEY"] = Config.OPENAI_API_KEY
    app.config["USE_OPENAI_API"] = Config.USE_OPENAI_API
    app.config["OPENAI_MODEL"] = Config.OPENAI_MODEL
    app.config["OPENAI_MAX_TOKENS"] = Config.OPENAI_MAX_TOKENS
    app.config["OPENAI_TIMEOUT_S"] = Config.OPENAI_TIMEOUT_S
    app.config["MAX_IMAGE_BYTES"] = Config.MAX_IMAGE_BYTES
    if config_overrides:
        app.config.update(config_overrides)

    # Provider mode is fixed for the lifetime of this app
    app.extensions[EXTENSION_KEY] = provider or build_provider(app.config)

    # Extensions
    CORS(app, resources={r"/api/*": {"origins": "*"}})
    limiter.init_app(app)
    db.init_app(app)

    # Create tables if they don't already exist
    with app.app_context():
        from rxanalysis.models import models as _models  # noqa: F401 – ensure all models are registered
        db.create_all()

    # Middleware
    app.after_request(audit_after_request)

    # Blueprints
    app.register_blueprint(prescriptions_bp, url_prefix="/api/prescriptions")
    _register_error_handlers(app)

    # Health check
    @app.route("/api/health")
    def health():
        return {
            "status": "ok",
            "service": "rxanalysis",
            "mode": app.extensions[EXTENSION_KEY].mode,
        }

    return app
