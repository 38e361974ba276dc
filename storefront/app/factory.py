from __future__ import annotations

import logging
from flask import Flask, g, jsonify, redirect, render_template, request, url_for
from werkzeug.exceptions import HTTPException

from storefront.app.config import Config
from storefront.app.extensions import db, migrate, cors, cache, csrf
from storefront.app.common.errors import ApiError
from storefront.app.common.i18n import translate
from storefront.app.common.request_context import attach_request_id, init_request_id
from storefront.app.common.templating import init_templating
from storefront.app.api.register import register_api_blueprints
from storefront.app.cli import cli_bp
from storefront.clients.base import GENERIC_ERROR
from storefront.modules.basket.routes import bp as basket_bp
from storefront.modules.catalog.routes import bp as catalog_bp


def _wants_json() -> bool:
    return request.path == "/api" or request.path.startswith("/api/")


def _error_payload(code: str, message: str, details: dict | None = None) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "request_id": getattr(g, "request_id", None),
        }
    }


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})
    cache.init_app(app)
    csrf.init_app(app)
    init_templating(app)

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(attach_request_id)

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    # JSON endpoints below /api
    register_api_blueprints(app)

    # HTML pages
    app.register_blueprint(catalog_bp)
    app.register_blueprint(basket_bp)

    # CLI (flask seed, flask email-payment, flask cache-clear)
    app.register_blueprint(cli_bp)

    @app.get("/")
    def index():
        return redirect(url_for("catalog.lists"))

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if _wants_json():
            return jsonify(_error_payload("http_error", err.description, {"name": err.name})), err.code or 500
        return render_template("error.html", code=err.code, message=err.description), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        if _wants_json():
            return jsonify(_error_payload("internal_error", "Internal server error")), 500
        return render_template("error.html", code=500, message=translate("client", GENERIC_ERROR)), 500

    return app
