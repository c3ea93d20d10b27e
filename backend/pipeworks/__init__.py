# backend/pipeworks/__init__.py
import logging

from flask import Flask, jsonify, request

from .config import Config
from .extensions import db


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)

    # Import models so metadata is complete before create_all
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.items import items_bp
    from .routes.orders import orders_bp
    from .routes.staff import staff_bp
    from .routes.attendance import attendance_bp
    from .routes.timesheets import timesheets_bp
    from .routes.dashboard import dashboard_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(timesheets_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(reports_bp)

    @app.before_request
    def reject_non_object_json():
        # Every endpoint that reads a body expects a JSON object
        if request.is_json and request.get_data(cache=True):
            body = request.get_json(silent=True)
            if body is not None and not isinstance(body, dict):
                return jsonify({"error": "Invalid JSON payload"}), 400
        return None

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
            response.headers["Access-Control-Expose-Headers"] = "Content-Disposition"
        return response

    # The store is in-memory: build the schema and default roles on every start
    from .services import staff_service

    with app.app_context():
        db.create_all()
        staff_service.ensure_default_roles()
        if app.config.get("SEED_DEMO_DATA"):
            from .seed import seed_demo_data
            created = seed_demo_data()
            app.logger.info("Seeded demo data: %s", created)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
