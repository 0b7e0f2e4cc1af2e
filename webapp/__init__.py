# webapp/__init__.py

from flask import Flask
from flask_cors import CORS

from db import init_db
from .config import Config
from .routes.meta import meta_bp
from .routes.games import games_bp
from .routes.pool import pool_bp
from .routes.analysis import analysis_bp


def create_app() -> Flask:
    app = Flask("webapp")

    # Core config
    app.config.from_object(Config)

    # CORS: allow the dev frontend to hit /api/*
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # Init DB (tables etc.)
    init_db()

    # Register blueprints
    app.register_blueprint(meta_bp)
    app.register_blueprint(games_bp)
    app.register_blueprint(pool_bp)
    app.register_blueprint(analysis_bp)

    @app.route("/api/health")
    def health():
        return {"ok": True}

    return app
