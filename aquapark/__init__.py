# --- aquapark/__init__.py ---
import logging
import os
from flask import Flask, jsonify
from .config import Config
from .extensions import db, jwt, cors, migrate

log = logging.getLogger(__name__)

def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    config_class.init_app(app)

    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024
    os.makedirs(app.instance_path, exist_ok=True)

    from .utils.log import setup_json_logging, init_request_id
    setup_json_logging(app.config.get("LOG_LEVEL"))
    init_request_id(app)

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    migrate.init_app(app, db)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .catalog import bp as catalog_bp; app.register_blueprint(catalog_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401  (register tables)
        db.create_all()

    log.info("app ready: %s", sorted(app.blueprints.keys()))
    return app
