'''Flask application factory: wires config, server-side sessions, the Database
handle, blueprints and JSON error handlers. It does not start a server; run.py,
a WSGI server or the tests call it.'''
# obra/app_factory.py
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_session import Session

from obra.db.session import Database
from obra.schemas.error_type import ErrorType
from obra.schemas.operation_result import OperationResult

load_dotenv()

# repository root (absolute)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def create_app(config_overrides: Optional[dict] = None) -> Flask:
    """Application factory."""
    app = Flask(__name__)

    # base config
    secret_key = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    if isinstance(secret_key, bytes):
        secret_key = secret_key.decode("utf-8")
    app.config["SECRET_KEY"] = secret_key

    # database (absolute path for the default sqlite file)
    default_db_url = f"sqlite:///{os.path.join(BASE_DIR, 'obra.db')}"
    app.config["DATABASE_URL"] = os.getenv("DATABASE_URL", default_db_url)
    app.config["WRITE_RETRY_ATTEMPTS"] = int(os.getenv("WRITE_RETRY_ATTEMPTS", 3))

    # demo credential, there is no user store
    app.config["DEMO_ACCOUNT"] = os.getenv("DEMO_ACCOUNT", "admin")
    app.config["DEMO_PASSWORD"] = os.getenv("DEMO_PASSWORD", "admin")

    # server-side sessions
    app.config["SESSION_TYPE"] = "filesystem"
    app.config["SESSION_PERMANENT"] = False
    app.config["SESSION_USE_SIGNER"] = True
    app.config["SESSION_KEY_PREFIX"] = "obra:"
    app.config["SESSION_FILE_DIR"] = os.getenv(
        "SESSION_FILE_DIR", os.path.join(BASE_DIR, "flask_session")
    )

    if config_overrides:
        app.config.update(config_overrides)

    os.makedirs(app.config["SESSION_FILE_DIR"], exist_ok=True)
    Session(app)

    # one Database per app; routes open a Session per request
    app.extensions["obra_db"] = Database(app.config["DATABASE_URL"])

    # blueprints
    from obra.routes.auth import auth_bp
    from obra.routes.project import project_bp
    from obra.routes.report import report_bp
    from obra.routes.tracking import tracking_bp
    from obra.routes.warehouse import warehouse_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(tracking_bp)
    app.register_blueprint(warehouse_bp)
    app.register_blueprint(report_bp)

    register_error_handlers(app)

    return app


def get_database(app: Flask) -> Database:
    return app.extensions["obra_db"]


def register_error_handlers(app):
    """JSON bodies for errors raised outside the operation envelope."""

    @app.errorhandler(404)
    def not_found(error):
        result = OperationResult(
            ok=False,
            error_type=ErrorType.NOT_FOUND,
            error_message="Resource not found",
        )
        return jsonify(result.model_dump(mode="json")), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        result = OperationResult(
            ok=False,
            error_type=ErrorType.INPUT_ERROR,
            error_message="Method not allowed",
        )
        return jsonify(result.model_dump(mode="json")), 405

    @app.errorhandler(500)
    def internal_error(error):
        result = OperationResult(
            ok=False,
            error_type=ErrorType.SYSTEM_ERROR,
            error_message="Internal server error",
        )
        return jsonify(result.model_dump(mode="json")), 500
