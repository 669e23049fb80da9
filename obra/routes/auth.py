# obra/routes/auth.py
from flask import Blueprint, current_app, session

from obra.routes.common import json_body, require_login, result_response
from obra.schemas.error_type import ErrorType
from obra.schemas.operation_result import OperationResult

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.route("/login", methods=["POST"])
def login():
    """Demo login: a single account configured through DEMO_ACCOUNT / DEMO_PASSWORD."""
    payload = json_body()
    username = str(payload.get("username", "")).strip()
    password = str(payload.get("password", ""))

    if not username or not password:
        return result_response(OperationResult(
            ok=False,
            error_type=ErrorType.INPUT_ERROR,
            error_message="username and password are required",
        ))

    if (
        username != current_app.config["DEMO_ACCOUNT"]
        or password != current_app.config["DEMO_PASSWORD"]
    ):
        return result_response(OperationResult(
            ok=False,
            error_type=ErrorType.PERMISSION_DENIED,
            error_message="Invalid credentials",
        ))

    session["user"] = username
    return result_response(OperationResult(
        ok=True,
        data={"user": {"username": username, "role": "admin", "name": "Administrator"}},
    ))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return result_response(OperationResult(ok=True, data={"logged_out": True}))


@auth_bp.route("/me", methods=["GET"])
def me():
    check = require_login()
    if check:
        return check
    return result_response(OperationResult(ok=True, data={"user": {"username": session["user"]}}))
