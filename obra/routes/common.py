# obra/routes/common.py
from typing import Callable, Optional

from flask import current_app, jsonify, request, session
from sqlalchemy.orm import Session

from obra.operations.error_classification import failure_result
from obra.schemas.error_type import ErrorType
from obra.schemas.operation_result import OperationResult

STATUS_BY_ERROR = {
    ErrorType.INPUT_ERROR: 400,
    ErrorType.PERMISSION_DENIED: 401,
    ErrorType.NOT_FOUND: 404,
    ErrorType.VALIDATION_ERROR: 422,
    ErrorType.DATABASE_ERROR: 503,
    ErrorType.SYSTEM_ERROR: 500,
}


def get_session() -> Session:
    return current_app.extensions["obra_db"].session()


def require_login():
    """Check the login state; returns an error response or None."""
    if "user" not in session:
        result = OperationResult(
            ok=False,
            error_type=ErrorType.PERMISSION_DENIED,
            error_message="Login required",
        )
        return result_response(result)
    return None


def json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def result_response(result: OperationResult, success_status: int = 200):
    if result.ok:
        status = success_status
    else:
        status = STATUS_BY_ERROR.get(result.error_type, 500)
    return jsonify(result.model_dump(mode="json")), status


def execute(db: Session, work: Callable, *, side_effect: bool = False, success_status: Optional[int] = None):
    '''
    Run one request's unit of work and wrap it in an OperationResult.

    :param work: callable returning the JSON-ready data
    :param side_effect: commit after work(), roll back on any failure
    '''
    try:
        data = work()
        if side_effect:
            db.commit()
        result = OperationResult(ok=True, data=data, side_effect=side_effect)
    except Exception as e:
        db.rollback()
        result = failure_result(e)

    if success_status is None:
        success_status = 201 if side_effect else 200
    return result_response(result, success_status)
