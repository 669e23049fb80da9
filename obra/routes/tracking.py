# obra/routes/tracking.py
from flask import Blueprint, current_app

from obra.operations.daily_log_ops import create_daily_log
from obra.operations.progress_ops import get_cost_by_stage, get_project_progress
from obra.routes.common import execute, get_session, json_body, require_login, result_response
from obra.schemas.dto.daily_log_dto import DailyLogDTO
from obra.schemas.operation_result import OperationResult
from obra.services.budget_service import BudgetService
from obra.services.daily_log_service import DailyLogService
from obra.services.tracking_service import TrackingService

tracking_bp = Blueprint("tracking", __name__, url_prefix="/api")


@tracking_bp.route("/projects/<int:project_id>/logs", methods=["GET"])
def list_logs(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = TrackingService(db, BudgetService(db))
        return execute(
            db,
            lambda: [DailyLogDTO.from_row(r).to_json() for r in service.project_daily_logs(project_id)],
        )
    finally:
        db.close()


@tracking_bp.route("/logs", methods=["POST"])
def create_log():
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        result = create_daily_log(
            db,
            payload,
            attempts=current_app.config["WRITE_RETRY_ATTEMPTS"],
        )
        return result_response(result, success_status=201)
    finally:
        db.close()


@tracking_bp.route("/logs/<int:log_id>", methods=["DELETE"])
def delete_log(log_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = DailyLogService(db)

        def work():
            service.delete_daily_log(log_id)
            return {"deleted": log_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


@tracking_bp.route("/projects/<int:project_id>/progress", methods=["GET"])
def progress(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        return result_response(get_project_progress(db, project_id))
    finally:
        db.close()


@tracking_bp.route("/projects/<int:project_id>/budget", methods=["GET"])
def budget(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        return result_response(get_cost_by_stage(db, project_id))
    finally:
        db.close()


@tracking_bp.route("/projects/<int:project_id>/dashboard", methods=["GET"])
def dashboard(project_id):
    """progress + planned cost per stage in one payload."""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        progress_result = get_project_progress(db, project_id)
        if not progress_result.ok:
            return result_response(progress_result)

        stages_result = get_cost_by_stage(db, project_id)
        if not stages_result.ok:
            return result_response(stages_result)

        return result_response(OperationResult(
            ok=True,
            data={
                "progress": progress_result.data,
                "cost_by_stage": stages_result.data["stages"],
            },
        ))
    finally:
        db.close()
