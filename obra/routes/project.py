# obra/routes/project.py
from flask import Blueprint

from obra.db.auto_init import seed_demo_project
from obra.operations.progress_ops import get_project_progress
from obra.routes.common import execute, get_session, json_body, require_login
from obra.schemas.dto.project_dto import ActivityDTO, ProjectDTO, StageDTO
from obra.schemas.inputs import ActivityInput, ProjectInput, StageInput
from obra.services.project_service import ProjectService

project_bp = Blueprint("project", __name__, url_prefix="/api")


def _items(payload: dict) -> list:
    items = payload.get("items")
    return items if isinstance(items, list) else []


# ======================================================
# Projects
# ======================================================

@project_bp.route("/projects", methods=["GET"])
def list_projects():
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)
        return execute(db, lambda: [ProjectDTO.from_orm_model(p).to_json() for p in service.list_projects()])
    finally:
        db.close()


@project_bp.route("/projects", methods=["POST"])
def create_project():
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)

        def work():
            project = service.create_project(ProjectInput.model_validate(payload))
            return ProjectDTO.from_orm_model(project).to_json()

        return execute(db, work, side_effect=True)
    finally:
        db.close()


@project_bp.route("/projects/<int:project_id>", methods=["GET"])
def get_project(project_id):
    """Project fields plus its earned-value stats."""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)

        def work():
            project = ProjectDTO.from_orm_model(service.get_project(project_id)).to_json()
            stats = get_project_progress(db, project_id)
            project["stats"] = stats.data
            return project

        return execute(db, work)
    finally:
        db.close()


@project_bp.route("/projects/<int:project_id>", methods=["PUT", "PATCH"])
def update_project(project_id):
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: ProjectDTO.from_orm_model(service.update_project(project_id, payload)).to_json(),
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@project_bp.route("/projects/<int:project_id>", methods=["DELETE"])
def delete_project(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)

        def work():
            service.delete_project(project_id)
            return {"deleted": project_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


# ======================================================
# Stages
# ======================================================

@project_bp.route("/projects/<int:project_id>/stages", methods=["GET"])
def list_stages(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)
        return execute(db, lambda: [StageDTO.from_orm_model(s).to_json() for s in service.list_stages(project_id)])
    finally:
        db.close()


@project_bp.route("/stages", methods=["POST"])
def create_stage():
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: StageDTO.from_orm_model(service.create_stage(StageInput.model_validate(payload))).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@project_bp.route("/projects/<int:project_id>/stages/reorder", methods=["POST"])
def reorder_stages(project_id):
    """Body: {"items": [{"id": .., "order": ..}, ...]}"""
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: [StageDTO.from_orm_model(s).to_json() for s in service.reorder_stages(project_id, _items(payload))],
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@project_bp.route("/stages/<int:stage_id>", methods=["PUT", "PATCH"])
def update_stage(stage_id):
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: StageDTO.from_orm_model(service.update_stage(stage_id, payload)).to_json(),
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@project_bp.route("/stages/<int:stage_id>", methods=["DELETE"])
def delete_stage(stage_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)

        def work():
            service.delete_stage(stage_id)
            return {"deleted": stage_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


# ======================================================
# Activities
# ======================================================

@project_bp.route("/projects/<int:project_id>/activities", methods=["GET"])
def list_project_activities(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: [ActivityDTO.from_row(r).to_json() for r in service.list_project_activities(project_id)],
        )
    finally:
        db.close()


@project_bp.route("/stages/<int:stage_id>/activities", methods=["GET"])
def list_stage_activities(stage_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: [ActivityDTO.from_orm_model(a).to_json() for a in service.list_stage_activities(stage_id)],
        )
    finally:
        db.close()


@project_bp.route("/activities", methods=["POST"])
def create_activity():
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: ActivityDTO.from_orm_model(
                service.create_activity(ActivityInput.model_validate(payload))
            ).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@project_bp.route("/stages/<int:stage_id>/activities/reorder", methods=["POST"])
def reorder_activities(stage_id):
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: [
                ActivityDTO.from_orm_model(a).to_json()
                for a in service.reorder_activities(stage_id, _items(payload))
            ],
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@project_bp.route("/activities/<int:activity_id>", methods=["GET"])
def get_activity(activity_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)
        return execute(db, lambda: ActivityDTO.from_orm_model(service.get_activity(activity_id)).to_json())
    finally:
        db.close()


@project_bp.route("/activities/<int:activity_id>", methods=["PUT", "PATCH"])
def update_activity(activity_id):
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = ProjectService(db)
        return execute(
            db,
            lambda: ActivityDTO.from_orm_model(service.update_activity(activity_id, payload)).to_json(),
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@project_bp.route("/activities/<int:activity_id>", methods=["DELETE"])
def delete_activity(activity_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = ProjectService(db)

        def work():
            service.delete_activity(activity_id)
            return {"deleted": activity_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


# ======================================================
# Demo data
# ======================================================

@project_bp.route("/seed", methods=["POST"])
def seed():
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        def work():
            project = seed_demo_project(db)
            if project is None:
                return {"message": "Already seeded"}
            return {"message": "Seeded successfully", "project_id": project.id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()
