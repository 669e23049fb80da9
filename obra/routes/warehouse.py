# obra/routes/warehouse.py
from flask import Blueprint

from obra.operations.material_ops import get_project_materials
from obra.routes.common import execute, get_session, json_body, require_login, result_response
from obra.schemas.dto.stock_dto import MaterialDTO, StockItemDTO
from obra.schemas.dto.warehouse_dto import PurchaseDTO, WarehouseExitDTO, WarehouseWasteDTO
from obra.schemas.inputs import MaterialInput, PurchaseInput, WarehouseExitInput, WarehouseWasteInput
from obra.services.material_service import MaterialService
from obra.services.warehouse_service import WarehouseService

warehouse_bp = Blueprint("warehouse", __name__, url_prefix="/api")


def _with_project(payload: dict, project_id: int) -> dict:
    return {**payload, "project_id": project_id}


# ======================================================
# Materials
# ======================================================

@warehouse_bp.route("/projects/<int:project_id>/materials", methods=["GET"])
def list_materials(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        return result_response(get_project_materials(db, project_id))
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/materials", methods=["POST"])
def create_material(project_id):
    check = require_login()
    if check:
        return check

    payload = _with_project(json_body(), project_id)
    db = get_session()
    try:
        service = MaterialService(db)
        return execute(
            db,
            lambda: MaterialDTO.from_orm_model(
                service.create_material(MaterialInput.model_validate(payload))
            ).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@warehouse_bp.route("/materials/<int:material_id>", methods=["GET"])
def get_material(material_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = MaterialService(db)
        return execute(db, lambda: StockItemDTO.from_domain_model(service.material_stock(material_id)).to_json())
    finally:
        db.close()


@warehouse_bp.route("/materials/<int:material_id>", methods=["PUT", "PATCH"])
def update_material(material_id):
    check = require_login()
    if check:
        return check

    payload = json_body()
    db = get_session()
    try:
        service = MaterialService(db)
        return execute(
            db,
            lambda: MaterialDTO.from_orm_model(service.update_material(material_id, payload)).to_json(),
            side_effect=True,
            success_status=200,
        )
    finally:
        db.close()


@warehouse_bp.route("/materials/<int:material_id>", methods=["DELETE"])
def delete_material(material_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = MaterialService(db)

        def work():
            service.delete_material(material_id)
            return {"deleted": material_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


# ======================================================
# Purchases / exits / waste
# ======================================================

def _warehouse(db) -> WarehouseService:
    return WarehouseService(db, MaterialService(db))


@warehouse_bp.route("/projects/<int:project_id>/purchases", methods=["GET"])
def list_purchases(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)
        return execute(db, lambda: [PurchaseDTO.from_row(r).to_json() for r in service.project_purchases(project_id)])
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/purchases", methods=["POST"])
def create_purchase(project_id):
    check = require_login()
    if check:
        return check

    payload = _with_project(json_body(), project_id)
    db = get_session()
    try:
        service = _warehouse(db)
        return execute(
            db,
            lambda: PurchaseDTO.from_orm_model(
                service.create_purchase(PurchaseInput.model_validate(payload))
            ).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@warehouse_bp.route("/purchases/<int:purchase_id>", methods=["DELETE"])
def delete_purchase(purchase_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)

        def work():
            service.delete_purchase(purchase_id)
            return {"deleted": purchase_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/exits", methods=["GET"])
def list_exits(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)
        return execute(db, lambda: [WarehouseExitDTO.from_row(r).to_json() for r in service.project_exits(project_id)])
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/exits", methods=["POST"])
def create_exit(project_id):
    check = require_login()
    if check:
        return check

    payload = _with_project(json_body(), project_id)
    db = get_session()
    try:
        service = _warehouse(db)
        return execute(
            db,
            lambda: WarehouseExitDTO.from_orm_model(
                service.create_exit(WarehouseExitInput.model_validate(payload))
            ).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@warehouse_bp.route("/exits/<int:exit_id>", methods=["DELETE"])
def delete_exit(exit_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)

        def work():
            service.delete_exit(exit_id)
            return {"deleted": exit_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/waste", methods=["GET"])
def list_waste(project_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)
        return execute(db, lambda: [WarehouseWasteDTO.from_row(r).to_json() for r in service.project_waste(project_id)])
    finally:
        db.close()


@warehouse_bp.route("/projects/<int:project_id>/waste", methods=["POST"])
def create_waste(project_id):
    check = require_login()
    if check:
        return check

    payload = _with_project(json_body(), project_id)
    db = get_session()
    try:
        service = _warehouse(db)
        return execute(
            db,
            lambda: WarehouseWasteDTO.from_orm_model(
                service.create_waste(WarehouseWasteInput.model_validate(payload))
            ).to_json(),
            side_effect=True,
        )
    finally:
        db.close()


@warehouse_bp.route("/waste/<int:waste_id>", methods=["DELETE"])
def delete_waste(waste_id):
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = _warehouse(db)

        def work():
            service.delete_waste(waste_id)
            return {"deleted": waste_id}

        return execute(db, work, side_effect=True, success_status=200)
    finally:
        db.close()
