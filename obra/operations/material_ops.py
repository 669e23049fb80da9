# obra/operations/material_ops.py
from sqlalchemy.orm import Session

from obra.operations.error_classification import failure_result
from obra.schemas.dto.stock_dto import StockItemDTO
from obra.schemas.operation_result import OperationResult
from obra.services.material_service import MaterialService


def get_project_materials(db: Session, project_id: int) -> OperationResult:
    """
    Operation: materials of a project with derived stock (read-only).
    data = {"project_id": ..., "materials": [...]}
    """
    service = MaterialService(db)
    try:
        items = service.project_materials(project_id)
        return OperationResult(
            ok=True,
            data={
                "project_id": project_id,
                "materials": [StockItemDTO.from_domain_model(i).to_json() for i in items],
            },
        )
    except Exception as e:
        db.rollback()
        return failure_result(e)
