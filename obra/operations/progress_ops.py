# obra/operations/progress_ops.py
from sqlalchemy.orm import Session

from obra.operations.error_classification import failure_result
from obra.schemas.dto.progress_dto import ProgressDTO, StageCostDTO
from obra.schemas.operation_result import OperationResult
from obra.services.budget_service import BudgetService
from obra.services.tracking_service import TrackingService


def get_project_progress(db: Session, project_id: int) -> OperationResult:
    """
    Operation: earned-value metrics of one project (read-only).
    """
    budget = BudgetService(db)
    service = TrackingService(db, budget)
    try:
        progress = service.project_progress(project_id)
        dto = ProgressDTO.from_domain_model(progress)
        return OperationResult(ok=True, data=dto.to_json())
    except Exception as e:
        db.rollback()
        return failure_result(e)


def get_cost_by_stage(db: Session, project_id: int) -> OperationResult:
    """
    Operation: planned cost per stage, ordered by stage order (read-only).
    data = {"project_id": ..., "stages": [...]}
    """
    service = BudgetService(db)
    try:
        stages = service.cost_by_stage(project_id)
        return OperationResult(
            ok=True,
            data={
                "project_id": project_id,
                "stages": [StageCostDTO.from_domain_model(s).to_json() for s in stages],
            },
        )
    except Exception as e:
        db.rollback()
        return failure_result(e)
