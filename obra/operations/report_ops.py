# obra/operations/report_ops.py
from sqlalchemy.orm import Session

from obra.operations.error_classification import failure_result
from obra.schemas.dto.report_dto import ProjectReportDTO
from obra.schemas.operation_result import OperationResult
from obra.services.budget_service import BudgetService
from obra.services.project_service import ProjectService
from obra.services.report_service import ReportService
from obra.services.tracking_service import TrackingService


def build_report_service(db: Session) -> ReportService:
    budget = BudgetService(db)
    return ReportService(
        db,
        project_service=ProjectService(db),
        tracking_service=TrackingService(db, budget),
    )


def generate_project_report(db: Session, project_id: int) -> OperationResult:
    """
    Operation: summary + detail rows of the project report (read-only).
    The .xlsx itself is written by report_service.build_workbook.
    """
    service = build_report_service(db)
    try:
        report = service.generate_project_report(project_id)
        dto = ProjectReportDTO.from_domain_model(report)
        return OperationResult(ok=True, data=dto.model_dump(mode="json"))
    except Exception as e:
        db.rollback()
        return failure_result(e)
