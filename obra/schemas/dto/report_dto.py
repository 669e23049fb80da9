# obra/schemas/dto/report_dto.py
from decimal import Decimal
from typing import List, Union

from pydantic import BaseModel

from obra.services.report_service import DETAIL_SHEET, SUMMARY_SHEET, ProjectReport


class SummaryRowDTO(BaseModel):
    label: str
    value: Union[str, float]


class DetailRowDTO(BaseModel):
    stage: str
    activity: str
    unit: str
    quantity: float
    unit_cost: float
    total: float
    duration: int


class ProjectReportDTO(BaseModel):
    project_id: int
    project_name: str
    summary_sheet: str = SUMMARY_SHEET
    detail_sheet: str = DETAIL_SHEET
    summary_rows: List[SummaryRowDTO]
    detail_rows: List[DetailRowDTO]

    @classmethod
    def from_domain_model(cls, report: ProjectReport) -> "ProjectReportDTO":
        return cls(
            project_id=report.project_id,
            project_name=report.project_name,
            summary_rows=[
                SummaryRowDTO(
                    label=row.label,
                    value=float(row.value) if isinstance(row.value, Decimal) else row.value,
                )
                for row in report.summary_rows
            ],
            detail_rows=[
                DetailRowDTO(
                    stage=row.stage,
                    activity=row.activity,
                    unit=row.unit,
                    quantity=float(row.quantity),
                    unit_cost=float(row.unit_cost),
                    total=float(row.total),
                    duration=row.duration,
                )
                for row in report.detail_rows
            ],
        )
