# obra/services/report_service.py
import io
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Union

import pandas as pd
from sqlalchemy.orm import Session

from obra.services.project_service import ProjectService
from obra.services.tracking_service import TrackingService

SUMMARY_SHEET = "Resumo"
DETAIL_SHEET = "Detalhes"

SUMMARY_COLUMNS = ["Item", "Valor"]
DETAIL_COLUMNS = [
    "Etapa",
    "Atividade",
    "Unid.",
    "Qtd.",
    "Custo Unit.",
    "Total Planejado",
    "Duração",
]


@dataclass
class SummaryRow:
    label: str
    value: Union[str, Decimal]


@dataclass
class DetailRow:
    stage: str
    activity: str
    unit: str
    quantity: Decimal
    unit_cost: Decimal
    total: Decimal
    duration: int


@dataclass
class ProjectReport:
    project_id: int
    project_name: str
    summary_rows: List[SummaryRow] = field(default_factory=list)
    detail_rows: List[DetailRow] = field(default_factory=list)


class ReportService:
    """
    Projects a project into the two tables of the spreadsheet report.

    generate_project_report() does NOT persist anything, and build_workbook()
    only serialises the rows it is given.
    """

    def __init__(
        self,
        db: Session,
        project_service: ProjectService,
        tracking_service: TrackingService,
    ):
        self.db = db
        self.project_service = project_service
        self.tracking_service = tracking_service

    def generate_project_report(self, project_id: int) -> ProjectReport:
        # 1️⃣ load project, activities and metrics
        project = self.project_service.get_project(project_id)
        activities = self.project_service.list_project_activities(project_id)
        progress = self.tracking_service.project_progress(project_id)

        # 2️⃣ summary sheet
        percent = progress.percent_complete.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        summary_rows = [
            SummaryRow("Projeto", project.name),
            SummaryRow("Cliente", project.client),
            SummaryRow("Status", project.status.value),
            SummaryRow("Progresso Físico", f"{percent}%"),
            SummaryRow("Custo Planejado (BAC)", progress.bac),
            SummaryRow("Custo Real (AC)", progress.ac),
            SummaryRow("Valor Agregado (EV)", progress.ev),
            SummaryRow("SPI", progress.spi),
            SummaryRow("CPI", progress.cpi),
        ]

        # 3️⃣ detail sheet, one row per activity
        detail_rows = [
            DetailRow(
                stage=row.stage_name,
                activity=row.activity.description,
                unit=row.activity.unit,
                quantity=row.activity.planned_quantity,
                unit_cost=row.activity.planned_unit_cost,
                total=row.activity.planned_value,
                duration=row.activity.planned_duration,
            )
            for row in activities
        ]

        return ProjectReport(
            project_id=project.id,
            project_name=project.name,
            summary_rows=summary_rows,
            detail_rows=detail_rows,
        )


def _cell(value):
    return float(value) if isinstance(value, Decimal) else value


def build_workbook(report: ProjectReport) -> bytes:
    '''
    Write the report into an .xlsx with the sheets "Resumo" and "Detalhes".
    '''
    summary_df = pd.DataFrame(
        [[row.label, _cell(row.value)] for row in report.summary_rows],
        columns=SUMMARY_COLUMNS,
    )
    detail_df = pd.DataFrame(
        [
            [
                row.stage,
                row.activity,
                row.unit,
                _cell(row.quantity),
                _cell(row.unit_cost),
                _cell(row.total),
                row.duration,
            ]
            for row in report.detail_rows
        ],
        columns=DETAIL_COLUMNS,
    )

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary_df.to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)
        detail_df.to_excel(writer, index=False, sheet_name=DETAIL_SHEET)
    return output.getvalue()
