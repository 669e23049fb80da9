# obra/services/budget_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from obra.models.activity import Activity
from obra.models.project import Project
from obra.models.stage import Stage
from obra.services.amounts import to_decimal
from obra.services.errors import NotFoundError


@dataclass
class StageCost:
    stage_id: int
    name: str
    display_order: int
    total_cost: Decimal


class BudgetService:
    """
    Planned cost aggregation (BAC). Read-only.
    """

    def __init__(self, db: Session):
        self.db = db

    def total_planned_cost(self, project_id: int) -> Decimal:
        '''
        Σ planned_quantity * planned_unit_cost over every activity of the project.

        :param project_id: project id
        :raises NotFoundError: unknown project
        :return: 0 when the project has no activities
        '''
        self.ensure_project(project_id)

        total = (
            self.db.query(func.sum(Activity.planned_quantity * Activity.planned_unit_cost))
            .join(Stage, Activity.stage_id == Stage.id)
            .filter(Stage.project_id == project_id)
            .scalar()
        )
        return to_decimal(total)

    def cost_by_stage(self, project_id: int) -> List[StageCost]:
        '''
        One row per stage, ordered by display_order.
        Stages without activities are listed with total_cost 0.
        '''
        self.ensure_project(project_id)

        rows = (
            self.db.query(
                Stage.id,
                Stage.name,
                Stage.display_order,
                func.sum(Activity.planned_quantity * Activity.planned_unit_cost),
            )
            .outerjoin(Activity, Activity.stage_id == Stage.id)
            .filter(Stage.project_id == project_id)
            .group_by(Stage.id, Stage.name, Stage.display_order)
            .order_by(Stage.display_order, Stage.id)
            .all()
        )
        return [
            StageCost(
                stage_id=stage_id,
                name=name,
                display_order=display_order,
                total_cost=to_decimal(total),
            )
            for stage_id, name, display_order, total in rows
        ]

    def ensure_project(self, project_id: int) -> None:
        if self.db.get(Project, project_id) is None:
            raise NotFoundError("Project", project_id)
