# obra/services/tracking_service.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from obra.logger import get_logger
from obra.models.activity import Activity
from obra.models.daily_log import DailyLog
from obra.models.stage import Stage
from obra.services.amounts import ZERO, to_decimal
from obra.services.budget_service import BudgetService
from obra.services.errors import NotFoundError

logger = get_logger(__name__)

ONE = Decimal("1")
HUNDRED = Decimal("100")
# planned value at "today" is not modelled yet; half the budget stands in for it
SPI_PLANNED_FRACTION = Decimal("0.5")


@dataclass
class ProgressResult:
    project_id: int
    bac: Decimal
    ac: Decimal
    ev: Decimal
    cpi: Decimal
    spi: Decimal
    percent_complete: Decimal
    spi_is_approximate: bool = True
    skipped_activity_ids: List[int] = field(default_factory=list)


@dataclass
class DailyLogRow:
    log: DailyLog
    activity_description: str
    stage_name: str


class TrackingService:
    """
    Earned-value engine.

    bac  planned cost of the whole project
    ac   Σ real_cost of every daily log
    ev   Σ (executed / planned) * planned value, for activities with logs
    cpi  ev / ac   (1 when ac = 0)
    spi  ev / (bac * 0.5)   (1 when bac = 0 or nothing logged yet), provisional
    """

    def __init__(self, db: Session, budget_service: BudgetService):
        self.db = db
        self.budget_service = budget_service

    def project_progress(self, project_id: int) -> ProgressResult:
        # 1️⃣ BAC (also validates the project)
        bac = self.budget_service.total_planned_cost(project_id)

        # 2️⃣ AC
        ac = to_decimal(
            self.db.query(func.sum(DailyLog.real_cost))
            .join(Activity, DailyLog.activity_id == Activity.id)
            .join(Stage, Activity.stage_id == Stage.id)
            .filter(Stage.project_id == project_id)
            .scalar()
        )

        # 3️⃣ EV, only activities that have at least one log
        executed_rows = (
            self.db.query(
                Activity.id,
                Activity.planned_quantity,
                Activity.planned_unit_cost,
                func.sum(DailyLog.executed_quantity),
            )
            .join(Stage, Activity.stage_id == Stage.id)
            .join(DailyLog, DailyLog.activity_id == Activity.id)
            .filter(Stage.project_id == project_id)
            .group_by(Activity.id, Activity.planned_quantity, Activity.planned_unit_cost)
            .all()
        )

        ev = ZERO
        skipped: List[int] = []
        for activity_id, planned_quantity, planned_unit_cost, executed in executed_rows:
            planned_quantity = to_decimal(planned_quantity)
            if planned_quantity <= 0:
                skipped.append(activity_id)
                continue
            planned_value = planned_quantity * to_decimal(planned_unit_cost)
            ev += (to_decimal(executed) / planned_quantity) * planned_value

        if skipped:
            logger.info(
                "project %s: activities %s have planned quantity 0, left out of EV",
                project_id, skipped,
            )

        # 4️⃣ indices; spi stays 1 until something has been logged
        cpi = ev / ac if ac > 0 else ONE
        if bac > 0 and executed_rows:
            spi = ev / (bac * SPI_PLANNED_FRACTION)
        else:
            spi = ONE
        percent_complete = ev / bac * HUNDRED if bac > 0 else ZERO

        return ProgressResult(
            project_id=project_id,
            bac=bac,
            ac=ac,
            ev=ev,
            cpi=cpi,
            spi=spi,
            percent_complete=percent_complete,
            spi_is_approximate=True,
            skipped_activity_ids=sorted(skipped),
        )

    def project_daily_logs(self, project_id: int) -> List[DailyLogRow]:
        '''Daily logs of a project, newest date first.'''
        self.budget_service.ensure_project(project_id)

        rows = (
            self.db.query(DailyLog, Activity.description, Stage.name)
            .join(Activity, DailyLog.activity_id == Activity.id)
            .join(Stage, Activity.stage_id == Stage.id)
            .filter(Stage.project_id == project_id)
            .order_by(DailyLog.date.desc(), DailyLog.id.desc())
            .all()
        )
        return [
            DailyLogRow(log=log, activity_description=description, stage_name=stage_name)
            for log, description, stage_name in rows
        ]

    def activity_executed_total(self, activity_id: int) -> Decimal:
        if self.db.get(Activity, activity_id) is None:
            raise NotFoundError("Activity", activity_id)
        return to_decimal(
            self.db.query(func.sum(DailyLog.executed_quantity))
            .filter(DailyLog.activity_id == activity_id)
            .scalar()
        )
