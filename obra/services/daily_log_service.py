# obra/services/daily_log_service.py
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from obra.db.concurrency import lock_for_update
from obra.logger import get_logger
from obra.models.activity import Activity
from obra.models.daily_log import DailyLog
from obra.schemas.inputs import DailyLogInput
from obra.services.amounts import to_decimal
from obra.services.errors import ExecutedQuantityExceededError, NotFoundError

logger = get_logger(__name__)


class DailyLogService:
    """
    Write side of the daily logs.

    Guarantees Σ executed_quantity <= planned_quantity per activity, also when
    two writers log against the same activity at the same time.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_daily_log(self, data: DailyLogInput) -> DailyLog:
        '''
        Record execution for one activity on one date.

        :param data: validated input (quantities already >= 0)
        :raises NotFoundError: unknown activity
        :raises ExecutedQuantityExceededError: the new total would pass the planned quantity
        :return: the flushed DailyLog (caller commits)
        '''
        # 1️⃣ lock the activity row; concurrent writers queue here
        activity = lock_for_update(
            self.db.query(Activity).filter(Activity.id == data.activity_id)
        ).first()
        if activity is None:
            raise NotFoundError("Activity", data.activity_id)

        planned = to_decimal(activity.planned_quantity)
        quantity = to_decimal(data.executed_quantity)

        # 2️⃣ pre-check against the live total
        existing = self._executed_total(activity.id)
        self._assert_within_plan(activity, planned, existing, existing + quantity)

        # 3️⃣ insert
        log = DailyLog(
            activity_id=activity.id,
            date=data.date,
            executed_quantity=quantity,
            real_cost=to_decimal(data.real_cost),
            notes=data.notes,
        )
        self.db.add(log)
        self.db.flush()

        # 4️⃣ re-verify inside the same transaction; the insert holds the write
        # lock now, so rows committed by other writers meanwhile are visible
        total = self._executed_total(activity.id)
        if total > planned:
            self.db.delete(log)
            self.db.flush()
            self._assert_within_plan(activity, planned, total - quantity, total)

        logger.info(
            "daily log created id=%s activity=%s executed=%s total=%s/%s",
            log.id, activity.id, quantity, total, planned,
        )
        return log

    def delete_daily_log(self, log_id: int) -> None:
        log = self.db.get(DailyLog, log_id)
        if log is None:
            raise NotFoundError("DailyLog", log_id)
        self.db.delete(log)
        self.db.flush()
        logger.info("daily log deleted id=%s activity=%s", log_id, log.activity_id)

    def _executed_total(self, activity_id: int) -> Decimal:
        return to_decimal(
            self.db.query(func.sum(DailyLog.executed_quantity))
            .filter(DailyLog.activity_id == activity_id)
            .scalar()
        )

    def _assert_within_plan(
        self,
        activity: Activity,
        planned: Decimal,
        existing: Decimal,
        attempted: Decimal,
    ) -> None:
        if attempted <= planned:
            return
        logger.warning(
            "daily log rejected: activity=%s attempted=%s planned=%s",
            activity.id, attempted, planned,
        )
        raise ExecutedQuantityExceededError(
            activity_id=activity.id,
            activity_description=activity.description,
            planned_quantity=planned,
            existing_total=existing,
            attempted_total=attempted,
        )
