# obra/operations/daily_log_ops.py
from typing import Union

from sqlalchemy.orm import Session

from obra.db.concurrency import run_with_retry
from obra.operations.error_classification import failure_result
from obra.schemas.dto.daily_log_dto import DailyLogDTO
from obra.schemas.inputs import DailyLogInput
from obra.schemas.operation_result import OperationResult
from obra.services.daily_log_service import DailyLogService


def create_daily_log(
    db: Session,
    payload: Union[DailyLogInput, dict],
    *,
    attempts: int = 3,
) -> OperationResult:
    """
    Operation: record a daily log.

    Side effects:
    - inserts one DailyLog and commits

    Preconditions:
    - activity exists
    - Σ executed_quantity of the activity stays <= planned_quantity

    Lock contention is retried as a whole unit of work; domain rejections are not.
    """
    service = DailyLogService(db)

    def _unit_of_work():
        log = service.create_daily_log(data)
        db.commit()
        return log

    try:
        data = payload if isinstance(payload, DailyLogInput) else DailyLogInput.model_validate(payload)
        log = run_with_retry(db, _unit_of_work, attempts=attempts)
        dto = DailyLogDTO.from_orm_model(log)
        return OperationResult(ok=True, data=dto.to_json(), side_effect=True)
    except Exception as e:
        db.rollback()
        return failure_result(e)
