# obra/schemas/dto/daily_log_dto.py
import datetime as dt
from typing import Optional

from obra.models.daily_log import DailyLog
from obra.schemas.dto.base_dto import BaseDTO
from obra.services.tracking_service import DailyLogRow


class DailyLogDTO(BaseDTO):
    id: int
    activity_id: int
    date: dt.date
    executed_quantity: float
    real_cost: float
    notes: Optional[str] = None

    activity_name: Optional[str] = None
    stage_name: Optional[str] = None

    @classmethod
    def from_orm_model(cls, log: DailyLog) -> "DailyLogDTO":
        return cls(
            id=log.id,
            activity_id=log.activity_id,
            date=log.date,
            executed_quantity=float(log.executed_quantity),
            real_cost=float(log.real_cost),
            notes=log.notes,
        )

    @classmethod
    def from_row(cls, row: DailyLogRow) -> "DailyLogDTO":
        dto = cls.from_orm_model(row.log)
        dto.activity_name = row.activity_description
        dto.stage_name = row.stage_name
        return dto
