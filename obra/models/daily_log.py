# obra/models/daily_log.py
import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base


class DailyLog(Base):
    """
    Dated execution record against an Activity.

    Ledger-style: created or deleted, never updated.
    Σ executed_quantity per activity must stay <= activity.planned_quantity.
    """

    __tablename__ = "daily_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    executed_quantity: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Quantity executed on this date (>= 0)",
    )
    # no budget cap on real cost
    real_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Cost incurred on this date (>= 0)",
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    activity: Mapped["Activity"] = relationship(back_populates="daily_logs")

    def __repr__(self) -> str:
        return (
            f"<DailyLog id={self.id} activity={self.activity_id} "
            f"executed={self.executed_quantity} cost={self.real_cost}>"
        )


from obra.models.activity import Activity  # noqa: E402,F401
