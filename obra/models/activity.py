# obra/models/activity.py
import datetime as dt
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base


class Activity(Base):
    """
    Planned unit of work inside a Stage.

    planned value = planned_quantity * planned_unit_cost
    """

    __tablename__ = "activities"
    __table_args__ = {"sqlite_autoincrement": True}

    # =========
    # Identity & ownership
    # =========
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stage_id: Mapped[int] = mapped_column(
        ForeignKey("stages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # =========
    # Planning
    # =========
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False, comment="Unit of quantity, e.g. m2")
    planned_quantity: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Planned quantity (>= 0); caps the executed total",
    )
    planned_unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Planned cost per unit (>= 0)",
    )
    planned_duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Planned duration in days (>= 1)",
    )

    # informational only, no scheduling constraint is derived from it
    dependency_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("activities.id", ondelete="SET NULL"),
        nullable=True,
    )
    start_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # =========
    # Relations
    # =========
    stage: Mapped["Stage"] = relationship(back_populates="activities")
    daily_logs: Mapped[List["DailyLog"]] = relationship(
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def planned_value(self) -> Decimal:
        return (self.planned_quantity or Decimal("0")) * (self.planned_unit_cost or Decimal("0"))

    def __repr__(self) -> str:
        return (
            f"<Activity id={self.id} "
            f"description={self.description} "
            f"planned={self.planned_quantity}>"
        )


from obra.models.stage import Stage  # noqa: E402,F401
from obra.models.daily_log import DailyLog  # noqa: E402,F401
