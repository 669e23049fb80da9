# obra/models/mixins/stock_movement.py
import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column


class StockMovementMixin:
    """
    Base mixin for warehouse ledger rows (purchase / exit / waste).

    Invariants:
    - Append-only: rows are created or deleted, never updated
    - Belongs to one project and references exactly one Material
    - Stock is never stored; it is derived from the sum of these rows
    """
    # ids are never handed out twice, even after the newest row is deleted
    __table_args__ = {"sqlite_autoincrement": True}

    # =========
    # Identity & ownership
    # =========
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning project",
    )
    material_id: Mapped[int] = mapped_column(
        ForeignKey("project_materials.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Material take-off line this movement refers to",
    )

    # =========
    # Movement
    # =========
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, comment="Movement date")
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Moved quantity, in the material unit (>= 0)",
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp",
    )
