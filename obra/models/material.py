# obra/models/material.py
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base


class Material(Base):
    """
    Material take-off line of a project.

    quantity / unit_cost are the *planned* figures. Stock on hand is not a
    column: it is purchases - exits - waste, derived at read time.
    """

    __tablename__ = "project_materials"
    __table_args__ = {"sqlite_autoincrement": True}

    # =========
    # Identity & ownership
    # =========
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("stages.id", ondelete="CASCADE"),
        nullable=True,
    )
    activity_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=True,
    )

    # =========
    # Take-off
    # =========
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Planned quantity (>= 0)",
    )
    unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Planned unit cost (>= 0); purchases may use another price",
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # =========
    # Relations
    # =========
    project: Mapped["Project"] = relationship(back_populates="materials")
    stage: Mapped[Optional["Stage"]] = relationship()
    activity: Mapped[Optional["Activity"]] = relationship()

    purchases: Mapped[List["Purchase"]] = relationship(
        back_populates="material",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    exits: Mapped[List["WarehouseExit"]] = relationship(
        back_populates="material",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    waste: Mapped[List["WarehouseWaste"]] = relationship(
        back_populates="material",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Material id={self.id} description={self.description}>"


from obra.models.project import Project  # noqa: E402,F401
from obra.models.stage import Stage  # noqa: E402,F401
from obra.models.activity import Activity  # noqa: E402,F401
from obra.models.purchase import Purchase  # noqa: E402,F401
from obra.models.warehouse_exit import WarehouseExit  # noqa: E402,F401
from obra.models.warehouse_waste import WarehouseWaste  # noqa: E402,F401
