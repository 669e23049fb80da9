# obra/models/warehouse_exit.py
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base
from obra.models.mixins.stock_movement import StockMovementMixin


class WarehouseExit(Base, StockMovementMixin):
    """
    Material leaving the site warehouse, optionally towards a Stage/Activity.
    Decreases derived stock.
    """

    __tablename__ = "warehouse_exits"

    # destination (informational)
    stage_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("stages.id", ondelete="CASCADE"),
        nullable=True,
    )
    activity_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=True,
    )

    collaborator: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Who withdrew the material",
    )
    storage_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    storage_sector: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    material: Mapped["Material"] = relationship(back_populates="exits")

    def __repr__(self) -> str:
        return (
            f"<WarehouseExit id={self.id} material={self.material_id} "
            f"quantity={self.quantity}>"
        )


from obra.models.material import Material  # noqa: E402,F401
