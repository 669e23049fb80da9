# obra/models/warehouse_waste.py
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base
from obra.models.mixins.stock_movement import StockMovementMixin


class WarehouseWaste(Base, StockMovementMixin):
    """Material lost or wasted on site. Decreases derived stock."""

    __tablename__ = "warehouse_waste"

    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    material: Mapped["Material"] = relationship(back_populates="waste")

    def __repr__(self) -> str:
        return (
            f"<WarehouseWaste id={self.id} material={self.material_id} "
            f"quantity={self.quantity} reason={self.reason}>"
        )


from obra.models.material import Material  # noqa: E402,F401
