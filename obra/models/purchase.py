# obra/models/purchase.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base
from obra.models.mixins.stock_movement import StockMovementMixin


class Purchase(Base, StockMovementMixin):
    """
    Material purchase. Increases derived stock.
    unit_price is the price actually paid and may differ from Material.unit_cost.
    """

    __tablename__ = "material_purchases"

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Price paid per unit (>= 0)",
    )
    supplier: Mapped[str] = mapped_column(String(255), nullable=False)
    invoice_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    material: Mapped["Material"] = relationship(back_populates="purchases")

    def __repr__(self) -> str:
        return (
            f"<Purchase id={self.id} material={self.material_id} "
            f"quantity={self.quantity} unit_price={self.unit_price}>"
        )


from obra.models.material import Material  # noqa: E402,F401
