# obra/schemas/dto/stock_dto.py
from typing import Optional

from obra.models.material import Material
from obra.schemas.dto.base_dto import BaseDTO
from obra.services.material_service import StockItem


class MaterialDTO(BaseDTO):
    id: int
    project_id: int
    stage_id: Optional[int] = None
    activity_id: Optional[int] = None
    description: str
    unit: str
    quantity: float
    unit_cost: float
    category: Optional[str] = None

    @classmethod
    def from_orm_model(cls, material: Material) -> "MaterialDTO":
        return cls(
            id=material.id,
            project_id=material.project_id,
            stage_id=material.stage_id,
            activity_id=material.activity_id,
            description=material.description,
            unit=material.unit,
            quantity=float(material.quantity),
            unit_cost=float(material.unit_cost),
            category=material.category,
        )


class StockItemDTO(MaterialDTO):
    stage_name: Optional[str] = None
    activity_name: Optional[str] = None

    # ===== derived from the warehouse ledger =====
    purchased_quantity: float
    exited_quantity: float
    waste_quantity: float
    current_stock: float

    @classmethod
    def from_domain_model(cls, item: StockItem) -> "StockItemDTO":
        base = MaterialDTO.from_orm_model(item.material)
        return cls(
            **base.model_dump(),
            stage_name=item.stage_name,
            activity_name=item.activity_name,
            purchased_quantity=float(item.purchased_quantity),
            exited_quantity=float(item.exited_quantity),
            waste_quantity=float(item.waste_quantity),
            current_stock=float(item.current_stock),
        )
