# obra/schemas/dto/warehouse_dto.py
import datetime as dt
from typing import Optional

from obra.schemas.dto.base_dto import BaseDTO
from obra.services.warehouse_service import ExitRow, PurchaseRow, WasteRow


class PurchaseDTO(BaseDTO):
    id: int
    project_id: int
    material_id: int
    date: dt.date
    quantity: float
    unit_price: float
    supplier: str
    invoice_number: Optional[str] = None
    notes: Optional[str] = None

    material_name: Optional[str] = None
    stage_name: Optional[str] = None
    activity_name: Optional[str] = None

    @classmethod
    def from_orm_model(cls, purchase) -> "PurchaseDTO":
        return cls(
            id=purchase.id,
            project_id=purchase.project_id,
            material_id=purchase.material_id,
            date=purchase.date,
            quantity=float(purchase.quantity),
            unit_price=float(purchase.unit_price),
            supplier=purchase.supplier,
            invoice_number=purchase.invoice_number,
            notes=purchase.notes,
        )

    @classmethod
    def from_row(cls, row: PurchaseRow) -> "PurchaseDTO":
        dto = cls.from_orm_model(row.purchase)
        dto.material_name = row.material_name
        dto.stage_name = row.stage_name
        dto.activity_name = row.activity_name
        return dto


class WarehouseExitDTO(BaseDTO):
    id: int
    project_id: int
    material_id: int
    stage_id: Optional[int] = None
    activity_id: Optional[int] = None
    date: dt.date
    collaborator: str
    storage_location: Optional[str] = None
    storage_sector: Optional[str] = None
    quantity: float

    material_name: Optional[str] = None
    unit: Optional[str] = None
    stage_name: Optional[str] = None
    activity_name: Optional[str] = None

    @classmethod
    def from_orm_model(cls, movement) -> "WarehouseExitDTO":
        return cls(
            id=movement.id,
            project_id=movement.project_id,
            material_id=movement.material_id,
            stage_id=movement.stage_id,
            activity_id=movement.activity_id,
            date=movement.date,
            collaborator=movement.collaborator,
            storage_location=movement.storage_location,
            storage_sector=movement.storage_sector,
            quantity=float(movement.quantity),
        )

    @classmethod
    def from_row(cls, row: ExitRow) -> "WarehouseExitDTO":
        dto = cls.from_orm_model(row.exit)
        dto.material_name = row.material_name
        dto.unit = row.unit
        dto.stage_name = row.stage_name
        dto.activity_name = row.activity_name
        return dto


class WarehouseWasteDTO(BaseDTO):
    id: int
    project_id: int
    material_id: int
    date: dt.date
    quantity: float
    reason: Optional[str] = None

    material_name: Optional[str] = None
    unit: Optional[str] = None

    @classmethod
    def from_orm_model(cls, movement) -> "WarehouseWasteDTO":
        return cls(
            id=movement.id,
            project_id=movement.project_id,
            material_id=movement.material_id,
            date=movement.date,
            quantity=float(movement.quantity),
            reason=movement.reason,
        )

    @classmethod
    def from_row(cls, row: WasteRow) -> "WarehouseWasteDTO":
        dto = cls.from_orm_model(row.waste)
        dto.material_name = row.material_name
        dto.unit = row.unit
        return dto
