# obra/services/warehouse_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, aliased

from obra.db.concurrency import lock_for_update
from obra.db.enums import StockMovementType
from obra.logger import get_logger
from obra.models.activity import Activity
from obra.models.material import Material
from obra.models.project import Project
from obra.models.purchase import Purchase
from obra.models.stage import Stage
from obra.models.warehouse_exit import WarehouseExit
from obra.models.warehouse_waste import WarehouseWaste
from obra.schemas.inputs import PurchaseInput, WarehouseExitInput, WarehouseWasteInput
from obra.services.amounts import to_decimal
from obra.services.errors import InsufficientStockError, NotFoundError
from obra.services.material_service import MaterialService

logger = get_logger(__name__)


@dataclass
class PurchaseRow:
    purchase: Purchase
    material_name: str
    stage_name: Optional[str]
    activity_name: Optional[str]


@dataclass
class ExitRow:
    exit: WarehouseExit
    material_name: str
    unit: str
    stage_name: Optional[str]
    activity_name: Optional[str]


@dataclass
class WasteRow:
    waste: WarehouseWaste
    material_name: str
    unit: str


class WarehouseService:
    """
    Warehouse ledger: purchases in, exits and waste out.

    Exits and waste cannot take the derived stock of a material below zero.
    Deleting a purchase is always allowed, even when the stock then goes negative.
    """

    def __init__(self, db: Session, material_service: MaterialService):
        self.db = db
        self.material_service = material_service

    # ======================================================
    # Purchases
    # ======================================================

    def create_purchase(self, data: PurchaseInput) -> Purchase:
        material = self._load_material(data.project_id, data.material_id)

        purchase = Purchase(
            project_id=data.project_id,
            material_id=material.id,
            date=data.date,
            quantity=to_decimal(data.quantity),
            unit_price=to_decimal(data.unit_price),
            supplier=data.supplier,
            invoice_number=data.invoice_number,
            notes=data.notes,
        )
        self.db.add(purchase)
        self.db.flush()
        logger.info(
            "purchase created id=%s material=%s quantity=%s",
            purchase.id, material.id, purchase.quantity,
        )
        return purchase

    def delete_purchase(self, purchase_id: int) -> None:
        purchase = self.db.get(Purchase, purchase_id)
        if purchase is None:
            raise NotFoundError("Purchase", purchase_id)
        self.db.delete(purchase)
        self.db.flush()
        logger.info("purchase deleted id=%s material=%s", purchase_id, purchase.material_id)

    def project_purchases(self, project_id: int) -> List[PurchaseRow]:
        self._assert_project(project_id)
        stage = aliased(Stage)
        activity = aliased(Activity)
        rows = (
            self.db.query(Purchase, Material.description, stage.name, activity.description)
            .join(Material, Purchase.material_id == Material.id)
            .outerjoin(stage, Material.stage_id == stage.id)
            .outerjoin(activity, Material.activity_id == activity.id)
            .filter(Purchase.project_id == project_id)
            .order_by(Purchase.date.desc(), Purchase.id.desc())
            .all()
        )
        return [
            PurchaseRow(
                purchase=purchase,
                material_name=material_name,
                stage_name=stage_name,
                activity_name=activity_name,
            )
            for purchase, material_name, stage_name, activity_name in rows
        ]

    # ======================================================
    # Exits / waste
    # ======================================================

    def create_exit(self, data: WarehouseExitInput) -> WarehouseExit:
        material = self._load_material(data.project_id, data.material_id, lock=True)
        self.material_service.check_links(data.project_id, data.stage_id, data.activity_id)

        movement = WarehouseExit(
            project_id=data.project_id,
            material_id=material.id,
            stage_id=data.stage_id,
            activity_id=data.activity_id,
            date=data.date,
            collaborator=data.collaborator,
            storage_location=data.storage_location,
            storage_sector=data.storage_sector,
            quantity=to_decimal(data.quantity),
        )
        return self._append_outflow(material, movement, StockMovementType.EXIT)

    def create_waste(self, data: WarehouseWasteInput) -> WarehouseWaste:
        material = self._load_material(data.project_id, data.material_id, lock=True)

        movement = WarehouseWaste(
            project_id=data.project_id,
            material_id=material.id,
            date=data.date,
            quantity=to_decimal(data.quantity),
            reason=data.reason,
        )
        return self._append_outflow(material, movement, StockMovementType.WASTE)

    def delete_exit(self, exit_id: int) -> None:
        movement = self.db.get(WarehouseExit, exit_id)
        if movement is None:
            raise NotFoundError("WarehouseExit", exit_id)
        self.db.delete(movement)
        self.db.flush()
        logger.info("warehouse exit deleted id=%s", exit_id)

    def delete_waste(self, waste_id: int) -> None:
        movement = self.db.get(WarehouseWaste, waste_id)
        if movement is None:
            raise NotFoundError("WarehouseWaste", waste_id)
        self.db.delete(movement)
        self.db.flush()
        logger.info("warehouse waste deleted id=%s", waste_id)

    def project_exits(self, project_id: int) -> List[ExitRow]:
        self._assert_project(project_id)
        rows = (
            self.db.query(WarehouseExit, Material.description, Material.unit, Stage.name, Activity.description)
            .join(Material, WarehouseExit.material_id == Material.id)
            .outerjoin(Stage, WarehouseExit.stage_id == Stage.id)
            .outerjoin(Activity, WarehouseExit.activity_id == Activity.id)
            .filter(WarehouseExit.project_id == project_id)
            .order_by(WarehouseExit.date.desc(), WarehouseExit.id.desc())
            .all()
        )
        return [
            ExitRow(
                exit=movement,
                material_name=material_name,
                unit=unit,
                stage_name=stage_name,
                activity_name=activity_name,
            )
            for movement, material_name, unit, stage_name, activity_name in rows
        ]

    def project_waste(self, project_id: int) -> List[WasteRow]:
        self._assert_project(project_id)
        rows = (
            self.db.query(WarehouseWaste, Material.description, Material.unit)
            .join(Material, WarehouseWaste.material_id == Material.id)
            .filter(WarehouseWaste.project_id == project_id)
            .order_by(WarehouseWaste.date.desc(), WarehouseWaste.id.desc())
            .all()
        )
        return [
            WasteRow(waste=movement, material_name=material_name, unit=unit)
            for movement, material_name, unit in rows
        ]

    # ======================================================
    # Internal helpers
    # ======================================================

    def _append_outflow(self, material: Material, movement, movement_type: StockMovementType):
        '''
        Same guard as the daily logs: check, insert, re-check under the write
        lock, compensate if another outflow got in first.
        '''
        quantity = movement.quantity

        # 1️⃣ pre-check
        available = self.material_service.current_stock(material.id)
        self._assert_available(material, movement_type, available, quantity)

        # 2️⃣ insert
        self.db.add(movement)
        self.db.flush()

        # 3️⃣ re-verify
        remaining = self.material_service.current_stock(material.id)
        if remaining < 0:
            self.db.delete(movement)
            self.db.flush()
            self._assert_available(material, movement_type, remaining + quantity, quantity)

        logger.info(
            "warehouse %s created id=%s material=%s quantity=%s stock=%s",
            movement_type.value, movement.id, material.id, quantity, remaining,
        )
        return movement

    def _assert_available(
        self,
        material: Material,
        movement_type: StockMovementType,
        available: Decimal,
        requested: Decimal,
    ) -> None:
        if requested <= available:
            return
        logger.warning(
            "warehouse %s rejected: material=%s requested=%s available=%s",
            movement_type.value, material.id, requested, available,
        )
        raise InsufficientStockError(
            material_id=material.id,
            material_description=material.description,
            movement=movement_type.value,
            current_stock=available,
            requested_quantity=requested,
        )

    def _load_material(self, project_id: int, material_id: int, *, lock: bool = False) -> Material:
        query = self.db.query(Material).filter(Material.id == material_id)
        if lock:
            query = lock_for_update(query)
        material = query.first()
        if material is None or material.project_id != project_id:
            raise NotFoundError("Material", material_id)
        return material

    def _assert_project(self, project_id: int) -> None:
        if self.db.get(Project, project_id) is None:
            raise NotFoundError("Project", project_id)
