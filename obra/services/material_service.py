# obra/services/material_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session, aliased

from obra.logger import get_logger
from obra.models.activity import Activity
from obra.models.material import Material
from obra.models.project import Project
from obra.models.purchase import Purchase
from obra.models.stage import Stage
from obra.models.warehouse_exit import WarehouseExit
from obra.models.warehouse_waste import WarehouseWaste
from obra.schemas.inputs import MaterialInput
from obra.schemas.patches import MaterialPatch, coerce_patch
from obra.services.amounts import to_decimal
from obra.services.errors import NotFoundError

logger = get_logger(__name__)


@dataclass
class StockItem:
    material: Material
    stage_name: Optional[str]
    activity_name: Optional[str]
    purchased_quantity: Decimal
    exited_quantity: Decimal
    waste_quantity: Decimal

    @property
    def current_stock(self) -> Decimal:
        # may be negative, e.g. after a purchase is deleted
        return self.purchased_quantity - self.exited_quantity - self.waste_quantity


def _movement_total(model):
    '''Correlated Σ quantity of one ledger table for the outer Material row.'''
    return func.coalesce(
        select(func.sum(model.quantity))
        .where(model.material_id == Material.id)
        .correlate(Material)
        .scalar_subquery(),
        0,
    )


class MaterialService:
    """
    Material take-off and derived stock.

    Stock is never stored:
        current_stock = Σ purchases - Σ exits - Σ waste
    """

    def __init__(self, db: Session):
        self.db = db

    # ======================================================
    # Stock (read side)
    # ======================================================

    def project_materials(self, project_id: int) -> List[StockItem]:
        if self.db.get(Project, project_id) is None:
            raise NotFoundError("Project", project_id)
        return self._stock_items(Material.project_id == project_id)

    def material_stock(self, material_id: int) -> StockItem:
        items = self._stock_items(Material.id == material_id)
        if not items:
            raise NotFoundError("Material", material_id)
        return items[0]

    def current_stock(self, material_id: int) -> Decimal:
        return self.material_stock(material_id).current_stock

    # ======================================================
    # Take-off CRUD
    # ======================================================

    def create_material(self, data: MaterialInput) -> Material:
        if self.db.get(Project, data.project_id) is None:
            raise NotFoundError("Project", data.project_id)
        self.check_links(data.project_id, data.stage_id, data.activity_id)

        material = Material(**data.model_dump())
        self.db.add(material)
        self.db.flush()
        logger.info("material created id=%s project=%s", material.id, material.project_id)
        return material

    def get_material(self, material_id: int) -> Material:
        material = self.db.get(Material, material_id)
        if material is None:
            raise NotFoundError("Material", material_id)
        return material

    def update_material(self, material_id: int, updates: Union[MaterialPatch, dict]) -> Material:
        patch = coerce_patch(MaterialPatch, updates, entity="Material")
        material = self.get_material(material_id)

        changes = patch.changes()
        self.check_links(
            material.project_id,
            changes.get("stage_id", material.stage_id),
            changes.get("activity_id", material.activity_id),
        )

        for field, value in changes.items():
            setattr(material, field, value)
        self.db.flush()
        return material

    def delete_material(self, material_id: int) -> None:
        # purchases, exits and waste go with it
        material = self.get_material(material_id)
        self.db.delete(material)
        self.db.flush()
        logger.info("material deleted id=%s", material_id)

    # ======================================================
    # Internal helpers
    # ======================================================

    def _stock_items(self, *criteria) -> List[StockItem]:
        stage = aliased(Stage)
        activity = aliased(Activity)
        rows = (
            self.db.query(
                Material,
                stage.name,
                activity.description,
                _movement_total(Purchase),
                _movement_total(WarehouseExit),
                _movement_total(WarehouseWaste),
            )
            .outerjoin(stage, Material.stage_id == stage.id)
            .outerjoin(activity, Material.activity_id == activity.id)
            .filter(*criteria)
            .order_by(Material.id)
            .all()
        )
        return [
            StockItem(
                material=material,
                stage_name=stage_name,
                activity_name=activity_name,
                purchased_quantity=to_decimal(purchased),
                exited_quantity=to_decimal(exited),
                waste_quantity=to_decimal(wasted),
            )
            for material, stage_name, activity_name, purchased, exited, wasted in rows
        ]

    def check_links(self, project_id: int, stage_id: Optional[int], activity_id: Optional[int]) -> None:
        if stage_id is not None:
            stage = self.db.get(Stage, stage_id)
            if stage is None or stage.project_id != project_id:
                raise NotFoundError("Stage", stage_id)
        if activity_id is not None:
            activity = self.db.get(Activity, activity_id)
            if activity is None or activity.stage.project_id != project_id:
                raise NotFoundError("Activity", activity_id)
