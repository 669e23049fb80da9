# obra/services/errors.py
from decimal import Decimal
from typing import Optional


class ObraError(Exception):
    """Base class of every domain failure raised by the services."""


class NotFoundError(ObraError, LookupError):
    """A referenced Project / Stage / Activity / Material / ledger row does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ValidationError(ObraError, ValueError):
    """
    Domain-rule violation. The message is meant for direct display to the user;
    callers must resubmit corrected input, nothing is retried.
    """

    def detail(self) -> dict:
        return {}


class UnknownFieldError(ValidationError):
    def __init__(self, entity: str, fields):
        self.entity = entity
        self.fields = sorted(fields)
        super().__init__(f"Field(s) not editable on {entity}: {', '.join(self.fields)}")

    def detail(self) -> dict:
        return {"entity": self.entity, "fields": self.fields}


class ExecutedQuantityExceededError(ValidationError):
    """Σ executed_quantity of an activity would go above its planned_quantity."""

    def __init__(
        self,
        *,
        activity_id: int,
        activity_description: str,
        planned_quantity: Decimal,
        existing_total: Decimal,
        attempted_total: Decimal,
    ):
        self.activity_id = activity_id
        self.activity_description = activity_description
        self.planned_quantity = planned_quantity
        self.existing_total = existing_total
        self.attempted_total = attempted_total
        self.overage = attempted_total - planned_quantity
        super().__init__(
            f'Total executed quantity ({_fmt(attempted_total)}) for "{activity_description}" '
            f"would exceed the planned quantity ({_fmt(planned_quantity)}) "
            f"by {_fmt(self.overage)}."
        )

    def detail(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "activity_description": self.activity_description,
            "planned_quantity": float(self.planned_quantity),
            "existing_total": float(self.existing_total),
            "attempted_total": float(self.attempted_total),
            "overage": float(self.overage),
        }


class InsufficientStockError(ValidationError):
    """A warehouse exit/waste would take the derived stock of a material below zero."""

    def __init__(
        self,
        *,
        material_id: int,
        material_description: str,
        movement: str,
        current_stock: Decimal,
        requested_quantity: Decimal,
    ):
        self.material_id = material_id
        self.material_description = material_description
        self.movement = movement
        self.current_stock = current_stock
        self.requested_quantity = requested_quantity
        self.shortfall = requested_quantity - current_stock
        super().__init__(
            f'Not enough stock of "{material_description}" for this {movement}: '
            f"requested {_fmt(requested_quantity)}, available {_fmt(current_stock)}."
        )

    def detail(self) -> dict:
        return {
            "material_id": self.material_id,
            "material_description": self.material_description,
            "movement": self.movement,
            "current_stock": float(self.current_stock),
            "requested_quantity": float(self.requested_quantity),
            "shortfall": float(self.shortfall),
        }


def _fmt(value: Optional[Decimal]) -> str:
    if value is None:
        return "0"
    # 10.0000 -> 10, 2.5000 -> 2.5
    text = format(value.normalize(), "f") if isinstance(value, Decimal) else str(value)
    return text
