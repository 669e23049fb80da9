# obra/schemas/inputs.py
import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from obra.db.enums import ProjectStatus


class InputModel(BaseModel):
    '''Create payloads: unknown keys are rejected instead of silently dropped.'''
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ProjectInput(InputModel):
    name: str = Field(min_length=1)
    client: str = Field(min_length=1)
    type: str = Field(min_length=1)
    address: str = Field(min_length=1)
    built_area: Decimal = Field(ge=0)
    start_date: dt.date
    end_date: dt.date
    contract_value: Decimal = Field(ge=0)
    status: ProjectStatus = ProjectStatus.planning

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class StageInput(InputModel):
    project_id: int
    name: str = Field(min_length=1)
    # None -> appended after the current last stage
    display_order: Optional[int] = None


class ActivityInput(InputModel):
    stage_id: int
    description: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    planned_quantity: Decimal = Field(ge=0)
    planned_unit_cost: Decimal = Field(ge=0)
    planned_duration: int = Field(ge=1)
    dependency_id: Optional[int] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class DailyLogInput(InputModel):
    activity_id: int
    date: dt.date
    executed_quantity: Decimal = Field(ge=0)
    real_cost: Decimal = Field(ge=0)
    notes: Optional[str] = None


class MaterialInput(InputModel):
    project_id: int
    stage_id: Optional[int] = None
    activity_id: Optional[int] = None
    description: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    quantity: Decimal = Field(ge=0)
    unit_cost: Decimal = Field(ge=0)
    category: Optional[str] = None


class PurchaseInput(InputModel):
    project_id: int
    material_id: int
    date: dt.date
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    supplier: str = Field(min_length=1)
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


class WarehouseExitInput(InputModel):
    project_id: int
    material_id: int
    stage_id: Optional[int] = None
    activity_id: Optional[int] = None
    date: dt.date
    collaborator: str = Field(min_length=1)
    storage_location: Optional[str] = None
    storage_sector: Optional[str] = None
    quantity: Decimal = Field(ge=0)


class WarehouseWasteInput(InputModel):
    project_id: int
    material_id: int
    date: dt.date
    quantity: Decimal = Field(ge=0)
    reason: Optional[str] = None


class ReorderItem(InputModel):
    id: int
    order: int
