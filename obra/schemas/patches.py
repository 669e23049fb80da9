# obra/schemas/patches.py
import datetime as dt
from decimal import Decimal
from typing import Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from obra.db.enums import ProjectStatus
from obra.services.errors import UnknownFieldError


class PatchModel(BaseModel):
    """
    Partial update of one entity.

    Each subclass lists exactly the fields a user may change. Only the fields
    present in the payload are applied; omitted fields keep their value.
    Fields outside NULLABLE_FIELDS cannot be cleared with null.
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_on_required(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.NULLABLE_FIELDS:
                raise ValueError(f"{name} cannot be null")
        return self

    @classmethod
    def editable_fields(cls) -> FrozenSet[str]:
        return frozenset(cls.model_fields)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProjectPatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    client: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    built_area: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    contract_value: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[ProjectStatus] = None


class StagePatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    display_order: Optional[int] = None


class ActivityPatch(PatchModel):
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"dependency_id", "start_date", "end_date"}
    )

    description: Optional[str] = Field(default=None, min_length=1)
    unit: Optional[str] = Field(default=None, min_length=1)
    planned_quantity: Optional[Decimal] = Field(default=None, ge=0)
    planned_unit_cost: Optional[Decimal] = Field(default=None, ge=0)
    planned_duration: Optional[int] = Field(default=None, ge=1)
    dependency_id: Optional[int] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class MaterialPatch(PatchModel):
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"stage_id", "activity_id", "category"}
    )

    stage_id: Optional[int] = None
    activity_id: Optional[int] = None
    description: Optional[str] = Field(default=None, min_length=1)
    unit: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    unit_cost: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None


def coerce_patch(patch_cls, updates, *, entity: str) -> PatchModel:
    '''
    Accept a ready patch model or a raw dict from the HTTP layer.
    Unknown keys are a domain error (UnknownFieldError), bad values a schema error.
    '''
    if isinstance(updates, patch_cls):
        return updates
    unknown = set(updates) - patch_cls.editable_fields()
    if unknown:
        raise UnknownFieldError(entity, unknown)
    return patch_cls.model_validate(updates)
