# obra/schemas/dto/project_dto.py
import datetime as dt
from typing import Optional

from obra.models.activity import Activity
from obra.models.project import Project
from obra.models.stage import Stage
from obra.schemas.dto.base_dto import BaseDTO
from obra.services.project_service import ProjectActivityRow


class ProjectDTO(BaseDTO):
    id: int
    name: str
    client: str
    type: str
    address: str
    built_area: float
    start_date: dt.date
    end_date: dt.date
    contract_value: float
    status: str
    created_at: Optional[dt.datetime] = None

    @classmethod
    def from_orm_model(cls, project: Project) -> "ProjectDTO":
        return cls(
            id=project.id,
            name=project.name,
            client=project.client,
            type=project.type,
            address=project.address,
            built_area=float(project.built_area or 0),
            start_date=project.start_date,
            end_date=project.end_date,
            contract_value=float(project.contract_value or 0),
            status=project.status.value,
            created_at=project.created_at,
        )


class StageDTO(BaseDTO):
    id: int
    project_id: int
    name: str
    display_order: int

    @classmethod
    def from_orm_model(cls, stage: Stage) -> "StageDTO":
        return cls(
            id=stage.id,
            project_id=stage.project_id,
            name=stage.name,
            display_order=stage.display_order,
        )


class ActivityDTO(BaseDTO):
    id: int
    stage_id: int
    description: str
    unit: str
    planned_quantity: float
    planned_unit_cost: float
    planned_duration: int
    planned_value: float
    dependency_id: Optional[int] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    display_order: int

    # ===== only filled by the project-wide listing =====
    stage_name: Optional[str] = None
    executed_quantity: Optional[float] = None

    @classmethod
    def from_orm_model(cls, activity: Activity) -> "ActivityDTO":
        return cls(
            id=activity.id,
            stage_id=activity.stage_id,
            description=activity.description,
            unit=activity.unit,
            planned_quantity=float(activity.planned_quantity),
            planned_unit_cost=float(activity.planned_unit_cost),
            planned_duration=activity.planned_duration,
            planned_value=float(activity.planned_value),
            dependency_id=activity.dependency_id,
            start_date=activity.start_date,
            end_date=activity.end_date,
            display_order=activity.display_order,
        )

    @classmethod
    def from_row(cls, row: ProjectActivityRow) -> "ActivityDTO":
        dto = cls.from_orm_model(row.activity)
        dto.stage_name = row.stage_name
        dto.executed_quantity = float(row.executed_quantity)
        return dto
