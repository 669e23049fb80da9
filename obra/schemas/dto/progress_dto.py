# obra/schemas/dto/progress_dto.py
from typing import List

from obra.schemas.dto.base_dto import BaseDTO
from obra.services.budget_service import StageCost
from obra.services.tracking_service import ProgressResult


class ProgressDTO(BaseDTO):
    project_id: int
    bac: float
    ac: float
    ev: float
    cpi: float
    spi: float
    percent_complete: float

    # spi uses a fixed 50% planned value, not a schedule baseline
    spi_is_approximate: bool
    skipped_activity_ids: List[int] = []

    @classmethod
    def from_domain_model(cls, progress: ProgressResult) -> "ProgressDTO":
        return cls(
            project_id=progress.project_id,
            bac=float(progress.bac),
            ac=float(progress.ac),
            ev=float(progress.ev),
            cpi=float(progress.cpi),
            spi=float(progress.spi),
            percent_complete=float(progress.percent_complete),
            spi_is_approximate=progress.spi_is_approximate,
            skipped_activity_ids=list(progress.skipped_activity_ids),
        )


class StageCostDTO(BaseDTO):
    stage_id: int
    name: str
    display_order: int
    total_cost: float

    @classmethod
    def from_domain_model(cls, stage_cost: StageCost) -> "StageCostDTO":
        return cls(
            stage_id=stage_cost.stage_id,
            name=stage_cost.name,
            display_order=stage_cost.display_order,
            total_cost=float(stage_cost.total_cost),
        )
