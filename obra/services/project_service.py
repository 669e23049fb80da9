# obra/services/project_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from obra.db.concurrency import lock_for_update
from obra.logger import get_logger
from obra.models.activity import Activity
from obra.models.daily_log import DailyLog
from obra.models.project import Project
from obra.models.stage import Stage
from obra.schemas.inputs import ActivityInput, ProjectInput, ReorderItem, StageInput
from obra.schemas.patches import ActivityPatch, ProjectPatch, StagePatch, coerce_patch
from obra.services.amounts import to_decimal
from obra.services.errors import NotFoundError, ValidationError

logger = get_logger(__name__)


@dataclass
class ProjectActivityRow:
    activity: Activity
    stage_name: str
    executed_quantity: Decimal


class ProjectService:
    """
    Service for the work breakdown of a project: Project -> Stage -> Activity.

    - create / read / patch / delete for the three levels
    - ordering of stages and activities (display_order)
    - ProjectService never writes Daily Logs or warehouse rows
    """

    def __init__(self, db: Session):
        self.db = db

    # ======================================================
    # Projects
    # ======================================================

    def create_project(self, data: ProjectInput) -> Project:
        project = Project(**data.model_dump())
        self.db.add(project)
        self.db.flush()
        logger.info("project created id=%s name=%s", project.id, project.name)
        return project

    def get_project(self, project_id: int) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    def list_projects(self) -> List[Project]:
        return (
            self.db.query(Project)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    def update_project(self, project_id: int, updates: Union[ProjectPatch, dict]) -> Project:
        '''
        Apply a ProjectPatch (or a dict validated into one).

        :param project_id: project to change
        :param updates: only the keys present are written
        :raises NotFoundError: unknown project
        :raises UnknownFieldError: dict carries a non-editable key
        '''
        patch = coerce_patch(ProjectPatch, updates, entity="Project")
        project = self.get_project(project_id)

        changes = patch.changes()
        start = changes.get("start_date", project.start_date)
        end = changes.get("end_date", project.end_date)
        if end < start:
            raise ValidationError("end_date must not be before start_date")

        for field, value in changes.items():
            setattr(project, field, value)
        self.db.flush()
        return project

    def delete_project(self, project_id: int) -> None:
        project = self.get_project(project_id)
        self.db.delete(project)
        self.db.flush()
        logger.info("project deleted id=%s", project_id)

    # ======================================================
    # Stages
    # ======================================================

    def create_stage(self, data: StageInput) -> Stage:
        self.get_project(data.project_id)

        display_order = data.display_order
        if display_order is None:
            current_max = (
                self.db.query(func.max(Stage.display_order))
                .filter(Stage.project_id == data.project_id)
                .scalar()
            )
            display_order = (current_max or 0) + 1

        stage = Stage(
            project_id=data.project_id,
            name=data.name,
            display_order=display_order,
        )
        self.db.add(stage)
        self.db.flush()
        return stage

    def get_stage(self, stage_id: int) -> Stage:
        stage = self.db.get(Stage, stage_id)
        if stage is None:
            raise NotFoundError("Stage", stage_id)
        return stage

    def list_stages(self, project_id: int) -> List[Stage]:
        self.get_project(project_id)
        return (
            self.db.query(Stage)
            .filter(Stage.project_id == project_id)
            .order_by(Stage.display_order, Stage.id)
            .all()
        )

    def update_stage(self, stage_id: int, updates: Union[StagePatch, dict]) -> Stage:
        patch = coerce_patch(StagePatch, updates, entity="Stage")
        stage = self.get_stage(stage_id)
        for field, value in patch.changes().items():
            setattr(stage, field, value)
        self.db.flush()
        return stage

    def reorder_stages(self, project_id: int, items: Iterable[Union[ReorderItem, dict]]) -> List[Stage]:
        '''
        Write new display_order values for stages of one project.
        Every id must belong to the project, otherwise nothing is applied.
        '''
        self.get_project(project_id)
        orders = [self._to_reorder_item(i) for i in items]

        stages = {}
        for item in orders:
            stage = self.db.get(Stage, item.id)
            if stage is None or stage.project_id != project_id:
                raise NotFoundError("Stage", item.id)
            stages[item.id] = stage

        for item in orders:
            stages[item.id].display_order = item.order
        self.db.flush()
        return self.list_stages(project_id)

    def delete_stage(self, stage_id: int) -> None:
        # activities and their daily logs go with it (FK cascade)
        stage = self.get_stage(stage_id)
        self.db.delete(stage)
        self.db.flush()
        logger.info("stage deleted id=%s project=%s", stage_id, stage.project_id)

    # ======================================================
    # Activities
    # ======================================================

    def create_activity(self, data: ActivityInput) -> Activity:
        stage = self.get_stage(data.stage_id)
        if data.dependency_id is not None:
            self._check_dependency(stage.project_id, data.dependency_id)

        current_max = (
            self.db.query(func.max(Activity.display_order))
            .filter(Activity.stage_id == data.stage_id)
            .scalar()
        )

        activity = Activity(
            **data.model_dump(),
            display_order=(current_max or 0) + 1,
        )
        self.db.add(activity)
        self.db.flush()
        logger.info(
            "activity created id=%s stage=%s planned=%s x %s",
            activity.id, activity.stage_id, activity.planned_quantity, activity.planned_unit_cost,
        )
        return activity

    def get_activity(self, activity_id: int) -> Activity:
        activity = self.db.get(Activity, activity_id)
        if activity is None:
            raise NotFoundError("Activity", activity_id)
        return activity

    def list_stage_activities(self, stage_id: int) -> List[Activity]:
        self.get_stage(stage_id)
        return (
            self.db.query(Activity)
            .filter(Activity.stage_id == stage_id)
            .order_by(Activity.display_order, Activity.id)
            .all()
        )

    def list_project_activities(self, project_id: int) -> List[ProjectActivityRow]:
        '''
        All activities of a project with their stage name and executed total,
        ordered by stage order then activity order.
        '''
        self.get_project(project_id)

        executed = (
            self.db.query(
                DailyLog.activity_id.label("activity_id"),
                func.sum(DailyLog.executed_quantity).label("total_executed"),
            )
            .group_by(DailyLog.activity_id)
            .subquery()
        )

        rows = (
            self.db.query(Activity, Stage.name, executed.c.total_executed)
            .join(Stage, Activity.stage_id == Stage.id)
            .outerjoin(executed, executed.c.activity_id == Activity.id)
            .filter(Stage.project_id == project_id)
            .order_by(Stage.display_order, Stage.id, Activity.display_order, Activity.id)
            .all()
        )
        return [
            ProjectActivityRow(
                activity=activity,
                stage_name=stage_name,
                executed_quantity=to_decimal(total_executed),
            )
            for activity, stage_name, total_executed in rows
        ]

    def update_activity(self, activity_id: int, updates: Union[ActivityPatch, dict]) -> Activity:
        '''
        Patch an activity.

        planned_quantity cannot drop below what the daily logs already
        executed, so the executed <= planned cap still holds after the edit.
        '''
        patch = coerce_patch(ActivityPatch, updates, entity="Activity")
        changes = patch.changes()

        activity = lock_for_update(
            self.db.query(Activity).filter(Activity.id == activity_id)
        ).first()
        if activity is None:
            raise NotFoundError("Activity", activity_id)

        if changes.get("dependency_id") is not None:
            if changes["dependency_id"] == activity.id:
                raise ValidationError("An activity cannot depend on itself")
            self._check_dependency(activity.stage.project_id, changes["dependency_id"])

        if "planned_quantity" in changes:
            executed_total = to_decimal(
                self.db.query(func.sum(DailyLog.executed_quantity))
                .filter(DailyLog.activity_id == activity.id)
                .scalar()
            )
            if changes["planned_quantity"] < executed_total:
                raise ValidationError(
                    f'Planned quantity for "{activity.description}" cannot be lower than '
                    f"the quantity already executed ({executed_total.normalize():f})."
                )

        for field, value in changes.items():
            setattr(activity, field, value)
        self.db.flush()
        return activity

    def reorder_activities(self, stage_id: int, items: Iterable[Union[ReorderItem, dict]]) -> List[Activity]:
        self.get_stage(stage_id)
        orders = [self._to_reorder_item(i) for i in items]

        activities = {}
        for item in orders:
            activity = self.db.get(Activity, item.id)
            if activity is None or activity.stage_id != stage_id:
                raise NotFoundError("Activity", item.id)
            activities[item.id] = activity

        for item in orders:
            activities[item.id].display_order = item.order
        self.db.flush()
        return self.list_stage_activities(stage_id)

    def delete_activity(self, activity_id: int) -> None:
        activity = self.get_activity(activity_id)
        self.db.delete(activity)
        self.db.flush()
        logger.info("activity deleted id=%s", activity_id)

    # ======================================================
    # Internal helpers
    # ======================================================

    def _check_dependency(self, project_id: int, dependency_id: int) -> Activity:
        dependency = self.db.get(Activity, dependency_id)
        if dependency is None or dependency.stage.project_id != project_id:
            raise NotFoundError("Activity", dependency_id)
        return dependency

    @staticmethod
    def _to_reorder_item(item) -> ReorderItem:
        return item if isinstance(item, ReorderItem) else ReorderItem.model_validate(item)
