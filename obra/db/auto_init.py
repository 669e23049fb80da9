"""
Database bootstrap run at startup: create missing tables and, on request,
insert the demo project.
"""
# obra/db/auto_init.py
import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from obra.db.enums import ProjectStatus
from obra.db.session import Database
from obra.logger import get_logger
from obra.models.project import Project
from obra.schemas.inputs import ActivityInput, ProjectInput, StageInput
from obra.services.project_service import ProjectService

logger = get_logger(__name__)

DEMO_PROJECT_NAME = "Residencial Villa Verde"
DEMO_STAGES = [
    "Serviços Preliminares",
    "Fundação",
    "Estrutura",
    "Alvenaria",
    "Instalações",
    "Acabamento",
]
ACTIVITIES_PER_STAGE = 3


def check_tables_exist(database: Database) -> bool:
    inspector = inspect(database.engine)
    return "projects" in inspector.get_table_names()


def seed_demo_project(db: Session) -> Optional[Project]:
    """
    Insert the demo project (6 stages x 3 activities) when the database has
    no project yet. Returns the new project, or None when nothing was done.
    Flushes only; the caller commits.
    """
    if db.query(Project.id).first() is not None:
        logger.info("projects already present, demo seed skipped")
        return None

    service = ProjectService(db)
    project = service.create_project(
        ProjectInput(
            name=DEMO_PROJECT_NAME,
            client="Construtora Horizonte",
            type="Residencial Multifamiliar",
            address="Av. das Flores, 123",
            built_area=Decimal("2500"),
            start_date=dt.date(2024, 1, 15),
            end_date=dt.date(2025, 6, 30),
            contract_value=Decimal("4500000"),
            status=ProjectStatus.in_progress,
        )
    )

    for order, stage_name in enumerate(DEMO_STAGES, start=1):
        stage = service.create_stage(
            StageInput(project_id=project.id, name=stage_name, display_order=order)
        )
        for i in range(1, ACTIVITIES_PER_STAGE + 1):
            service.create_activity(
                ActivityInput(
                    stage_id=stage.id,
                    description=f"Atividade {i} - {stage_name}",
                    unit="m2",
                    planned_quantity=Decimal("100"),
                    planned_unit_cost=Decimal(50 + 10 * order + 5 * i),
                    planned_duration=10,
                )
            )

    logger.info("demo project seeded id=%s", project.id)
    return project


def auto_init(database: Database, *, seed_demo: bool = False) -> None:
    """
    Startup check: create the tables when the database is empty,
    optionally seed the demo project.
    """
    logger.info("checking database initialisation: %s", database.url)

    if not check_tables_exist(database):
        logger.info("tables missing, creating schema")
        database.create_all()
    else:
        logger.info("tables already present")

    if seed_demo:
        db = database.session()
        try:
            seed_demo_project(db)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("demo seed failed")
            raise
        finally:
            db.close()
