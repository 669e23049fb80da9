"""
Pytest fixtures for the obra tests.

Every test gets its own file-backed SQLite database, so worker threads in the
concurrency tests share one store through separate connections.
"""
import datetime as dt
import os
import tempfile
from decimal import Decimal

# log files of the test run go to a throwaway directory
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="obra-logs-"))

import pytest  # noqa: E402

from obra.app_factory import create_app  # noqa: E402
from obra.db.session import Database  # noqa: E402
from obra.schemas.inputs import (  # noqa: E402
    ActivityInput,
    MaterialInput,
    ProjectInput,
    PurchaseInput,
    StageInput,
)
from obra.services.material_service import MaterialService  # noqa: E402
from obra.services.project_service import ProjectService  # noqa: E402
from obra.services.warehouse_service import WarehouseService  # noqa: E402


@pytest.fixture(scope="function")
def database(tmp_path):
    """Fresh schema per test."""
    database = Database(f"sqlite:///{tmp_path / 'obra-test.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    yield session
    session.rollback()
    session.close()


# ======================================================
# Builders (each commits, so other sessions see the rows)
# ======================================================

@pytest.fixture
def make_project(db_session):
    def _make(**overrides):
        fields = dict(
            name="Edifício Aurora",
            client="Construtora Horizonte",
            type="Residencial",
            address="Rua das Palmeiras, 45",
            built_area=Decimal("1200"),
            start_date=dt.date(2024, 3, 1),
            end_date=dt.date(2025, 3, 1),
            contract_value=Decimal("2000000"),
        )
        fields.update(overrides)
        project = ProjectService(db_session).create_project(ProjectInput(**fields))
        db_session.commit()
        return project
    return _make


@pytest.fixture
def make_stage(db_session):
    def _make(project_id, name="Fundação", display_order=None):
        stage = ProjectService(db_session).create_stage(
            StageInput(project_id=project_id, name=name, display_order=display_order)
        )
        db_session.commit()
        return stage
    return _make


@pytest.fixture
def make_activity(db_session):
    def _make(stage_id, description="Escavação", planned_quantity="100", planned_unit_cost="50", **overrides):
        fields = dict(
            stage_id=stage_id,
            description=description,
            unit="m3",
            planned_quantity=Decimal(planned_quantity),
            planned_unit_cost=Decimal(planned_unit_cost),
            planned_duration=5,
        )
        fields.update(overrides)
        activity = ProjectService(db_session).create_activity(ActivityInput(**fields))
        db_session.commit()
        return activity
    return _make


@pytest.fixture
def make_material(db_session):
    def _make(project_id, description="Cimento CP-II", **overrides):
        fields = dict(
            project_id=project_id,
            description=description,
            unit="saco",
            quantity=Decimal("200"),
            unit_cost=Decimal("32.5"),
        )
        fields.update(overrides)
        material = MaterialService(db_session).create_material(MaterialInput(**fields))
        db_session.commit()
        return material
    return _make


@pytest.fixture
def make_purchase(db_session):
    def _make(project_id, material_id, quantity, date=dt.date(2024, 4, 1)):
        service = WarehouseService(db_session, MaterialService(db_session))
        purchase = service.create_purchase(
            PurchaseInput(
                project_id=project_id,
                material_id=material_id,
                date=date,
                quantity=Decimal(quantity),
                unit_price=Decimal("30"),
                supplier="Depósito Central",
            )
        )
        db_session.commit()
        return purchase
    return _make


# ======================================================
# HTTP
# ======================================================

@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATABASE_URL": f"sqlite:///{tmp_path / 'obra-app.db'}",
        "SESSION_FILE_DIR": str(tmp_path / "sessions"),
    })
    database = app.extensions["obra_db"]
    database.create_all()
    yield app
    database.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post("/api/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200
    return client
