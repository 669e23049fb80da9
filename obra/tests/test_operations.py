import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import OperationalError

from obra.operations.daily_log_ops import create_daily_log
from obra.operations.error_classification import classify_error
from obra.operations.progress_ops import get_cost_by_stage, get_project_progress
from obra.schemas.error_type import ErrorType
from obra.schemas.inputs import DailyLogInput
from obra.services.errors import NotFoundError, UnknownFieldError, ValidationError


def test_classification():
    with pytest.raises(SchemaValidationError) as schema_error:
        DailyLogInput(activity_id=1, date="2024-01-01", executed_quantity=-1, real_cost=0)

    assert classify_error(schema_error.value)[0] == ErrorType.INPUT_ERROR
    assert classify_error(UnknownFieldError("Stage", {"color"}))[0] == ErrorType.INPUT_ERROR
    assert classify_error(NotFoundError("Activity", 3)) == (ErrorType.NOT_FOUND, {"entity": "Activity", "id": 3})
    assert classify_error(ValidationError("nope"))[0] == ErrorType.VALIDATION_ERROR
    assert classify_error(OperationalError("SELECT 1", {}, Exception("database is locked")))[0] == ErrorType.DATABASE_ERROR
    assert classify_error(RuntimeError("boom"))[0] == ErrorType.SYSTEM_ERROR


def test_progress_operation(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id, "Fundação")
    make_activity(stage.id, "Escavação", planned_quantity="100", planned_unit_cost="50")

    result = get_project_progress(db_session, project.id)

    assert result.ok
    assert result.data["bac"] == 5000.0
    assert result.data["cpi"] == 1.0
    assert result.data["spi_is_approximate"] is True
    assert result.side_effect is False


def test_cost_by_stage_operation(db_session, make_project, make_stage):
    project = make_project()
    make_stage(project.id, "Fundação")

    result = get_cost_by_stage(db_session, project.id)

    assert result.ok
    assert result.data["stages"][0]["name"] == "Fundação"
    assert result.data["stages"][0]["total_cost"] == 0.0


def test_create_daily_log_operation(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id)
    activity = make_activity(stage.id, planned_quantity="10")

    ok = create_daily_log(
        db_session,
        {"activity_id": activity.id, "date": "2024-05-01", "executed_quantity": 9, "real_cost": 450},
    )
    over = create_daily_log(
        db_session,
        {"activity_id": activity.id, "date": "2024-05-02", "executed_quantity": 2, "real_cost": 100},
    )
    bad = create_daily_log(db_session, {"activity_id": activity.id, "quantity": 1})
    missing = create_daily_log(
        db_session,
        {"activity_id": 999, "date": "2024-05-02", "executed_quantity": 1, "real_cost": 1},
    )

    assert ok.ok and ok.side_effect
    assert ok.data["executed_quantity"] == 9.0
    assert ok.data["date"] == "2024-05-01"

    assert over.error_type == ErrorType.VALIDATION_ERROR
    assert over.error_detail["overage"] == 1.0
    assert over.error_detail["existing_total"] == 9.0

    assert bad.error_type == ErrorType.INPUT_ERROR
    assert missing.error_type == ErrorType.NOT_FOUND
