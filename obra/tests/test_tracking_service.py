import datetime as dt
from decimal import Decimal

import pytest

from obra.schemas.inputs import DailyLogInput
from obra.services.budget_service import BudgetService
from obra.services.daily_log_service import DailyLogService
from obra.services.errors import NotFoundError
from obra.services.tracking_service import TrackingService


def _tracking(db):
    return TrackingService(db, BudgetService(db))


def _log(db, activity_id, executed, cost, date=dt.date(2024, 5, 10)):
    log = DailyLogService(db).create_daily_log(
        DailyLogInput(
            activity_id=activity_id,
            date=date,
            executed_quantity=Decimal(executed),
            real_cost=Decimal(cost),
        )
    )
    db.commit()
    return log


def test_excavation_scenario(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id, "Fundação")
    activity = make_activity(stage.id, "Escavação", planned_quantity="100", planned_unit_cost="50")
    tracking = _tracking(db_session)

    before = tracking.project_progress(project.id)
    assert before.bac == Decimal("5000")
    assert before.ac == Decimal("0")
    assert before.ev == Decimal("0")
    assert before.cpi == Decimal("1")
    assert before.spi == Decimal("1")
    assert before.percent_complete == Decimal("0")

    _log(db_session, activity.id, "50", "2000")

    after = tracking.project_progress(project.id)
    assert after.ev == Decimal("2500")
    assert after.ac == Decimal("2000")
    assert after.cpi == Decimal("1.25")
    assert after.percent_complete == Decimal("50")
    assert after.spi == Decimal("1")
    assert after.spi_is_approximate is True


def test_spi_against_half_of_bac(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id, "Fundação")
    activity = make_activity(stage.id, "Escavação", planned_quantity="100", planned_unit_cost="50")

    _log(db_session, activity.id, "20", "900")

    progress = _tracking(db_session).project_progress(project.id)

    assert progress.ev == Decimal("1000")
    assert progress.spi == Decimal("0.4")
    assert progress.percent_complete == Decimal("20")


def test_spi_is_zero_once_only_empty_logs_exist(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id)
    activity = make_activity(stage.id, planned_quantity="100", planned_unit_cost="50")

    _log(db_session, activity.id, "0", "300")

    progress = _tracking(db_session).project_progress(project.id)

    assert progress.ev == Decimal("0")
    assert progress.spi == Decimal("0")
    assert progress.cpi == Decimal("0")


def test_defaults_without_activities(db_session, make_project, make_stage):
    project = make_project()
    make_stage(project.id)

    progress = _tracking(db_session).project_progress(project.id)

    assert progress.bac == Decimal("0")
    assert progress.cpi == Decimal("1")
    assert progress.spi == Decimal("1")
    assert progress.percent_complete == Decimal("0")


def test_ev_stays_within_bac(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id)
    full = make_activity(stage.id, "Concreto magro", planned_quantity="8", planned_unit_cost="410")
    partial = make_activity(stage.id, "Formas", planned_quantity="30", planned_unit_cost="95")
    make_activity(stage.id, "Armação", planned_quantity="500", planned_unit_cost="12")

    _log(db_session, full.id, "5", "2100")
    _log(db_session, full.id, "3", "1200", date=dt.date(2024, 5, 11))
    _log(db_session, partial.id, "12.5", "1300")

    progress = _tracking(db_session).project_progress(project.id)

    assert Decimal("0") <= progress.ev <= progress.bac
    assert progress.ev == Decimal("3280") + Decimal("1187.5")
    assert progress.ac == Decimal("4600")


def test_zero_planned_quantity_is_skipped_from_ev(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id)
    normal = make_activity(stage.id, "Reboco", planned_quantity="20", planned_unit_cost="10")
    degenerate = make_activity(stage.id, "Limpeza", planned_quantity="0", planned_unit_cost="10")

    _log(db_session, normal.id, "10", "90")
    _log(db_session, degenerate.id, "0", "15")

    progress = _tracking(db_session).project_progress(project.id)

    assert progress.ev == Decimal("100")
    assert progress.ac == Decimal("105")
    assert progress.skipped_activity_ids == [degenerate.id]


def test_daily_logs_listed_newest_first(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id, "Alvenaria")
    activity = make_activity(stage.id, "Bloco cerâmico", planned_quantity="300", planned_unit_cost="45")
    _log(db_session, activity.id, "10", "400", date=dt.date(2024, 6, 1))
    _log(db_session, activity.id, "20", "800", date=dt.date(2024, 6, 3))

    rows = _tracking(db_session).project_daily_logs(project.id)

    assert [row.log.date for row in rows] == [dt.date(2024, 6, 3), dt.date(2024, 6, 1)]
    assert rows[0].activity_description == "Bloco cerâmico"
    assert rows[0].stage_name == "Alvenaria"


def test_activity_executed_total(db_session, make_project, make_stage, make_activity):
    project = make_project()
    stage = make_stage(project.id)
    activity = make_activity(stage.id, planned_quantity="10")
    tracking = _tracking(db_session)

    assert tracking.activity_executed_total(activity.id) == Decimal("0")
    _log(db_session, activity.id, "4", "10")
    _log(db_session, activity.id, "2.5", "10")
    assert tracking.activity_executed_total(activity.id) == Decimal("6.5")

    with pytest.raises(NotFoundError):
        tracking.activity_executed_total(12345)


def test_unknown_project_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        _tracking(db_session).project_progress(404)
