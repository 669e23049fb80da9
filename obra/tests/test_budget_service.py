from decimal import Decimal

import pytest

from obra.services.budget_service import BudgetService
from obra.services.errors import NotFoundError


def test_total_planned_cost_sums_every_activity(db_session, make_project, make_stage, make_activity):
    project = make_project()
    foundation = make_stage(project.id, "Fundação")
    structure = make_stage(project.id, "Estrutura")
    make_activity(foundation.id, "Escavação", planned_quantity="100", planned_unit_cost="50")
    make_activity(foundation.id, "Sapatas", planned_quantity="12", planned_unit_cost="850.5")
    make_activity(structure.id, "Pilares", planned_quantity="40", planned_unit_cost="300")

    total = BudgetService(db_session).total_planned_cost(project.id)

    assert total == Decimal("5000") + Decimal("10206") + Decimal("12000")


def test_total_planned_cost_is_zero_without_activities(db_session, make_project, make_stage):
    project = make_project()
    make_stage(project.id)

    assert BudgetService(db_session).total_planned_cost(project.id) == Decimal("0")


def test_cost_by_stage_adds_up_to_total(db_session, make_project, make_stage, make_activity):
    project = make_project()
    for order, name in enumerate(["Fundação", "Estrutura", "Alvenaria"], start=1):
        stage = make_stage(project.id, name)
        make_activity(stage.id, f"Atividade A {name}", planned_quantity=str(10 * order), planned_unit_cost="20")
        make_activity(stage.id, f"Atividade B {name}", planned_quantity="3", planned_unit_cost="7.25")

    service = BudgetService(db_session)
    by_stage = service.cost_by_stage(project.id)

    assert sum(row.total_cost for row in by_stage) == service.total_planned_cost(project.id)
    assert [row.name for row in by_stage] == ["Fundação", "Estrutura", "Alvenaria"]
    assert by_stage[1].total_cost == Decimal("400") + Decimal("21.75")


def test_cost_by_stage_keeps_empty_stages_at_zero(db_session, make_project, make_stage, make_activity):
    project = make_project()
    first = make_stage(project.id, "Serviços Preliminares")
    empty = make_stage(project.id, "Instalações")
    make_activity(first.id, "Tapume", planned_quantity="50", planned_unit_cost="20")

    by_stage = BudgetService(db_session).cost_by_stage(project.id)

    assert [(row.stage_id, row.total_cost) for row in by_stage] == [
        (first.id, Decimal("1000")),
        (empty.id, Decimal("0")),
    ]


def test_cost_by_stage_follows_display_order(db_session, make_project, make_stage):
    project = make_project()
    make_stage(project.id, "Acabamento", display_order=6)
    make_stage(project.id, "Fundação", display_order=2)

    names = [row.name for row in BudgetService(db_session).cost_by_stage(project.id)]

    assert names == ["Fundação", "Acabamento"]


def test_unknown_project_is_not_found(db_session):
    service = BudgetService(db_session)

    with pytest.raises(NotFoundError):
        service.total_planned_cost(999)
    with pytest.raises(NotFoundError):
        service.cost_by_stage(999)
