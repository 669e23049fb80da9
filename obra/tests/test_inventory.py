import datetime as dt
import threading
from decimal import Decimal

import pytest

from obra.models.purchase import Purchase
from obra.models.warehouse_exit import WarehouseExit
from obra.operations.material_ops import get_project_materials
from obra.schemas.inputs import WarehouseExitInput, WarehouseWasteInput
from obra.services.errors import InsufficientStockError, NotFoundError, UnknownFieldError
from obra.services.material_service import MaterialService
from obra.services.warehouse_service import WarehouseService


def _warehouse(db):
    return WarehouseService(db, MaterialService(db))


def _exit(project_id, material_id, quantity, **extra):
    return WarehouseExitInput(
        project_id=project_id,
        material_id=material_id,
        date=dt.date(2024, 4, 5),
        collaborator="João Pedreiro",
        quantity=Decimal(quantity),
        **extra,
    )


def _waste(project_id, material_id, quantity):
    return WarehouseWasteInput(
        project_id=project_id,
        material_id=material_id,
        date=dt.date(2024, 4, 6),
        quantity=Decimal(quantity),
        reason="Sacos rasgados",
    )


def test_stock_is_purchased_minus_exited_minus_wasted(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "60")
    make_purchase(project.id, material.id, "40")

    warehouse = _warehouse(db_session)
    warehouse.create_exit(_exit(project.id, material.id, "25"))
    warehouse.create_exit(_exit(project.id, material.id, "15"))
    warehouse.create_waste(_waste(project.id, material.id, "10"))
    db_session.commit()

    item = MaterialService(db_session).material_stock(material.id)

    assert item.purchased_quantity == Decimal("100")
    assert item.exited_quantity == Decimal("40")
    assert item.waste_quantity == Decimal("10")
    assert item.current_stock == Decimal("50")


def test_material_without_movements_reads_zero(db_session, make_project, make_material):
    project = make_project()
    make_material(project.id, "Areia média")
    make_material(project.id, "Brita 1")

    items = MaterialService(db_session).project_materials(project.id)

    assert [i.material.description for i in items] == ["Areia média", "Brita 1"]
    for item in items:
        assert item.purchased_quantity == item.exited_quantity == item.waste_quantity == Decimal("0")
        assert item.current_stock == Decimal("0")


def test_material_lists_stage_and_activity_names(db_session, make_project, make_stage, make_activity, make_material):
    project = make_project()
    stage = make_stage(project.id, "Estrutura")
    activity = make_activity(stage.id, "Concretagem de lajes")
    make_material(project.id, "Aço CA-50", stage_id=stage.id, activity_id=activity.id)

    item = MaterialService(db_session).project_materials(project.id)[0]

    assert item.stage_name == "Estrutura"
    assert item.activity_name == "Concretagem de lajes"


def test_exit_beyond_stock_is_rejected(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "30")

    with pytest.raises(InsufficientStockError) as exc_info:
        _warehouse(db_session).create_exit(_exit(project.id, material.id, "31"))
    db_session.rollback()

    assert exc_info.value.shortfall == Decimal("1")
    assert exc_info.value.movement == "exit"
    assert db_session.query(WarehouseExit).count() == 0


def test_waste_beyond_stock_is_rejected(db_session, make_project, make_material):
    project = make_project()
    material = make_material(project.id)

    with pytest.raises(InsufficientStockError) as exc_info:
        _warehouse(db_session).create_waste(_waste(project.id, material.id, "1"))

    assert exc_info.value.movement == "waste"


def test_deleting_a_purchase_can_leave_negative_stock(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    purchase = make_purchase(project.id, material.id, "20")
    warehouse = _warehouse(db_session)
    warehouse.create_exit(_exit(project.id, material.id, "15"))
    db_session.commit()

    warehouse.delete_purchase(purchase.id)
    db_session.commit()

    assert MaterialService(db_session).current_stock(material.id) == Decimal("-15")


def test_purchase_ids_are_not_reused_after_delete(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    purchase_id = make_purchase(project.id, material.id, "20").id
    warehouse = _warehouse(db_session)

    warehouse.delete_purchase(purchase_id)
    db_session.commit()
    replacement = make_purchase(project.id, material.id, "5")

    assert replacement.id != purchase_id
    with pytest.raises(NotFoundError):
        warehouse.delete_purchase(purchase_id)
    assert MaterialService(db_session).current_stock(material.id) == Decimal("5")


def test_material_of_other_project_is_not_found(db_session, make_project, make_material, make_purchase):
    project = make_project()
    other = make_project(name="Galpão Logístico")
    material = make_material(project.id)
    make_purchase(project.id, material.id, "5")

    with pytest.raises(NotFoundError):
        _warehouse(db_session).create_exit(_exit(other.id, material.id, "1"))


def test_listings_are_newest_first(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "10", date=dt.date(2024, 4, 1))
    make_purchase(project.id, material.id, "10", date=dt.date(2024, 4, 20))

    rows = _warehouse(db_session).project_purchases(project.id)

    assert [r.purchase.date for r in rows] == [dt.date(2024, 4, 20), dt.date(2024, 4, 1)]
    assert rows[0].material_name == "Cimento CP-II"


def test_deleting_material_removes_its_movements(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "10")
    _warehouse(db_session).create_exit(_exit(project.id, material.id, "4"))
    db_session.commit()

    MaterialService(db_session).delete_material(material.id)
    db_session.commit()

    assert db_session.query(Purchase).count() == 0
    assert db_session.query(WarehouseExit).count() == 0


def test_update_material_rejects_unknown_fields(db_session, make_project, make_material):
    project = make_project()
    material = make_material(project.id)
    service = MaterialService(db_session)

    updated = service.update_material(material.id, {"unit_cost": "35", "category": None})
    assert updated.unit_cost == Decimal("35")
    assert updated.category is None

    with pytest.raises(UnknownFieldError):
        service.update_material(material.id, {"project_id": 2})


def test_get_project_materials_operation(db_session, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "12.5")

    result = get_project_materials(db_session, project.id)

    assert result.ok
    [item] = result.data["materials"]
    assert item["current_stock"] == 12.5
    assert item["description"] == "Cimento CP-II"


def test_concurrent_exits_cannot_overdraw(database, make_project, make_material, make_purchase):
    project = make_project()
    material = make_material(project.id)
    make_purchase(project.id, material.id, "10")
    project_id, material_id = project.id, material.id

    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def worker():
        session = database.session()
        try:
            barrier.wait()
            try:
                _warehouse(session).create_exit(_exit(project_id, material_id, "6"))
                session.commit()
                outcome = "ok"
            except InsufficientStockError:
                session.rollback()
                outcome = "rejected"
            with lock:
                outcomes.append(outcome)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["ok", "rejected"]

    check = database.session()
    try:
        assert MaterialService(check).current_stock(material_id) == Decimal("4")
    finally:
        check.close()
