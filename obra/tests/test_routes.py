import io

import pandas as pd


def _create_project(client):
    response = client.post("/api/projects", json={
        "name": "Residencial Jacarandá",
        "client": "Construtora Horizonte",
        "type": "Residencial",
        "address": "Rua A, 10",
        "built_area": 800,
        "start_date": "2024-02-01",
        "end_date": "2024-12-20",
        "contract_value": 1500000,
    })
    assert response.status_code == 201
    return response.get_json()["data"]["id"]


def test_login_required(client):
    response = client.get("/api/projects")

    assert response.status_code == 401
    assert response.get_json()["error_type"] == "PERMISSION_DENIED"


def test_wrong_credentials(client):
    response = client.post("/api/login", json={"username": "admin", "password": "x"})

    assert response.status_code == 401


def test_logout_clears_session(auth_client):
    auth_client.post("/api/logout")

    assert auth_client.get("/api/projects").status_code == 401


def test_project_flow(auth_client):
    project_id = _create_project(auth_client)

    stage = auth_client.post("/api/stages", json={"project_id": project_id, "name": "Fundação"})
    assert stage.status_code == 201
    stage_id = stage.get_json()["data"]["id"]

    activity = auth_client.post("/api/activities", json={
        "stage_id": stage_id,
        "description": "Escavação",
        "unit": "m3",
        "planned_quantity": 100,
        "planned_unit_cost": 50,
        "planned_duration": 4,
    })
    assert activity.status_code == 201
    activity_id = activity.get_json()["data"]["id"]

    log = auth_client.post("/api/logs", json={
        "activity_id": activity_id,
        "date": "2024-03-01",
        "executed_quantity": 50,
        "real_cost": 2000,
    })
    assert log.status_code == 201

    over = auth_client.post("/api/logs", json={
        "activity_id": activity_id,
        "date": "2024-03-02",
        "executed_quantity": 51,
        "real_cost": 10,
    })
    assert over.status_code == 422
    assert over.get_json()["error_type"] == "VALIDATION_ERROR"

    dashboard = auth_client.get(f"/api/projects/{project_id}/dashboard").get_json()["data"]
    assert dashboard["progress"]["ev"] == 2500.0
    assert dashboard["progress"]["cpi"] == 1.25
    assert dashboard["cost_by_stage"][0]["total_cost"] == 5000.0

    detail = auth_client.get(f"/api/projects/{project_id}").get_json()["data"]
    assert detail["stats"]["percent_complete"] == 50.0

    logs = auth_client.get(f"/api/projects/{project_id}/logs").get_json()["data"]
    assert logs[0]["activity_name"] == "Escavação"

    activities = auth_client.get(f"/api/projects/{project_id}/activities").get_json()["data"]
    assert activities[0]["executed_quantity"] == 50.0
    assert activities[0]["stage_name"] == "Fundação"


def test_status_codes(auth_client):
    assert auth_client.get("/api/projects/9999").status_code == 404

    bad = auth_client.post("/api/projects", json={"name": "Sem dados"})
    assert bad.status_code == 400
    assert bad.get_json()["error_type"] == "INPUT_ERROR"

    project_id = _create_project(auth_client)
    unknown = auth_client.put(f"/api/projects/{project_id}", json={"owner": "x"})
    assert unknown.status_code == 400

    renamed = auth_client.put(f"/api/projects/{project_id}", json={"name": "Novo nome"})
    assert renamed.status_code == 200
    assert renamed.get_json()["data"]["name"] == "Novo nome"


def test_warehouse_flow(auth_client):
    project_id = _create_project(auth_client)

    material = auth_client.post(f"/api/projects/{project_id}/materials", json={
        "description": "Cimento CP-II",
        "unit": "saco",
        "quantity": 100,
        "unit_cost": 32,
    })
    assert material.status_code == 201
    material_id = material.get_json()["data"]["id"]

    purchase = auth_client.post(f"/api/projects/{project_id}/purchases", json={
        "material_id": material_id,
        "date": "2024-03-01",
        "quantity": 40,
        "unit_price": 31,
        "supplier": "Depósito Central",
    })
    assert purchase.status_code == 201

    exit_ = auth_client.post(f"/api/projects/{project_id}/exits", json={
        "material_id": material_id,
        "date": "2024-03-02",
        "collaborator": "Maria",
        "quantity": 25,
    })
    assert exit_.status_code == 201

    overdraft = auth_client.post(f"/api/projects/{project_id}/waste", json={
        "material_id": material_id,
        "date": "2024-03-03",
        "quantity": 20,
    })
    assert overdraft.status_code == 422
    assert overdraft.get_json()["error_detail"]["current_stock"] == 15.0

    materials = auth_client.get(f"/api/projects/{project_id}/materials").get_json()["data"]["materials"]
    assert materials[0]["current_stock"] == 15.0

    exits = auth_client.get(f"/api/projects/{project_id}/exits").get_json()["data"]
    assert exits[0]["material_name"] == "Cimento CP-II"


def test_excel_download(auth_client):
    seeded = auth_client.post("/api/seed").get_json()["data"]
    project_id = seeded["project_id"]

    response = auth_client.get(f"/api/projects/{project_id}/report/excel")

    assert response.status_code == 200
    assert response.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    sheets = pd.read_excel(io.BytesIO(response.data), sheet_name=None, engine="openpyxl")
    assert list(sheets) == ["Resumo", "Detalhes"]
    assert len(sheets["Detalhes"]) == 18

    again = auth_client.post("/api/seed").get_json()["data"]
    assert again["message"] == "Already seeded"
