import json

import pytest
from fastapi.testclient import TestClient

from produce_api.config import Settings
from produce_api.main import create_app

DATASET = [
    {"id": 1, "name": "Strawberries", "type": "fruit", "quantity": 2, "unit": "kg"},
    {"id": 2, "name": "Berries", "type": "fruit", "quantity": 10000, "unit": "g"},
    {"id": 3, "name": "Carrot", "type": "vegetable", "quantity": 10922, "unit": "g"},
]


@pytest.fixture
def dataset(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(json.dumps(DATASET), encoding="utf-8")
    return path


@pytest.fixture
def client(dataset):
    return TestClient(create_app(Settings(bootstrap_file=str(dataset))))


def test_bootstrap_from_env(tmp_path, monkeypatch):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps([{"id": 1, "name": "Strawberries", "type": "fruit", "quantity": 10, "unit": "kg"}]))
    monkeypatch.setenv("BOOTSTRAP_FILE", str(path))

    client = TestClient(create_app())
    resp = client.get("/api/fruit")
    assert resp.status_code == 200
    assert resp.json() == [{"id": 1, "name": "Strawberries", "type": "fruit", "quantity": 10000, "unit": "g"}]


def test_dataset_is_listed_in_grams(client):
    fruits = client.get("/api/fruit").json()
    vegetables = client.get("/api/Vegetable").json()
    assert [(r["id"], r["quantity"], r["unit"]) for r in fruits] == [(1, 2000, "g"), (2, 10000, "g")]
    assert vegetables == [{"id": 3, "name": "Carrot", "type": "vegetable", "quantity": 10922, "unit": "g"}]


def test_list_with_filters_and_unit(client):
    resp = client.get("/api/fruit", params={"unit": "kg", "q": "ber", "min": 9000})
    assert resp.status_code == 200
    assert resp.json() == [{"id": 2, "name": "Berries", "type": "fruit", "quantity": 10, "unit": "kg"}]

    resp = client.get("/api/fruit", params={"unit": "kg", "q": "ber", "min": 11000})
    assert resp.status_code == 200
    assert resp.json() == []


def test_kg_output_keeps_fractions(client):
    rows = client.get("/api/vegetable", params={"unit": "KG"}).json()
    assert rows[0]["quantity"] == 10.922


@pytest.mark.parametrize(
    "params,message",
    [
        ({"min": "abc"}, "Parameter 'min' must be a positive integer (grams)"),
        ({"max": "-5"}, "Parameter 'max' must be a positive integer (grams)"),
        ({"unit": "lb"}, "Parameter 'unit' must be 'g' or 'kg'"),
        ({"min": "10", "max": "5"}, "Parameter 'min' cannot be greater than 'max'"),
    ],
)
def test_invalid_query_parameters(client, params, message):
    resp = client.get("/api/fruit", params=params)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}


def test_unknown_collection(client):
    assert client.get("/api/meat").status_code == 404
    resp = client.post("/api/meat", json={})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Unknown collection"}


def test_add_vegetable_and_retrieve(client):
    payload = {"id": 2101, "name": "Spinach", "type": "vegetable", "quantity": 5, "unit": "kg"}
    resp = client.post("/api/vegetable", json=payload)
    assert resp.status_code == 201
    assert resp.json() == {"status": "ok"}

    rows = client.get("/api/vegetable", params={"q": "spin"}).json()
    assert rows == [{"id": 2101, "name": "Spinach", "type": "vegetable", "quantity": 5000, "unit": "g"}]


def test_readd_replaces_and_keeps_position(client):
    client.get("/api/fruit")
    resp = client.post("/api/fruit", json={"id": 1, "name": "Wild strawberries", "type": "fruit", "quantity": 50, "unit": "g"})
    assert resp.status_code == 201
    rows = client.get("/api/fruit").json()
    assert [r["id"] for r in rows] == [1, 2]
    assert rows[0]["name"] == "Wild strawberries"


def test_post_missing_key(client):
    resp = client.post("/api/fruit", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing key 'id'"}


@pytest.mark.parametrize("body", ["{broken", "[]", '"text"'])
def test_post_invalid_json(client, body):
    resp = client.post("/api/fruit", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}


def test_post_invalid_unit(client):
    payload = {"id": 77701, "name": "TestFruit", "type": "fruit", "quantity": 10, "unit": "lb"}
    resp = client.post("/api/fruit", json=payload)
    assert resp.status_code == 400
    assert "Invalid unit" in resp.json()["error"]
    assert [r["id"] for r in client.get("/api/fruit").json()] == [1, 2]


def test_bootstrap_runs_once(client, dataset):
    assert len(client.get("/api/fruit").json()) == 2
    dataset.write_text(json.dumps([]), encoding="utf-8")
    client.post("/api/fruit", json={"id": 9, "name": "Kiwi", "type": "fruit", "quantity": 1, "unit": "g"})
    assert [r["id"] for r in client.get("/api/fruit").json()] == [1, 2, 9]


def test_missing_bootstrap_file_is_retried(tmp_path):
    path = tmp_path / "late.json"
    app = create_app(Settings(bootstrap_file=str(path)))
    client = TestClient(app)

    resp = client.get("/api/fruit")
    assert resp.status_code == 400
    assert "Bootstrap file not found" in resp.json()["error"]
    assert client.get("/readyz").json()["dataset"] == "failed"

    path.write_text(json.dumps(DATASET), encoding="utf-8")
    assert len(client.get("/api/fruit").json()) == 2
    assert client.get("/readyz").json()["dataset"] == "loaded"


def test_health_does_not_trigger_bootstrap(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/readyz").json() == {"status": "ready", "dataset": "not_loaded"}


def test_malformed_bootstrap_file_is_bad_request(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    client = TestClient(create_app(Settings(bootstrap_file=str(path))))

    resp = client.get("/api/fruit")
    assert resp.status_code == 400
    assert "Invalid JSON" in resp.json()["error"]


def test_post_is_routed_by_body_type(client):
    payload = {"id": 50, "name": "Leek", "type": "vegetable", "quantity": 400, "unit": "g"}
    resp = client.post("/api/fruit", json=payload)
    assert resp.status_code == 201

    assert 50 not in [r["id"] for r in client.get("/api/fruit").json()]
    leeks = [r for r in client.get("/api/vegetable").json() if r["id"] == 50]
    assert leeks == [{"id": 50, "name": "Leek", "type": "vegetable", "quantity": 400, "unit": "g"}]
