from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

PARABOLA = {
    "title": "Parabola",
    "formula": "y=x^2",
    "type": "2D",
    "tags": ["quadratic"],
    "lineColor": "#2196F3",
}


def test_parabola_lifecycle(client: TestClient) -> None:
    created = client.post("/api/graphs", json=PARABOLA)
    assert created.status_code == 201
    body = created.json()
    assert body["id"]
    assert body["createdAt"]
    assert body["title"] == "Parabola"
    assert body["author"] == ""

    listed = client.get("/api/graphs")
    assert listed.status_code == 200
    assert listed.json() == [body]

    tags = client.get("/api/tags")
    assert tags.status_code == 200
    assert tags.json() == ["quadratic"]

    deleted = client.delete(f"/api/graphs/{body['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == body

    assert client.get("/api/graphs").json() == []
    assert client.get(f"/api/graphs/{body['id']}").status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"formula": "y=x^2", "type": "2D"},
        {"title": "Parabola", "type": "2D"},
        {"title": "Parabola", "formula": "y=x^2"},
        {"title": "   ", "formula": "y=x^2", "type": "2D"},
        {"title": "Parabola", "formula": "", "type": "2D"},
        {"title": "Parabola", "formula": "y=x^2", "type": "INVALID"},
        {},
    ],
)
def test_create_rejects_invalid_payloads_without_mutation(client: TestClient, payload: dict) -> None:
    client.post("/api/graphs", json=PARABOLA)

    response = client.post("/api/graphs", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["message"]
    assert len(client.get("/api/graphs").json()) == 1


def test_malformed_json_body_returns_400(client: TestClient) -> None:
    response = client.post(
        "/api/graphs",
        content='{"invalid": json}',
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert response.json()["message"] == "Request body is not valid JSON."
    assert client.get("/api/graphs").json() == []


def test_create_trims_title_and_keeps_extra_fields(client: TestClient) -> None:
    response = client.post(
        "/api/graphs",
        json={**PARABOLA, "id": "fixed-id", "title": "  Parabola  ", "description": "vertex at origin"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == "fixed-id"
    assert body["title"] == "Parabola"
    assert body["description"] == "vertex at origin"
    assert client.get("/api/graphs/fixed-id").json() == body


def test_get_unknown_graph_returns_404(client: TestClient) -> None:
    response = client.get("/api/graphs/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "GRAPH_NOT_FOUND"
    assert "missing" in response.json()["message"]


def test_update_preserves_unspecified_fields(client: TestClient) -> None:
    created = client.post("/api/graphs", json={**PARABOLA, "author": "Ada"}).json()

    response = client.put(f"/api/graphs/{created['id']}", json={"title": "Wide parabola"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Wide parabola"
    for field in ("id", "formula", "type", "tags", "author", "lineColor", "createdAt"):
        assert updated[field] == created[field]
    assert client.get(f"/api/graphs/{created['id']}").json() == updated


def test_update_replaces_tags_and_keeps_id(client: TestClient) -> None:
    created = client.post("/api/graphs", json=PARABOLA).json()

    response = client.put(
        f"/api/graphs/{created['id']}",
        json={"id": "hijacked", "tags": ["conic", "basic"], "lineColor": "#FF5722"},
    )

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert client.get("/api/tags").json() == ["basic", "conic"]
    assert client.get("/api/graphs/hijacked").status_code == 404


def test_update_unknown_graph_returns_404(client: TestClient) -> None:
    response = client.put("/api/graphs/missing", json={"title": "x"})

    assert response.status_code == 404
    assert response.json()["error"] == "GRAPH_NOT_FOUND"


def test_delete_unknown_graph_is_idempotent(client: TestClient) -> None:
    created = client.post("/api/graphs", json=PARABOLA).json()
    assert client.delete(f"/api/graphs/{created['id']}").status_code == 200

    again = client.delete(f"/api/graphs/{created['id']}")

    assert again.status_code == 200
    assert again.json() == {
        "id": created["id"],
        "deleted": False,
        "message": "Graph already deleted or never existed.",
    }


def test_list_is_stable_without_mutation(client: TestClient) -> None:
    client.post("/api/graphs", json=PARABOLA)
    client.post("/api/graphs", json={**PARABOLA, "title": "Surface", "type": "3D", "formula": "z=x*y"})

    first = client.get("/api/graphs").json()
    second = client.get("/api/graphs").json()

    assert first == second
    assert [item["title"] for item in first] == ["Parabola", "Surface"]


def test_tags_are_deduplicated_and_sorted(client: TestClient) -> None:
    client.post("/api/graphs", json={**PARABOLA, "tags": ["wave", "basic"]})
    client.post("/api/graphs", json={**PARABOLA, "tags": ["basic", "3d"]})
    client.post("/api/graphs", json={**PARABOLA, "tags": []})

    assert client.get("/api/tags").json() == ["3d", "basic", "wave"]


def test_corrupt_store_returns_500_and_is_not_rewritten(client: TestClient, store) -> None:
    store.storage_path.parent.mkdir(parents=True)
    store.storage_path.write_text("[{broken", encoding="utf-8")

    for method, path in (("get", "/api/graphs"), ("get", "/api/tags"), ("delete", "/api/graphs/1")):
        response = client.request(method.upper(), path)
        assert response.status_code == 500
        assert response.json()["error"] == "STORAGE_ERROR"

    created = client.post("/api/graphs", json=PARABOLA)
    assert created.status_code == 500
    assert store.storage_path.read_text(encoding="utf-8") == "[{broken"


def test_update_with_wrongly_shaped_fields_returns_400_without_mutation(client: TestClient) -> None:
    created = client.post("/api/graphs", json=PARABOLA).json()

    response = client.put(f"/api/graphs/{created['id']}", json={"tags": "quadratic"})

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert client.get(f"/api/graphs/{created['id']}").json() == created
