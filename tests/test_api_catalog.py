from fastapi.testclient import TestClient

from inspection_api.services.storage import MemoryBlobStorage


def test_list_checkpoints_uses_camel_case(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/checkpoints", headers=auth_headers)
    assert res.status_code == 200
    body = res.json()
    assert len(body) == 11
    assert body[10]["productCategories"] == ["Tables"]
    assert body[10]["clients"] == ["The Design Collective"]
    assert body[0]["samplePurposes"] == []


def test_applicable_checkpoints(client: TestClient, auth_headers) -> None:
    res = client.get(
        "/api/v1/checkpoints/applicable",
        params={"client": "Scandi Living", "productCategory": "Tables", "samplePurpose": "Sample for testing"},
        headers=auth_headers,
    )
    ids = [c["id"] for c in res.json()]
    assert ids == ["chk-1", "chk-2", "chk-3", "chk-4", "chk-5", "chk-8", "chk-10"]


def test_checkpoint_crud(client: TestClient, auth_headers, storage: MemoryBlobStorage) -> None:
    created = client.post(
        "/api/v1/checkpoints",
        json={
            "category": "Functional",
            "title": "Hinge Check",
            "description": "Doors open and close smoothly.",
            "productCategories": ["Storage"],
        },
        headers=auth_headers,
    )
    assert created.status_code == 201
    checkpoint = created.json()
    assert checkpoint["id"] == "chk-12"
    assert "catalog-store" in storage.blobs

    updated = client.put(
        f"/api/v1/checkpoints/{checkpoint['id']}",
        json={"category": "Functional", "title": "Hinges", "description": "Doors close fully."},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["productCategories"] == []
    assert client.get(f"/api/v1/checkpoints/{checkpoint['id']}", headers=auth_headers).json()["title"] == "Hinges"

    assert client.delete(f"/api/v1/checkpoints/{checkpoint['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/v1/checkpoints/{checkpoint['id']}", headers=auth_headers).status_code == 404


def test_create_checkpoint_requires_fields(client: TestClient, auth_headers) -> None:
    res = client.post(
        "/api/v1/checkpoints",
        json={"category": "", "title": "No category", "description": "x"},
        headers=auth_headers,
    )
    assert res.status_code == 422
    body = res.json()
    assert body["error"]["type"] == "validation_error"
    assert body["error"]["details"][0]["loc"][-1] == "category"


def test_update_unknown_checkpoint_is_404(client: TestClient, auth_headers) -> None:
    res = client.put(
        "/api/v1/checkpoints/chk-404",
        json={"category": "a", "title": "b", "description": "c"},
        headers=auth_headers,
    )
    assert res.status_code == 404
    assert res.json()["error"]["type"] == "not_found"


def test_products(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/catalog/products", headers=auth_headers)
    assert [p["type"] for p in res.json()] == ["Armchair", "Dining Table", "Sofa", "Coffee Table", "Bookshelf"]


def test_value_lists(client: TestClient, auth_headers) -> None:
    assert client.get("/api/v1/catalog/product-categories", headers=auth_headers).json() == [
        "Seating",
        "Tables",
        "Storage",
    ]

    added = client.post("/api/v1/catalog/clients", json={"name": "Nordhaus"}, headers=auth_headers)
    assert added.status_code == 201
    assert added.json()[-1] == "Nordhaus"
    again = client.post("/api/v1/catalog/clients", json={"name": "Nordhaus"}, headers=auth_headers)
    assert again.json().count("Nordhaus") == 1

    remaining = client.delete("/api/v1/catalog/sample-purposes/Sample for testing", headers=auth_headers)
    assert remaining.json() == ["Sample for client review", "Sample for mass production"]


def test_blank_value_is_rejected(client: TestClient, auth_headers) -> None:
    res = client.post("/api/v1/catalog/clients", json={"name": "   "}, headers=auth_headers)
    assert res.status_code == 422
    assert res.json()["error"]["details"] == {"field": "name"}


def test_unknown_list_is_rejected(client: TestClient, auth_headers) -> None:
    assert client.get("/api/v1/catalog/colours", headers=auth_headers).status_code == 422
