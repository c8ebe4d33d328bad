"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from nutrition_catalog.api.app import create_app
from nutrition_catalog.containers import AppContainer
from nutrition_catalog.services.documents import APPROVED_COLLECTION
from tests.conftest import InMemoryDocumentStore, approved_row

USER_HEADERS = {"Authorization": "Bearer user-token"}
MODERATOR_HEADERS = {"Authorization": "Bearer moderator-token"}
DEVICE_HEADERS = {"X-Device-Id": "device-a"}

BANANA = {
    "name": "Banana",
    "category": "fruits",
    "calories": 89,
    "protein": 1.1,
    "carbs": 22.8,
    "fat": 0.3,
}


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_catalog_lists_and_filters(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    document_store.insert_raw(
        APPROVED_COLLECTION, approved_row("Buuz", id="buuz", category="meat")
    )
    client = TestClient(create_app(container))

    everything = client.get("/catalog").json()
    meat = client.get("/catalog", params={"category": "meat", "q": "BUU"}).json()

    assert everything["version"] == 1
    assert "buuz" in {item["id"] for item in everything["items"]}
    assert [item["id"] for item in meat["items"]] == ["buuz"]
    assert meat["items"][0]["category"] == "meat"


def test_item_lookup_and_scaling(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    item = client.get("/catalog/items/apple")
    scaled = client.get("/catalog/items/apple/scaled", params={"grams": 200})

    assert item.status_code == 200
    assert scaled.status_code == 200
    assert scaled.json()["calories"] == item.json()["calories"] * 2
    assert client.get("/catalog/items/missing").status_code == 404
    assert (
        client.get("/catalog/items/apple/scaled", params={"grams": 0}).status_code
        == 422
    )
    assert client.get("/catalog/barcode/000").status_code == 404


def test_submit_and_list_mine(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/catalog/items", json=BANANA, headers=USER_HEADERS)
    mine = client.get("/catalog/submissions/mine", headers=USER_HEADERS)

    assert response.status_code == 201
    body = response.json()
    assert body["outcome"] == "submitted"
    assert body["item"]["creator_user_id"] == "user-1"
    assert [entry["id"] for entry in mine.json()["submissions"]] == [body["item"]["id"]]
    assert mine.json()["submissions"][0]["status"] == "pending"


def test_anonymous_submit_is_saved_per_device(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/catalog/items", json=BANANA, headers=DEVICE_HEADERS)
    item_id = response.json()["item"]["id"]

    assert response.status_code == 201
    assert response.json()["outcome"] == "saved_locally"
    url = f"/catalog/items/{item_id}"
    assert client.get(url, headers=DEVICE_HEADERS).status_code == 200
    assert client.get(url, headers={"X-Device-Id": "device-b"}).status_code == 404
    assert client.get(url, headers=USER_HEADERS).status_code == 404
    assert client.get(url).status_code == 404


def test_anonymous_submit_requires_device_id(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/catalog/items", json=BANANA)
    blank = client.post("/catalog/items", json=BANANA, headers={"X-Device-Id": "  "})

    assert response.status_code == 401
    assert blank.status_code == 401
    assert client.get("/catalog", params={"q": "banana"}).json()["items"] == []


def test_delete_routes_require_identity(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    saved = client.post("/catalog/items", json=BANANA, headers=DEVICE_HEADERS).json()
    asset_id = client.post("/assets", content=b"jpeg-bytes").json()["id"]

    local = client.delete(
        f"/catalog/items/{saved['item']['id']}", headers=DEVICE_HEADERS
    )
    asset = client.delete(f"/assets/{asset_id}")
    bad_token = client.delete(
        f"/assets/{asset_id}", headers={"Authorization": "Bearer nope"}
    )

    assert local.status_code == 401
    assert asset.status_code == 401
    assert bad_token.status_code == 401
    assert client.get(f"/assets/{asset_id}").status_code == 200


def test_user_deletes_locally_saved_item(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    client = TestClient(create_app(container))
    document_store.fail_writes = True

    response = client.post("/catalog/items", json=BANANA, headers=USER_HEADERS)
    item_id = response.json()["item"]["id"]
    url = f"/catalog/items/{item_id}"

    assert response.json()["outcome"] == "saved_locally"
    assert client.delete(url, headers=USER_HEADERS).status_code == 204
    assert client.delete(url, headers=USER_HEADERS).status_code == 404
    assert client.get(url, headers=USER_HEADERS).status_code == 404



def test_submit_validates_payload(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/catalog/items", json={**BANANA, "calories": -5}, headers=USER_HEADERS
    )

    assert response.status_code == 422


def test_list_mine_requires_identity(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/catalog/submissions/mine").status_code == 401
    assert (
        client.get(
            "/catalog/submissions/mine", headers={"Authorization": "Bearer nope"}
        ).status_code
        == 401
    )


def test_moderation_requires_moderator(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/moderation/pending").status_code == 401
    assert client.get("/moderation/pending", headers=USER_HEADERS).status_code == 403
    assert (
        client.get("/moderation/pending", headers=MODERATOR_HEADERS).status_code == 200
    )


def test_moderation_approve_flow(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    submitted = client.post("/catalog/items", json=BANANA, headers=USER_HEADERS).json()
    submission_id = submitted["item"]["id"]

    pending = client.get("/moderation/pending", headers=MODERATOR_HEADERS).json()
    approved = client.post(
        f"/moderation/submissions/{submission_id}/approve", headers=MODERATOR_HEADERS
    )
    rejected = client.post(
        f"/moderation/submissions/{submission_id}/reject",
        json={"reason": "duplicate"},
        headers=MODERATOR_HEADERS,
    )
    missing = client.post(
        "/moderation/submissions/missing/approve", headers=MODERATOR_HEADERS
    )

    assert [entry["id"] for entry in pending["submissions"]] == [submission_id]
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["verified_by"] == "moderator-1"
    assert rejected.status_code == 409
    assert missing.status_code == 404

    catalog = client.get("/catalog", params={"q": "banana"}).json()
    assert [item["id"] for item in catalog["items"]] == [submission_id]


def test_moderation_reject_flow(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    submitted = client.post("/catalog/items", json=BANANA, headers=USER_HEADERS).json()
    submission_id = submitted["item"]["id"]

    rejected = client.post(
        f"/moderation/submissions/{submission_id}/reject",
        json={"reason": "not a food"},
        headers=MODERATOR_HEADERS,
    )

    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "not a food"
    mine = client.get("/catalog/submissions/mine", headers=USER_HEADERS).json()
    assert mine["submissions"] == []


def test_moderation_maps_store_failures(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    client = TestClient(create_app(container))
    submitted = client.post("/catalog/items", json=BANANA, headers=USER_HEADERS).json()
    document_store.fail_updates = True

    response = client.post(
        f"/moderation/submissions/{submitted['item']['id']}/approve",
        headers=MODERATOR_HEADERS,
    )

    assert response.status_code == 502


def test_asset_endpoints(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    uploaded = client.post(
        "/assets", content=b"jpeg-bytes", headers={"Content-Type": "image/jpeg"}
    )
    asset_id = uploaded.json()["id"]
    downloaded = client.get(f"/assets/{asset_id}")
    deleted = client.delete(f"/assets/{asset_id}", headers=USER_HEADERS)

    assert uploaded.status_code == 201
    assert uploaded.json()["url"].endswith(f"{asset_id}.jpg")
    assert downloaded.status_code == 200
    assert downloaded.content == b"jpeg-bytes"
    assert deleted.status_code == 204
    assert client.get(f"/assets/{asset_id}").status_code == 404
    assert client.post("/assets", content=b"").status_code == 400


def test_lifespan_closes_resources(container: AppContainer) -> None:
    closed = []

    async def close_resources() -> None:
        closed.append(True)

    container.close_resources = close_resources

    with TestClient(create_app(container)) as client:
        assert client.get("/health").status_code == 200

    assert closed == [True]
