import uuid

from tests.craftops_helpers import (
    TRANSFERS_URL,
    create_raw_material,
    create_user,
    issue_transfer,
    material_quantity,
)


def test_issue_creates_sent_transfers_and_debits_stock(client):
    user = create_user(client)
    clay = create_raw_material(client, name="Clay", quantity=100)
    glaze = create_raw_material(client, name="Glaze", quantity=20, unit="l")

    response = client.post(
        TRANSFERS_URL,
        json={
            "userId": user["id"],
            "items": [
                {"rawMaterialId": clay["id"], "quantityIssued": 30},
                {"rawMaterialId": glaze["id"], "quantityIssued": 5},
            ],
            "notes": "Diwali batch",
        },
    )

    assert response.status_code == 201
    rows = response.json()
    assert len(rows) == 2
    for row in rows:
        assert row["status"] == "SENT"
        assert row["quantityApproved"] == 0
        assert row["quantityRejected"] == 0
        assert row["notes"] == "Diwali batch"
        assert row["user"]["email"] == user["email"]
    assert material_quantity(client, clay["id"]) == 70
    assert material_quantity(client, glaze["id"]) == 15


def test_issue_requires_user_and_items(client):
    response = client.post(TRANSFERS_URL, json={"items": []})

    assert response.status_code == 400
    assert response.json()["error"] == "User ID and at least one transfer item are required"


def test_issue_rejects_item_without_quantity(client):
    user = create_user(client)
    clay = create_raw_material(client)

    response = client.post(
        TRANSFERS_URL,
        json={"userId": user["id"], "items": [{"rawMaterialId": clay["id"], "quantityIssued": 0}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Each item must have a valid raw material ID and quantity"


def test_issue_unknown_user_is_not_found(client):
    clay = create_raw_material(client)

    response = client.post(
        TRANSFERS_URL,
        json={"userId": str(uuid.uuid4()), "items": [{"rawMaterialId": clay["id"], "quantityIssued": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_issue_unknown_material_is_not_found(client):
    user = create_user(client)

    response = client.post(
        TRANSFERS_URL,
        json={"userId": user["id"], "items": [{"rawMaterialId": 9999, "quantityIssued": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Raw material with ID 9999 not found"


def test_issue_insufficient_stock_is_all_or_nothing(client):
    user = create_user(client)
    clay = create_raw_material(client, name="Clay", quantity=10)
    glaze = create_raw_material(client, name="Glaze", quantity=10)

    response = client.post(
        TRANSFERS_URL,
        json={
            "userId": user["id"],
            "items": [
                {"rawMaterialId": glaze["id"], "quantityIssued": 5},
                {"rawMaterialId": clay["id"], "quantityIssued": 6},
                {"rawMaterialId": clay["id"], "quantityIssued": 6},
            ],
        },
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "INSUFFICIENT_STOCK"
    assert payload["error"] == "Insufficient stock for Clay. Available: 10, Requested: 12"
    assert material_quantity(client, clay["id"]) == 10
    assert material_quantity(client, glaze["id"]) == 10
    assert client.get(TRANSFERS_URL).json() == []


def test_list_filters_by_status_and_user(client):
    first = create_user(client, name="First")
    second = create_user(client, name="Second")
    clay = create_raw_material(client, quantity=100)
    used = issue_transfer(client, first["id"], clay["id"], 5)
    issue_transfer(client, first["id"], clay["id"], 5)
    issue_transfer(client, second["id"], clay["id"], 5)
    client.put(f"{TRANSFERS_URL}/{used['id']}", json={"status": "USED"})

    by_user = client.get(TRANSFERS_URL, params={"userId": first["id"]}).json()
    assert len(by_user) == 2
    assert all(row["userId"] == first["id"] for row in by_user)

    by_status = client.get(TRANSFERS_URL, params={"status": "USED"}).json()
    assert [row["id"] for row in by_status] == [used["id"]]

    assert len(client.get(TRANSFERS_URL, params={"status": "SENT"}).json()) == 2


def test_list_rejects_unknown_status_filter(client):
    response = client.get(TRANSFERS_URL, params={"status": "LOST"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS"


def test_get_transfer_detail_and_not_found(client):
    user = create_user(client)
    clay = create_raw_material(client)
    transfer = issue_transfer(client, user["id"], clay["id"], 3)

    response = client.get(f"{TRANSFERS_URL}/{transfer['id']}")
    assert response.status_code == 200
    assert response.json()["rawMaterial"]["name"] == "Clay"

    missing = client.get(f"{TRANSFERS_URL}/424242")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Transfer not found"
