import uuid

from tests.craftops_helpers import create_raw_material, create_user, user_holdings

INVENTORY_URL = "/api/user-inventory"


def test_list_requires_user_id(client):
    response = client.get(INVENTORY_URL)

    assert response.status_code == 400
    assert response.json()["error"] == "userId is required"


def test_add_then_subtract(client):
    user = create_user(client)
    beads = create_raw_material(client, name="Beads", quantity=0, unit="pcs")

    added = client.post(
        INVENTORY_URL,
        json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 50, "action": "ADD"},
    )
    assert added.status_code == 200
    assert added.json()["quantity"] == 50
    assert added.json()["unit"] == "pcs"
    assert added.json()["rawMaterial"]["name"] == "Beads"

    subtracted = client.post(
        INVENTORY_URL,
        json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 20, "action": "SUBTRACT"},
    )
    assert subtracted.status_code == 200
    assert user_holdings(client, user["id"]) == {beads["id"]: 30}


def test_subtract_from_missing_row_is_rejected(client):
    user = create_user(client)
    beads = create_raw_material(client, name="Beads")

    response = client.post(
        INVENTORY_URL,
        json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 1, "action": "SUBTRACT"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot subtract from non-existent inventory item"


def test_subtract_below_zero_is_rejected(client):
    user = create_user(client)
    beads = create_raw_material(client, name="Beads")
    client.post(INVENTORY_URL, json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 5})

    response = client.post(
        INVENTORY_URL,
        json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 6, "action": "SUBTRACT"},
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"available": 5, "requested": 6}
    assert user_holdings(client, user["id"]) == {beads["id"]: 5}


def test_add_for_unknown_user_is_not_found(client):
    beads = create_raw_material(client, name="Beads")

    response = client.post(
        INVENTORY_URL,
        json={"userId": str(uuid.uuid4()), "rawMaterialId": beads["id"], "quantity": 1},
    )

    assert response.status_code == 404


def test_non_positive_quantity_fails_validation(client):
    user = create_user(client)

    response = client.post(INVENTORY_URL, json={"userId": user["id"], "rawMaterialId": 1, "quantity": 0})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_subtract_to_zero_removes_the_row(client):
    user = create_user(client)
    beads = create_raw_material(client, name="Beads")
    client.post(INVENTORY_URL, json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 5})

    response = client.post(
        INVENTORY_URL,
        json={"userId": user["id"], "rawMaterialId": beads["id"], "quantity": 5, "action": "SUBTRACT"},
    )

    assert response.status_code == 200
    assert response.json()["quantity"] == 0
    assert user_holdings(client, user["id"]) == {}
