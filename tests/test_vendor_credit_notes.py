import uuid

from tests.craftops_helpers import create_credit_note, create_vendor

NOTES_URL = "/api/vendor-credit-notes"


def test_create_computes_total_and_defaults_to_draft(client):
    vendor = create_vendor(client)

    response = create_credit_note(client, vendor["id"], "VCN-2024-2025-0001", taxAmount=90, billNumber="BILL-7")

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "DRAFT"
    assert body["amount"] == 500
    assert body["taxAmount"] == 90
    assert body["totalAmount"] == 590
    assert body["appliedToBill"] is False
    assert body["vendor"]["name"] == vendor["name"]


def test_create_requires_core_fields(client):
    vendor = create_vendor(client)

    response = client.post(NOTES_URL, json={"vendorId": vendor["id"], "amount": 100})

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Missing required fields: vendorId, reason, amount, and creditNoteNumber are required"
    )


def test_create_rejects_negative_amount(client):
    vendor = create_vendor(client)

    response = create_credit_note(client, vendor["id"], "VCN-1", amount=-5)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid amount"


def test_create_for_unknown_vendor_is_not_found(client):
    response = create_credit_note(client, 9999, "VCN-1")

    assert response.status_code == 404
    assert response.json()["error"] == "Vendor not found"


def test_duplicate_number_is_rejected_without_insert(client):
    vendor = create_vendor(client)
    assert create_credit_note(client, vendor["id"], "VCN-DUP").status_code == 201

    response = create_credit_note(client, vendor["id"], "VCN-DUP", amount=999)

    assert response.status_code == 400
    assert response.json()["error"] == "Credit note number already exists"
    assert len(client.get(NOTES_URL).json()) == 1


def test_search_matches_number_and_vendor(client):
    potter = create_vendor(client, name="Jaipur Pottery Supplies")
    weaver = create_vendor(client, name="Kutch Textiles")
    create_credit_note(client, potter["id"], "VCN-A-0001")
    create_credit_note(client, weaver["id"], "VCN-B-0001", billNumber="KT-55")

    by_vendor = client.get(NOTES_URL, params={"search": "pottery"}).json()
    assert [row["creditNoteNumber"] for row in by_vendor] == ["VCN-A-0001"]

    by_bill = client.get(NOTES_URL, params={"search": "KT-55"}).json()
    assert [row["creditNoteNumber"] for row in by_bill] == ["VCN-B-0001"]

    by_vendor_id = client.get(NOTES_URL, params={"vendorId": weaver["id"]}).json()
    assert [row["vendorId"] for row in by_vendor_id] == [weaver["id"]]


def test_status_lifecycle(client):
    vendor = create_vendor(client)
    note = create_credit_note(client, vendor["id"], "VCN-1").json()

    issued = client.put(NOTES_URL, json={"id": note["id"], "status": "ISSUED"})
    assert issued.status_code == 200
    assert issued.json()["status"] == "ISSUED"

    back_to_draft = client.put(NOTES_URL, json={"id": note["id"], "status": "DRAFT"})
    assert back_to_draft.status_code == 409
    assert back_to_draft.json()["code"] == "TRANSITION_NOT_ALLOWED"

    applied = client.put(NOTES_URL, json={"id": note["id"], "status": "APPLIED"})
    assert applied.status_code == 200

    filtered = client.get(NOTES_URL, params={"status": "APPLIED"}).json()
    assert [row["id"] for row in filtered] == [note["id"]]


def test_invalid_status_is_rejected(client):
    vendor = create_vendor(client)
    note = create_credit_note(client, vendor["id"], "VCN-1").json()

    response = client.put(NOTES_URL, json={"id": note["id"], "status": "VOID"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS"


def test_apply_to_bill_toggle(client):
    vendor = create_vendor(client)
    note = create_credit_note(client, vendor["id"], "VCN-1").json()

    applied = client.put(NOTES_URL, json={"id": note["id"], "appliedToBill": True, "appliedBillId": "BILL-9"})
    assert applied.status_code == 200
    assert applied.json()["appliedToBill"] is True
    assert applied.json()["appliedBillId"] == "BILL-9"
    assert applied.json()["appliedDate"] is not None

    cleared = client.put(NOTES_URL, json={"id": note["id"], "appliedToBill": False})
    assert cleared.json()["appliedToBill"] is False
    assert cleared.json()["appliedDate"] is None
    assert cleared.json()["appliedBillId"] is None


def test_notes_can_be_cleared(client):
    vendor = create_vendor(client)
    note = create_credit_note(client, vendor["id"], "VCN-1", notes="Call before pickup").json()

    untouched = client.put(NOTES_URL, json={"id": note["id"], "status": "ISSUED"})
    assert untouched.json()["notes"] == "Call before pickup"

    cleared = client.put(NOTES_URL, json={"id": note["id"], "notes": None})
    assert cleared.json()["notes"] is None


def test_update_unknown_note_is_not_found(client):
    response = client.put(NOTES_URL, json={"id": str(uuid.uuid4()), "status": "ISSUED"})

    assert response.status_code == 404
    assert response.json()["error"] == "Credit note not found"


def test_only_drafts_can_be_deleted(client):
    vendor = create_vendor(client)
    draft = create_credit_note(client, vendor["id"], "VCN-1").json()
    issued = create_credit_note(client, vendor["id"], "VCN-2", status="ISSUED").json()

    refused = client.delete(NOTES_URL, params={"id": issued["id"]})
    assert refused.status_code == 400
    assert refused.json()["error"] == "Only DRAFT credit notes can be deleted"

    deleted = client.delete(NOTES_URL, params={"id": draft["id"]})
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Credit note deleted successfully"}
    assert [row["id"] for row in client.get(NOTES_URL).json()] == [issued["id"]]


def test_delete_requires_id(client):
    response = client.delete(NOTES_URL)

    assert response.status_code == 400
    assert response.json()["error"] == "Credit note ID is required"


def test_number_taken_between_check_and_insert_is_a_client_error(client, monkeypatch):
    from app.craftops.db.models import VendorCreditNote
    from app.craftops.db.session import SessionLocal
    from app.craftops.repos.credit_notes import CreditNoteRepository

    vendor = create_vendor(client)
    lookup = CreditNoteRepository.get_by_number

    def lookup_then_concurrent_insert(self, credit_note_number):
        found = lookup(self, credit_note_number)
        with SessionLocal() as other:
            other.add(
                VendorCreditNote(
                    vendor_id=vendor["id"],
                    credit_note_number=credit_note_number,
                    reason="Concurrent request",
                    amount=10,
                    tax_amount=0,
                    total_amount=10,
                )
            )
            other.commit()
        return found

    monkeypatch.setattr(CreditNoteRepository, "get_by_number", lookup_then_concurrent_insert)
    response = create_credit_note(client, vendor["id"], "VCN-RACE")
    monkeypatch.undo()

    assert response.status_code == 400
    assert response.json()["code"] == "CREDIT_NOTE_NUMBER_EXISTS"
    rows = client.get(NOTES_URL).json()
    assert [row["reason"] for row in rows] == ["Concurrent request"]
