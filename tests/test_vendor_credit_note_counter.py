from datetime import date

import pytest

from app.craftops.services.credit_note_counter import financial_year_for, format_credit_note_number
from tests.craftops_helpers import create_credit_note, create_vendor

COUNTER_URL = "/api/vendor-credit-note-counter"


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2024, 4, 1), "2024-2025"),
        (date(2025, 3, 31), "2024-2025"),
        (date(2025, 1, 15), "2024-2025"),
        (date(2025, 12, 1), "2025-2026"),
    ],
)
def test_financial_year_starts_in_april(day, expected):
    assert financial_year_for(day, 4) == expected


def test_financial_year_respects_custom_start_month():
    assert financial_year_for(date(2025, 2, 1), 1) == "2025-2026"


def test_number_format_is_zero_padded():
    assert format_credit_note_number("2024-2025", 7, "VCN") == "VCN-2024-2025-0007"


def test_peek_does_not_consume_numbers(client):
    fy = financial_year_for(date.today())

    first = client.get(COUNTER_URL).json()
    second = client.get(COUNTER_URL).json()

    assert first == second
    assert first["currentNumber"] == 0
    assert first["nextNumber"] == 1
    assert first["financialYear"] == fy
    assert first["creditNoteNumber"] == f"VCN-{fy}-0001"


def test_issue_hands_out_consecutive_numbers(client):
    fy = financial_year_for(date.today())

    first = client.post(COUNTER_URL)
    second = client.post(COUNTER_URL)

    assert first.status_code == 200
    assert first.json()["creditNoteNumber"] == f"VCN-{fy}-0001"
    assert second.json()["creditNoteNumber"] == f"VCN-{fy}-0002"
    assert second.json()["nextNumber"] == 3
    assert client.get(COUNTER_URL).json()["currentNumber"] == 2


def test_sync_follows_highest_stored_number(client):
    fy = financial_year_for(date.today())
    vendor = create_vendor(client)
    create_credit_note(client, vendor["id"], f"VCN-{fy}-0003")
    create_credit_note(client, vendor["id"], f"VCN-{fy}-0012")
    create_credit_note(client, vendor["id"], "VCN-1999-2000-0099")

    response = client.patch(COUNTER_URL)

    assert response.status_code == 200
    assert response.json() == {"message": "Counter synced successfully", "lastNumber": 12, "financialYear": fy}
    assert client.post(COUNTER_URL).json()["creditNoteNumber"] == f"VCN-{fy}-0013"


def test_sync_without_notes_resets_to_zero(client):
    client.post(COUNTER_URL)

    response = client.patch(COUNTER_URL)

    assert response.json()["lastNumber"] == 0
    assert client.get(COUNTER_URL).json()["nextNumber"] == 1


def test_sync_orders_numbers_past_four_digits(client):
    fy = financial_year_for(date.today())
    vendor = create_vendor(client)
    create_credit_note(client, vendor["id"], f"VCN-{fy}-9999")
    create_credit_note(client, vendor["id"], f"VCN-{fy}-10000")

    response = client.patch(COUNTER_URL)

    assert response.json()["lastNumber"] == 10000
    assert client.post(COUNTER_URL).json()["creditNoteNumber"] == f"VCN-{fy}-10001"
