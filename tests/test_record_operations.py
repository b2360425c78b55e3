"""
Tests for the CRM record operations.

Each operation runs against SupabaseClient wrapping the in-memory
FakeClient, so assertions are made on the stored rows themselves.
"""

from datetime import date

import pytest

from crmops.record_operations import (
    create_account,
    create_opportunities_for_accounts,
    insert_then_delete,
    link_contacts_to_accounts,
    opportunity_defaults,
    update_account_field,
    upsert_opportunities,
)
from crmops.resolution import InvalidKey
from crmops.supabase_client import SupabaseClient
from tests.fixtures.fake_supabase import FakeClient

TODAY = date(2024, 1, 15)


# ---------------------------------------------------------------------------
# create_account
# ---------------------------------------------------------------------------


def test_create_account_inserts_one_row(fake_client, client) -> None:
    row = create_account(client, "Acme", industry="Retail")

    assert row["name"] == "Acme"
    assert row["industry"] == "Retail"
    assert row["id"]
    assert fake_client.store["accounts"] == [row]


def test_create_account_requires_name(fake_client, client) -> None:
    with pytest.raises(ValueError):
        create_account(client, "")

    assert fake_client.calls == []


# ---------------------------------------------------------------------------
# update_account_field
# ---------------------------------------------------------------------------


def test_update_account_field_by_name(fake_client, client) -> None:
    fake_client.store["accounts"] = [
        {"id": "a1", "name": "Acme", "industry": None},
        {"id": "a2", "name": "Globex", "industry": None},
    ]

    rows = update_account_field(client, "Acme", "industry", "Retail")

    assert rows == [{"id": "a1", "name": "Acme", "industry": "Retail"}]
    assert fake_client.store["accounts"][1]["industry"] is None


def test_update_account_field_first_match_wins(fake_client, client) -> None:
    fake_client.store["accounts"] = [
        {"id": "a1", "name": "Archive", "phone": None},
        {"id": "a2", "name": "Archive", "phone": None},
    ]

    update_account_field(client, "Archive", "phone", "555-0100")

    assert [a["phone"] for a in fake_client.store["accounts"]] == ["555-0100", None]


def test_update_account_field_duplicate_names_updates_lowest_id(fake_client, client) -> None:
    fake_client.store["accounts"] = [
        {"id": "a2", "name": "Archive", "phone": None},
        {"id": "a1", "name": "Archive", "phone": None},
    ]

    rows = update_account_field(client, "Archive", "phone", "555-0100")

    assert [r["id"] for r in rows] == ["a1"]
    assert [a["phone"] for a in fake_client.store["accounts"]] == [None, "555-0100"]


def test_update_account_field_missing_account(client) -> None:
    with pytest.raises(LookupError, match="Nobody"):
        update_account_field(client, "Nobody", "industry", "Retail")


def test_update_account_field_rejects_id(client) -> None:
    with pytest.raises(ValueError):
        update_account_field(client, "Acme", "id", "other")


# ---------------------------------------------------------------------------
# upsert_opportunities
# ---------------------------------------------------------------------------


def test_opportunity_defaults() -> None:
    assert opportunity_defaults(TODAY) == {
        "stage_name": "Prospecting",
        "close_date": "2024-02-14",
        "amount": 0,
    }


def test_upsert_opportunities_creates_missing_with_defaults(fake_client, client) -> None:
    fake_client.store["opportunities"] = [
        {"id": "o1", "name": "Renewal", "stage_name": "Closed Won"},
    ]

    binding = upsert_opportunities(
        client, ["Renewal", "Expansion", "Renewal"], account_id="a1", today=TODAY
    )

    stored = fake_client.store["opportunities"]
    assert len(stored) == 2
    assert stored[0] == {"id": "o1", "name": "Renewal", "stage_name": "Closed Won"}

    created = stored[1]
    assert created["name"] == "Expansion"
    assert created["stage_name"] == "Prospecting"
    assert created["close_date"] == "2024-02-14"
    assert created["amount"] == 0
    assert created["account_id"] == "a1"

    assert binding == {"Renewal": "o1", "Expansion": created["id"]}
    assert list(binding) == ["Renewal", "Expansion"]


def test_upsert_opportunities_caller_defaults_override(fake_client, client) -> None:
    upsert_opportunities(client, ["Pilot"], defaults={"stage_name": "Qualification"}, today=TODAY)

    created = fake_client.store["opportunities"][0]
    assert created["stage_name"] == "Qualification"
    assert "account_id" not in created


def test_upsert_opportunities_is_idempotent(fake_client, client) -> None:
    first = upsert_opportunities(client, ["A", "B"], today=TODAY)
    second = upsert_opportunities(client, ["B", "A"], today=TODAY)

    assert first == second
    assert len(fake_client.store["opportunities"]) == 2


def test_upsert_opportunities_verbose_reports_progress(fake_client, client, capsys) -> None:
    fake_client.store["opportunities"] = [{"id": "o1", "name": "Renewal"}]

    upsert_opportunities(client, ["Renewal", "Expansion"], today=TODAY, verbose=True)

    out = capsys.readouterr().out
    assert "Looking up 2 opportunities by name..." in out
    assert "Creating 1 opportunities..." in out


def test_upsert_opportunities_quiet_by_default(client, capsys) -> None:
    upsert_opportunities(client, ["Renewal"], today=TODAY)

    assert capsys.readouterr().out == ""


def test_upsert_opportunities_empty_names(fake_client, client) -> None:
    assert upsert_opportunities(client, []) == {}
    assert fake_client.calls == []


def test_upsert_opportunities_rejects_empty_name(fake_client, client) -> None:
    with pytest.raises(InvalidKey):
        upsert_opportunities(client, ["Good", ""])

    assert fake_client.calls == []


# ---------------------------------------------------------------------------
# Linking operations
# ---------------------------------------------------------------------------


def test_link_contacts_to_accounts_scenario(fake_client, client) -> None:
    fake_client.store["accounts"] = [{"id": "P1", "name": "Jane"}]
    contacts = [{"last_name": "Doe"}, {"last_name": "Jane"}, {"last_name": "Doe"}]

    summary = link_contacts_to_accounts(client, contacts)

    doe_id = summary["binding"]["Doe"]
    assert [c["account_id"] for c in contacts] == [doe_id, "P1", doe_id]
    assert summary["parents_created"] == 1


def test_create_opportunities_for_accounts(fake_client, client) -> None:
    opportunities = [
        {"name": "Deal 1", "account_name": "Acme"},
        {"name": "Deal 2", "account_name": "Acme"},
    ]

    summary = create_opportunities_for_accounts(client, opportunities)

    assert summary["parents_created"] == 1
    acme_id = fake_client.store["accounts"][0]["id"]
    assert [o["account_id"] for o in fake_client.store["opportunities"]] == [acme_id, acme_id]


# ---------------------------------------------------------------------------
# insert_then_delete
# ---------------------------------------------------------------------------


def test_insert_then_delete_leaves_table_as_before(fake_client, client) -> None:
    fake_client.store["contacts"] = [{"id": "keep", "last_name": "Stays"}]

    summary = insert_then_delete(
        client, "contacts", [{"last_name": "Temp1"}, {"last_name": "Temp2"}]
    )

    assert summary == {"inserted": 2, "deleted": 2}
    assert fake_client.store["contacts"] == [{"id": "keep", "last_name": "Stays"}]
    assert fake_client.calls == [("insert", "contacts"), ("delete", "contacts")]


def test_insert_then_delete_dry_run_deletes_nothing() -> None:
    client = SupabaseClient(FakeClient(), dry_run=True)

    assert insert_then_delete(client, "contacts", [{"last_name": "Temp"}]) == {
        "inserted": 1,
        "deleted": 0,
    }


def test_insert_then_delete_empty_rows(fake_client, client) -> None:
    assert insert_then_delete(client, "contacts", []) == {"inserted": 0, "deleted": 0}
    assert fake_client.calls == []
