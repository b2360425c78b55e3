"""
CRM record operations.

Each function is one self-contained record-management pattern against the
Supabase record store:

    • create_account: single-record insert
    • update_account_field: field update by name lookup
    • upsert_opportunities: list-based upsert with business defaults
    • create_opportunities_for_accounts: insert children linked by account name
    • link_contacts_to_accounts: file contacts under accounts by last name
    • insert_then_delete: bulk insert followed by bulk delete

All name-based matching goes through NameKeyedUpsertResolver so that no
operation ever creates a second row for a name that already exists.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from crmops.logging_utils import log_verbose
from crmops.resolution import (
    CONTACT_ACCOUNT_LINK,
    OPPORTUNITY_ACCOUNT_LINK,
    NameKeyedUpsertResolver,
    link_children_to_parents,
)
from crmops.resolution.key_extraction import extract_keys
from crmops.supabase_client import SupabaseClient
from crmops.types import AccountRecord, LinkSummary, ParentRef

# Days between creation and the default close date of a new opportunity.
DEFAULT_CLOSE_DAYS = 30


def opportunity_defaults(today: Optional[date] = None) -> Dict[str, Any]:
    """
    Business-field defaults applied to newly created opportunities.
    """
    today = today or date.today()
    return {
        "stage_name": "Prospecting",
        "close_date": (today + timedelta(days=DEFAULT_CLOSE_DAYS)).isoformat(),
        "amount": 0,
    }


# ---------------------------------------------------------------------------
# Single-record insert
# ---------------------------------------------------------------------------
def create_account(client: SupabaseClient, name: str, **fields: Any) -> AccountRecord:
    """
    Insert one account and return the stored row.

    Raises
    ------
    ValueError
        If ``name`` is empty.
    RuntimeError
        If Supabase reports an error or returns no row.
    """
    if not name:
        raise ValueError("account name must be provided")

    rows = client.insert_records("accounts", [{**fields, "name": name}])
    if not rows:
        raise RuntimeError(f"Account insert returned no rows for name={name!r}")

    return rows[0]  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Field update by lookup
# ---------------------------------------------------------------------------
def update_account_field(
    client: SupabaseClient,
    account_name: str,
    field: str,
    value: Any,
) -> List[Dict[str, Any]]:
    """
    Set ``field`` to ``value`` on the account named ``account_name``.

    If several accounts share the name, the one with the lowest id is
    updated.

    Raises
    ------
    ValueError
        If ``field`` is "id".
    LookupError
        If no account has that name.
    """
    if field == "id":
        raise ValueError("the id field cannot be updated")

    rows = client.select_by_field("accounts", "name", account_name, columns="id,name")
    if not rows:
        raise LookupError(f"no account named {account_name!r}")

    return client.update_records("accounts", {field: value}, "id", rows[0]["id"])


# ---------------------------------------------------------------------------
# List-based upsert with business defaults
# ---------------------------------------------------------------------------
def upsert_opportunities(
    client: SupabaseClient,
    names: Sequence[str],
    account_id: Optional[str] = None,
    defaults: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
    verbose: bool = False,
) -> Dict[str, str]:
    """
    Ensure one opportunity exists per name and return ``{name: id}``.

    Opportunities that already exist are left unchanged. Missing ones are
    created with opportunity_defaults(), overridden by ``defaults``, and
    attached to ``account_id`` when one is given.

    Raises
    ------
    InvalidKey
        If any name is empty.
    PersistenceMismatch
        If Supabase returned a different number of rows than inserted.
    """
    requested: List[Dict[str, Any]] = [{"name": name} for name in names]
    keys = extract_keys(requested, "name")
    if not keys:
        return {}

    log_verbose(f"Looking up {len(keys)} opportunities by name...", verbose)
    rows = client.select_by_field_values("opportunities", "name", keys, columns="id,name")
    existing: List[ParentRef] = [{"key": row["name"], "id": row.get("id")} for row in rows]

    resolver = NameKeyedUpsertResolver(key_field="name", parent_field="id")
    to_create, binding = resolver.resolve(requested, existing)

    if to_create:
        base = {**opportunity_defaults(today), **(defaults or {})}
        if account_id is not None:
            base["account_id"] = account_id

        payload: List[Dict[str, Any]] = [{**base, "name": parent["key"]} for parent in to_create]
        log_verbose(f"Creating {len(to_create)} opportunities...", verbose)
        created = client.insert_records("opportunities", payload)
        resolver.bind_identifiers(to_create, [row.get("id") for row in created])

    return {key: binding[key] for key in keys}


# ---------------------------------------------------------------------------
# Children linked to accounts by name
# ---------------------------------------------------------------------------
def create_opportunities_for_accounts(
    client: SupabaseClient,
    opportunities: List[Dict[str, Any]],
    dry_run: bool = False,
    verbose: bool = False,
) -> LinkSummary:
    """
    Insert opportunities, each naming its account in "account_name".

    Missing accounts are created first. The "account_name" hint is replaced
    by "account_id" in the stored rows.
    """
    return link_children_to_parents(
        opportunities, client, OPPORTUNITY_ACCOUNT_LINK, dry_run=dry_run, verbose=verbose
    )


def link_contacts_to_accounts(
    client: SupabaseClient,
    contacts: List[Dict[str, Any]],
    dry_run: bool = False,
    verbose: bool = False,
) -> LinkSummary:
    """
    Insert contacts under the account whose name equals their last name.

    Accounts that do not exist yet are created once per distinct last
    name; contacts sharing a last name share the account.
    """
    return link_children_to_parents(
        contacts, client, CONTACT_ACCOUNT_LINK, dry_run=dry_run, verbose=verbose
    )


# ---------------------------------------------------------------------------
# Bulk insert, then delete
# ---------------------------------------------------------------------------
def insert_then_delete(
    client: SupabaseClient,
    table: str,
    rows: Sequence[Dict[str, Any]],
) -> Dict[str, int]:
    """
    Insert ``rows`` into ``table``, then delete exactly the rows inserted.

    Raises
    ------
    RuntimeError
        If an inserted row comes back without an id.
    """
    inserted = client.insert_records(table, rows)

    ids: List[str] = []
    for row in inserted:
        if not row.get("id"):
            raise RuntimeError(f"Insert into {table!r} returned a row without an id: {row}")
        ids.append(row["id"])

    deleted = client.delete_records(table, ids)
    return {"inserted": len(inserted), "deleted": len(deleted)}
