"""
Link orchestrator: persist child rows linked to parents by natural key.

This module runs the full resolve → create → bind → finalize → insert
sequence for one parent/child pairing against Supabase. The pairing is
described by a LinkSpec, so the same code links contacts to accounts by
last name and opportunities to accounts by account name.

The orchestrator is linear and side-effect-transparent:

    1. Key extraction (InvalidKey aborts before any I/O)
    2. Existing-parent lookup (one select)
    3. resolve() → parents to create
    4. Parent insert (one write) + bind_identifiers()
    5. finalize() → parent id stamped on every child
    6. Child insert (one write)

Errors are never swallowed: resolution errors and Supabase RuntimeErrors
propagate to the caller and abort the remaining stages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from crmops.logging_utils import log_verbose
from crmops.resolution.key_extraction import extract_keys
from crmops.resolution.resolver import NameKeyedUpsertResolver
from crmops.supabase_client import SupabaseClient
from crmops.types import LinkSummary, ParentRef


# ============================================================================
# LINK SPEC: WHICH TABLES AND COLUMNS TAKE PART IN A LINK
# ============================================================================
@dataclass(frozen=True)
class LinkSpec:
    """
    Describe one parent/child pairing.

    persist_child_key is False when the child's key field is only a lookup
    hint (e.g. "account_name" on an opportunity) and not a real column; the
    field is then dropped before the children are inserted.
    """

    parent_table: str
    parent_key_field: str
    child_table: str
    child_key_field: str
    child_parent_field: str
    parent_defaults: Mapping[str, Any] = field(default_factory=dict)
    persist_child_key: bool = True


# Contacts are filed under the account whose name matches their last name.
CONTACT_ACCOUNT_LINK = LinkSpec(
    parent_table="accounts",
    parent_key_field="name",
    child_table="contacts",
    child_key_field="last_name",
    child_parent_field="account_id",
)

# Opportunities name their account explicitly.
OPPORTUNITY_ACCOUNT_LINK = LinkSpec(
    parent_table="accounts",
    parent_key_field="name",
    child_table="opportunities",
    child_key_field="account_name",
    child_parent_field="account_id",
    persist_child_key=False,
)


# ============================================================================
# LINK REPORT: STRUCTURED PIPELINE METRICS
# ============================================================================
class LinkReport:
    """
    Counters accumulated across the link stages.

    The CLI prints the summary; tests assert on exact values.
    """

    def __init__(self) -> None:
        self.children_processed = 0
        self.parents_existing = 0
        self.parents_created = 0
        self.children_inserted = 0
        self.binding: Dict[str, str] = {}

    def to_summary_dict(self) -> LinkSummary:
        return {
            "children_processed": self.children_processed,
            "parents_existing": self.parents_existing,
            "parents_created": self.parents_created,
            "children_inserted": self.children_inserted,
            "binding": dict(self.binding),
        }


# ============================================================================
# HELPERS
# ============================================================================
def lookup_existing_parents(
    client: SupabaseClient,
    spec: LinkSpec,
    keys: Sequence[str],
) -> List[ParentRef]:
    """
    Fetch the parents whose key is in ``keys`` as ParentRefs.
    """
    rows = client.select_by_field_values(
        spec.parent_table,
        spec.parent_key_field,
        keys,
        columns=f"id,{spec.parent_key_field}",
    )
    return [{"key": row[spec.parent_key_field], "id": row.get("id")} for row in rows]


def create_parents(
    client: SupabaseClient,
    spec: LinkSpec,
    parents_to_create: Sequence[ParentRef],
) -> List[Any]:
    """
    Insert the missing parents and return their ids in input order.

    A short or malformed response is not repaired here; the resolver's
    bind_identifiers() rejects it with PersistenceMismatch.
    """
    payload = [
        {**spec.parent_defaults, spec.parent_key_field: parent["key"]}
        for parent in parents_to_create
    ]
    rows = client.insert_records(spec.parent_table, payload)
    return [row.get("id") for row in rows]


def _child_payload(children: Sequence[Dict[str, Any]], spec: LinkSpec) -> List[Dict[str, Any]]:
    if spec.persist_child_key:
        return [dict(child) for child in children]
    return [
        {name: value for name, value in child.items() if name != spec.child_key_field}
        for child in children
    ]


# ============================================================================
# MAIN ORCHESTRATOR
# ============================================================================
def link_children_to_parents(
    children: Sequence[Dict[str, Any]],
    client: SupabaseClient,
    spec: LinkSpec,
    dry_run: bool = False,
    verbose: bool = False,
) -> LinkSummary:
    """
    Link ``children`` to their parents by natural key and persist both.

    ``children`` are mutated in place: each receives the resolved parent id
    in ``spec.child_parent_field``.

    In dry-run mode the client is switched to dry-run behavior: no rows are
    read or written, every key is treated as missing, and deterministic
    ``dry-<table>-<n>`` ids are bound instead.

    Raises
    ------
    InvalidKey
        A child has an empty or missing key (before any Supabase call).
    PersistenceMismatch
        The parent insert returned a different number of ids than requested.
    RuntimeError
        Supabase reported an error.
    """
    if dry_run and not client.dry_run:
        client = SupabaseClient(dry_run=True)

    report = LinkReport()
    report.children_processed = len(children)

    resolver = NameKeyedUpsertResolver(
        key_field=spec.child_key_field,
        parent_field=spec.child_parent_field,
    )

    # ------------------------------------------------------------
    # 1. Keys, validated before any round-trip
    # ------------------------------------------------------------
    keys = extract_keys(children, spec.child_key_field)
    if not keys:
        log_verbose("No children to link.", verbose)
        return report.to_summary_dict()

    # ------------------------------------------------------------
    # 2. Existing parents
    # ------------------------------------------------------------
    log_verbose(f"Looking up {len(keys)} {spec.parent_table} by {spec.parent_key_field}...", verbose)
    existing = lookup_existing_parents(client, spec, keys)

    # ------------------------------------------------------------
    # 3. Creation delta
    # ------------------------------------------------------------
    parents_to_create, binding = resolver.resolve(children, existing)
    report.parents_existing = len(binding)

    # ------------------------------------------------------------
    # 4. Create missing parents, merge their ids
    # ------------------------------------------------------------
    if parents_to_create:
        log_verbose(f"Creating {len(parents_to_create)} {spec.parent_table}...", verbose)
        identifiers = create_parents(client, spec, parents_to_create)
        resolver.bind_identifiers(parents_to_create, identifiers)
        report.parents_created = len(parents_to_create)

    # ------------------------------------------------------------
    # 5. Stamp parent ids on children
    # ------------------------------------------------------------
    resolver.finalize(children, binding)

    # ------------------------------------------------------------
    # 6. Persist children
    # ------------------------------------------------------------
    log_verbose(f"Inserting {len(children)} {spec.child_table}...", verbose)
    inserted = client.insert_records(spec.child_table, _child_payload(children, spec))
    report.children_inserted = len(inserted)
    report.binding = binding

    return report.to_summary_dict()
