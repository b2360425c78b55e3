"""
crmops/types.py

Centralized type definitions for crmops.

This module defines the TypedDicts and Protocols shared by the resolver,
the link orchestrator, the Supabase client wrapper, and the test doubles.
Keeping them in one place gives:

    • a single source of truth for CRM row shapes
    • clear contracts between the CLI, the orchestrator, and the Supabase layer
    • easy mocking and dependency injection in tests
"""

from typing import Any, Dict, List, Optional, Protocol, TypedDict


# ---------------------------------------------------------------------------
# ParentRef
# ---------------------------------------------------------------------------
# A parent entity known only by its natural key until it is persisted.
#
# "id" is None for parents the resolver has asked the caller to create.
# Two ParentRefs with the same key describe the same parent.
# ---------------------------------------------------------------------------
class ParentRef(TypedDict):
    key: str
    id: Optional[str]


# ---------------------------------------------------------------------------
# CRM rows
# ---------------------------------------------------------------------------
# total=False allows partial construction (e.g., before Supabase assigns "id").
# ---------------------------------------------------------------------------
class AccountRecord(TypedDict, total=False):
    id: Optional[str]
    name: str
    industry: Optional[str]
    phone: Optional[str]
    website: Optional[str]


# ---------------------------------------------------------------------------
# LinkSummary
# ---------------------------------------------------------------------------
# Structured summary returned by link_children_to_parents(). The CLI prints
# it; tests assert on the counters.
# ---------------------------------------------------------------------------
class LinkSummary(TypedDict):
    children_processed: int
    parents_existing: int
    parents_created: int
    children_inserted: int
    binding: Dict[str, str]


# ---------------------------------------------------------------------------
# SupabaseExecuteResponse
# ---------------------------------------------------------------------------
# Dict-style response returned by test doubles. The real SDK returns an
# object with .data (and on some versions .error); _extract_data() in
# supabase_client.py accepts both shapes.
# ---------------------------------------------------------------------------
class SupabaseExecuteResponse(TypedDict, total=False):
    status: int
    data: Any
    error: Optional[Any]


# ---------------------------------------------------------------------------
# SupabaseClientInterface
# ---------------------------------------------------------------------------
# The subset of the Supabase Python client used by SupabaseClient.
#
# The real client is used as:
#   client.table("accounts").select("id,name").in_("name", [...]).execute()
#   client.table("accounts").insert([...]).execute()
#
# This Protocol is structural: the real SDK and the in-memory fakes in
# tests/fixtures both satisfy it.
# ---------------------------------------------------------------------------
class SupabaseClientInterface(Protocol):
    def table(self, name: str) -> Any:
        """
        Return a query builder for the given table.
        The builder must support select/insert/update/delete,
        the .eq()/.in_() filters, .order(), and .execute().
        """
        ...


RowList = List[Dict[str, Any]]
