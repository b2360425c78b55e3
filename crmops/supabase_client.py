"""
Supabase client wrapper for CRM record operations.

This wrapper gives the orchestrator and the record operations a small,
typed surface over the Supabase query builder. It supports both real mode
(using the Supabase Python client) and dry-run mode (deterministic,
no-write behavior for previews and tests).

Injected clients (real or fake) only need to expose ``table(name)``; see
SupabaseClientInterface in crmops/types.py.

Every query runs through SupabaseClient._execute(), so store failures
surface as RuntimeError no matter which client implementation is injected:
the v2 SDK raises postgrest's APIError from execute(), while older clients
and the test doubles report the error in the response itself.
"""

from typing import Any, Dict, List, Sequence, TypeVar, cast

from postgrest.exceptions import APIError

from crmops.config import get_supabase_credentials
from crmops.types import RowList, SupabaseClientInterface

T = TypeVar("T", bound=Dict[str, Any])

# ---------------------------------------------------------------------------
# Helper: normalize Supabase responses
# ---------------------------------------------------------------------------


def _extract_data(resp: Any) -> List[T]:
    """
    Normalize Supabase responses across:
        • real SDK objects
        • dict-style test doubles

    Always returns a list of row dictionaries.
    Raises RuntimeError on any Supabase error.
    """

    # Dict-style response (test doubles)
    if isinstance(resp, dict):
        status = resp.get("status", 200)
        if status >= 400 or resp.get("error"):
            raise RuntimeError(f"Supabase error: {resp}")
        data = resp.get("data", [])
        return cast(List[T], data or [])

    # SDK-style response
    error = getattr(resp, "error", None)
    if error:
        raise RuntimeError(f"Supabase error: {error}")

    data = getattr(resp, "data", None)
    if data is None:
        return []

    if isinstance(data, list):
        return cast(List[T], data)

    return cast(List[T], [data])


# ---------------------------------------------------------------------------
# Main wrapper class
# ---------------------------------------------------------------------------


class SupabaseClient:
    """
    A minimal, dependency-injected wrapper around a Supabase-compatible client.

    The wrapper is intentionally thin: it forwards calls to the underlying
    client and provides

        • deterministic dry-run behavior
        • typed select / insert / update / delete helpers
        • consistent error normalization
    """

    def __init__(self, client: Any = None, dry_run: bool = False) -> None:
        """
        Parameters
        ----------
        client : Any
            A Supabase-compatible client (real SDK or test double).
        dry_run : bool
            If True, forces dry-run mode regardless of the provided client.
        """
        self.dry_run = dry_run
        self.client = None if dry_run else client

        # Counter used to mint deterministic dry-run identifiers.
        self._dry_run_sequence = 0

    @classmethod
    def from_env(cls, dry_run: bool = False) -> "SupabaseClient":
        """
        Build a wrapper around a real Supabase client.

        Credentials come from SUPABASE_URL and SUPABASE_KEY (loaded from .env
        by crmops.config). In dry-run mode no credentials are required.
        """
        if dry_run:
            return cls(dry_run=True)

        url, key = get_supabase_credentials()

        # Imported lazily so dry-run previews and tests do not need the SDK.
        from supabase import create_client

        return cls(create_client(url, key))

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _require_client(self) -> SupabaseClientInterface:
        """
        Return the configured Supabase client or raise a RuntimeError.
        """
        if self.client is None:
            raise RuntimeError("Supabase client is not configured")
        return self.client

    def _next_dry_run_id(self, table: str) -> str:
        self._dry_run_sequence += 1
        return f"dry-{table}-{self._dry_run_sequence}"

    def _execute(self, query: Any) -> RowList:
        """
        Run a built query and return its rows.

        Raises
        ------
        RuntimeError
            If the SDK raises APIError or the response carries an error.
        """
        try:
            resp = query.execute()
        except APIError as e:
            raise RuntimeError(f"Supabase error: {e}") from e
        return _extract_data(resp)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def select_by_field_values(
        self,
        table: str,
        field: str,
        values: Sequence[str],
        columns: str = "*",
    ) -> RowList:
        """
        Return rows of ``table`` whose ``field`` is one of ``values``.

        Used by the link orchestrator to look up existing parents by
        natural key in a single round-trip.
        """
        if not values or self.dry_run:
            return []

        client = self._require_client()
        return self._execute(client.table(table).select(columns).in_(field, list(values)))

    def select_by_field(
        self,
        table: str,
        field: str,
        value: Any,
        columns: str = "*",
    ) -> RowList:
        """Return rows of ``table`` whose ``field`` equals ``value``, ordered by id."""
        if self.dry_run:
            return []

        client = self._require_client()
        return self._execute(client.table(table).select(columns).eq(field, value).order("id"))

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def insert_records(self, table: str, rows: Sequence[Dict[str, Any]]) -> RowList:
        """
        Insert ``rows`` into ``table`` and return the stored rows.

        Supabase returns inserted rows in input order, each carrying its
        assigned ``id``. In dry-run mode the rows are echoed back with
        deterministic ids of the form ``dry-<table>-<n>``.

        Raises
        ------
        RuntimeError
            If the Supabase client reports an error.
        """
        if not rows:
            return []

        if self.dry_run:
            return [{**row, "id": self._next_dry_run_id(table)} for row in rows]

        client = self._require_client()
        return self._execute(client.table(table).insert(list(rows)))

    def update_records(
        self,
        table: str,
        values: Dict[str, Any],
        field: str,
        value: Any,
    ) -> RowList:
        """
        Apply ``values`` to every row of ``table`` whose ``field`` equals ``value``.

        Returns the updated rows (empty in dry-run mode).
        """
        if self.dry_run:
            return []

        client = self._require_client()
        return self._execute(client.table(table).update(values).eq(field, value))

    def delete_records(self, table: str, ids: Sequence[str]) -> RowList:
        """
        Delete the rows of ``table`` with the given ids and return them.
        """
        if not ids or self.dry_run:
            return []

        client = self._require_client()
        return self._execute(client.table(table).delete().in_("id", list(ids)))
