"""
Name-keyed upsert resolution.

Child rows (contacts, opportunities) reference their parent (an account) by
a natural key such as a name, not by a system identifier. Before the
children can be written, every key must be bound to a parent id, creating
the parents that do not exist yet and never creating one that does.

The resolver does this in three explicit phases so the caller stays in
charge of every round-trip to Supabase:

    1. resolve()           → which parents must be created
    2. bind_identifiers()  → merge the ids Supabase assigned to them
    3. finalize()          → stamp the parent id onto every child

The resolver performs no I/O. Its binding is local to one instance and is
rebuilt from scratch on every resolve() call.
"""

from typing import Any, Dict, Iterable, List, MutableMapping, Optional, Sequence, Tuple

from crmops.resolution.errors import PersistenceMismatch, UnresolvedKey
from crmops.resolution.key_extraction import child_key, extract_keys
from crmops.types import ParentRef


class NameKeyedUpsertResolver:
    """
    Resolve child → parent links by natural key.

    Parameters
    ----------
    key_field : str
        Field on each child row holding the parent's natural key
        (e.g. "last_name" for contacts linked by account name).
    parent_field : str
        Field on each child row that receives the resolved parent id
        (e.g. "account_id").
    """

    def __init__(self, key_field: str = "key", parent_field: str = "parent_id") -> None:
        self.key_field = key_field
        self.parent_field = parent_field
        self.binding: Dict[str, str] = {}

    # -----------------------------------------------------------------------
    # Phase 1: compute the creation delta
    # -----------------------------------------------------------------------
    def resolve(
        self,
        children: Sequence[MutableMapping[str, Any]],
        existing_parents: Iterable[ParentRef],
    ) -> Tuple[List[ParentRef], Dict[str, str]]:
        """
        Compute the parents that must be created for ``children``.

        Returns
        -------
        (parents_to_create, binding)
            parents_to_create holds one ParentRef (id=None) per distinct child
            key absent from ``existing_parents``, in first-occurrence order.
            binding is this resolver's live key → id mapping; ids merged later
            by bind_identifiers() appear in it.

        Raises
        ------
        InvalidKey
            If any child has an empty or missing key. Raised before the
            binding is touched.
        ValueError
            If an existing parent has no identifier.
        """
        keys = extract_keys(children, self.key_field)

        binding: Dict[str, str] = {}
        for parent in existing_parents:
            if not parent.get("id"):
                raise ValueError(f"existing parent {parent.get('key')!r} has no identifier")
            # Last write wins when the lookup returned duplicate keys.
            binding[parent["key"]] = parent["id"]  # type: ignore[assignment]

        self.binding = binding

        parents_to_create: List[ParentRef] = [
            {"key": key, "id": None} for key in keys if key not in binding
        ]
        return parents_to_create, self.binding

    # -----------------------------------------------------------------------
    # Phase 2: merge ids assigned by the store
    # -----------------------------------------------------------------------
    def bind_identifiers(
        self,
        parents_to_create: Sequence[ParentRef],
        identifiers: Sequence[Optional[str]],
    ) -> None:
        """
        Merge the identifiers assigned to newly created parents.

        ``identifiers`` must be order-preserving: identifiers[i] belongs to
        parents_to_create[i]. Nothing is merged unless every pair is valid.

        Raises
        ------
        PersistenceMismatch
            If the counts differ or any identifier is empty.
        """
        if len(identifiers) != len(parents_to_create):
            raise PersistenceMismatch(len(parents_to_create), len(identifiers))

        for position, identifier in enumerate(identifiers):
            if not identifier:
                raise PersistenceMismatch(
                    len(parents_to_create),
                    len(identifiers),
                    f"empty identifier at position {position}",
                )

        for parent, identifier in zip(parents_to_create, identifiers):
            parent["id"] = identifier
            self.binding[parent["key"]] = identifier  # type: ignore[assignment]

    # -----------------------------------------------------------------------
    # Phase 3: stamp parent ids onto children
    # -----------------------------------------------------------------------
    def finalize(
        self,
        children: Sequence[MutableMapping[str, Any]],
        binding: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Set ``parent_field`` on every child from the binding.

        Children are only modified once every key has been found, so a
        failure leaves all of them untouched.

        Raises
        ------
        UnresolvedKey
            If a child key has no bound identifier.
        """
        if binding is None:
            binding = self.binding

        resolved: List[str] = []
        for index, child in enumerate(children):
            key = child_key(child, self.key_field, index)
            if key not in binding:
                raise UnresolvedKey(key)
            resolved.append(binding[key])

        for child, parent_id in zip(children, resolved):
            child[self.parent_field] = parent_id
