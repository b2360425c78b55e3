"""
Natural-key extraction for child records.

Pure helpers used by the resolver and the link orchestrator. These functions
never touch Supabase; they only validate and collect the keys that child
rows use to reference their parents.

Keys are case-sensitive and are NOT trimmed: "Doe" and "Doe " are
different parents. The only normalization is rejection of empty keys.
"""

from typing import Any, Dict, List, Mapping, Sequence

from crmops.resolution.errors import InvalidKey


# ---------------------------------------------------------------------------
# Validate a single key
# ---------------------------------------------------------------------------
def child_key(child: Mapping[str, Any], key_field: str, index: int = 0) -> str:
    """
    Return the natural key carried by ``child``.

    Raises:
        InvalidKey: if the field is missing, None, not a string, or empty.
    """
    value = child.get(key_field)
    if not isinstance(value, str) or not value:
        raise InvalidKey(index, key_field, value)
    return value


# ---------------------------------------------------------------------------
# Extract distinct keys across children
# ---------------------------------------------------------------------------
def extract_keys(children: Sequence[Mapping[str, Any]], key_field: str) -> List[str]:
    """
    Return the distinct keys referenced by ``children`` in first-occurrence order.

    Every child is validated before anything is returned, so a single bad
    key aborts the whole extraction.

    Example:
        children = [{"last_name": "Doe"}, {"last_name": "Jane"}, {"last_name": "Doe"}]

    Produces:
        ["Doe", "Jane"]
    """
    seen: Dict[str, None] = {}

    for index, child in enumerate(children):
        key = child_key(child, key_field, index)
        if key not in seen:
            seen[key] = None

    return list(seen)
