"""
Public resolution API surface.

External callers (record operations, CLI, tests) should import from here
rather than reaching into submodules directly.

The resolution subsystem includes:
    • NameKeyedUpsertResolver: the resolve / bind / finalize resolver
    • link_children_to_parents: full link pipeline against Supabase
    • LinkSpec and the predefined account links
    • the ResolutionError taxonomy
"""

from .errors import InvalidKey, PersistenceMismatch, ResolutionError, UnresolvedKey
from .orchestrator import (
    CONTACT_ACCOUNT_LINK,
    OPPORTUNITY_ACCOUNT_LINK,
    LinkReport,
    LinkSpec,
    link_children_to_parents,
)
from .resolver import NameKeyedUpsertResolver

__all__ = [
    "CONTACT_ACCOUNT_LINK",
    "OPPORTUNITY_ACCOUNT_LINK",
    "InvalidKey",
    "LinkReport",
    "LinkSpec",
    "NameKeyedUpsertResolver",
    "PersistenceMismatch",
    "ResolutionError",
    "UnresolvedKey",
    "link_children_to_parents",
]
