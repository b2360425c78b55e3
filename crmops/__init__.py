"""
crmops: CRM record operations on Supabase.

Create, update, upsert, and delete CRM rows (accounts, contacts,
opportunities), linking children to parents by natural key.
"""

__version__ = "0.1.0"
