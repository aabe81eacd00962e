"""
Key-value store: composite keys (keys.py) and the table-backed store (kv.py).
"""
from ibuddy.store.kv import (
    ASSETS,
    FAQS,
    MENTEES,
    PASSWORDS,
    USERS,
    Delete,
    KeyValueStore,
    Put,
    get_store,
)

__all__ = ["ASSETS", "FAQS", "MENTEES", "PASSWORDS", "USERS", "Delete", "KeyValueStore", "Put", "get_store"]
