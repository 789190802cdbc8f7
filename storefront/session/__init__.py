"""
Session — current identity backed by durable storage.

    from storefront import session as Se

    store = Se.SessionStore(Se.FileStorage(path))
    store.establish(Se.Identity(id=7, name="Ana"))
    identity = store.current()
"""

from __future__ import annotations

from storefront.session._storage import Storage, MemoryStorage, FileStorage
from storefront.session._store import (
    Identity,
    SessionStore,
    IDENTITY_KEYS,
    CART_SNAPSHOT,
)

__all__ = (
    "Storage",
    "MemoryStorage",
    "FileStorage",
    "Identity",
    "SessionStore",
    "IDENTITY_KEYS",
    "CART_SNAPSHOT",
)
