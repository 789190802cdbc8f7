"""
Session store — the authenticated identity, persisted across restarts.

Single writer (login, registration, profile update, logout), many readers.
Consumers receive the store explicitly; there is no module-level session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from pydantic import ValidationError as SchemaError

from storefront.api import Cart, Client
from storefront.session._storage import Storage

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Storage Keys
# ═══════════════════════════════════════════════════════════════════════════════

USER_ID = "user_id"
USER_NAME = "user_name"
USER_LASTNAME = "user_lastname"
USER_EMAIL = "user_email"
USER_TELEPHONE = "user_telephone"
USER_IS_ADMIN = "user_is_admin"
CART_SNAPSHOT = "cart"

IDENTITY_KEYS = (
    USER_ID,
    USER_NAME,
    USER_LASTNAME,
    USER_EMAIL,
    USER_TELEPHONE,
    USER_IS_ADMIN,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated principal. Optional fields are empty strings, never None."""

    id: int
    name: str = ""
    lastname: str = ""
    email: str = ""
    telephone: str = ""
    is_admin: bool = False

    @classmethod
    def from_client(cls, client: Client, **overrides: object) -> Identity:
        identity = cls(
            id=client.id_key,
            name=client.name or "",
            lastname=client.lastname or "",
            email=client.email or "",
            telephone=client.telephone or "",
            is_admin=client.is_admin,
        )
        return replace(identity, **overrides) if overrides else identity

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.lastname}".strip()


# ═══════════════════════════════════════════════════════════════════════════════
# Session Store
# ═══════════════════════════════════════════════════════════════════════════════


class SessionStore:
    """
    Example:
        session = SessionStore(FileStorage(settings.session_file))
        session.establish(Identity(id=7, name="Ana"))
        session.current()   # Identity(id=7, name="Ana", ...)
        session.clear()
        session.current()   # None
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._identity = self._restore()

    def _restore(self) -> Identity | None:
        raw_id = self._storage.get(USER_ID)
        if not raw_id:
            return None
        try:
            user_id = int(raw_id)
        except ValueError:
            logger.warning("Discarding session with malformed user id %r", raw_id)
            return None
        return Identity(
            id=user_id,
            name=self._storage.get(USER_NAME) or "",
            lastname=self._storage.get(USER_LASTNAME) or "",
            email=self._storage.get(USER_EMAIL) or "",
            telephone=self._storage.get(USER_TELEPHONE) or "",
            is_admin=self._storage.get(USER_IS_ADMIN) == "true",
        )

    def current(self) -> Identity | None:
        """Active identity, or None for a guest."""
        return self._identity

    def establish(self, identity: Identity) -> None:
        """Make `identity` current and persist every field of it."""
        self._storage.set(USER_ID, str(identity.id))
        self._storage.set(USER_NAME, identity.name or "")
        self._storage.set(USER_LASTNAME, identity.lastname or "")
        self._storage.set(USER_EMAIL, identity.email or "")
        self._storage.set(USER_TELEPHONE, identity.telephone or "")
        self._storage.set(USER_IS_ADMIN, "true" if identity.is_admin else "false")
        self._identity = identity
        logger.info("Session established for client %s", identity.id)

    def clear(self) -> None:
        """Forget the identity and any cached cart snapshot."""
        self._storage.remove_all((*IDENTITY_KEYS, CART_SNAPSHOT))
        self._identity = None
        logger.info("Session cleared")

    # ───────────────────────────────────────────────────────────────────────────
    # Cart snapshot
    # ───────────────────────────────────────────────────────────────────────────

    def remember_cart(self, cart: Cart) -> None:
        self._storage.set(CART_SNAPSHOT, cart.model_dump_json())

    def forget_cart(self) -> None:
        self._storage.remove(CART_SNAPSHOT)

    def cached_cart(self) -> Cart | None:
        """Last fetched cart. Display only, the server copy is authoritative."""
        raw = self._storage.get(CART_SNAPSHOT)
        if raw is None:
            return None
        try:
            return Cart.model_validate_json(raw)
        except SchemaError:
            logger.warning("Discarding unreadable cart snapshot")
            self._storage.remove(CART_SNAPSHOT)
            return None


__all__ = (
    "Identity",
    "SessionStore",
    "IDENTITY_KEYS",
    "CART_SNAPSHOT",
)
