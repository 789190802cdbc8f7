"""
Account — login, registration, logout and profile editing.

These are the only writers of the session store.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from kungfu import Result, Ok, Error

from storefront._errors import RequestError, StateError, ValidationError
from storefront.api import Client, ClientUpdate, ShopApi
from storefront.lift import request
from storefront.session import Identity, SessionStore
from storefront.validation import validate_phone

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "User"

type AccountError = RequestError | ValidationError | StateError


class AccountService:
    def __init__(self, api: ShopApi, session: SessionStore) -> None:
        self._api = api
        self._session = session

    async def login(self, email: str, password: str) -> Result[Identity, RequestError]:
        match await request(lambda: self._api.login(email, password)):
            case Ok(client):
                identity = Identity.from_client(
                    client,
                    name=client.name or PLACEHOLDER_NAME,
                    email=email,
                )
                self._session.establish(identity)
                return Ok(identity)
            case Error(e):
                logger.info("Login rejected for %s: %s", email, e)
                return Error(RequestError("Invalid credentials", e.status, e.details))

    async def register(self, email: str, password: str) -> Result[Identity, RequestError]:
        """Create the account and log in with a placeholder name."""
        match await request(lambda: self._api.register(email, password)):
            case Ok(client):
                identity = Identity(
                    id=client.id_key,
                    name=PLACEHOLDER_NAME,
                    email=email,
                )
                self._session.establish(identity)
                return Ok(identity)
            case Error(e):
                return Error(e)

    def logout(self) -> None:
        self._session.clear()

    async def profile(self) -> Result[Client, AccountError]:
        identity = self._session.current()
        if identity is None:
            return Error(StateError("Log in to continue", "idle"))
        return await request(lambda: self._api.get_client(identity.id))

    async def update_profile(
        self,
        name: str,
        lastname: str,
        telephone: str | None = None,
        email: str | None = None,
    ) -> Result[Identity, AccountError]:
        """Save contact details. Omitted telephone or email keep their stored values."""
        identity = self._session.current()
        if identity is None:
            return Error(StateError("Log in to continue", "idle"))
        if telephone is None:
            telephone = identity.telephone
        match validate_phone(telephone):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        update = ClientUpdate(
            name=name,
            lastname=lastname,
            email=email if email is not None else identity.email,
            telephone=telephone,
        )
        match await request(lambda: self._api.update_client(identity.id, update)):
            case Ok(client):
                saved = replace(
                    identity,
                    name=client.name or "",
                    lastname=client.lastname or "",
                    email=client.email or update.email,
                    telephone=telephone,
                )
                self._session.establish(saved)
                return Ok(saved)
            case Error(e):
                return Error(e)


__all__ = ("AccountService", "AccountError", "PLACEHOLDER_NAME")
