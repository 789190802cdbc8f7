"""
Checkout coordinator — cart retrieval, quantity changes, purchase.

Every server mutation is followed by a full cart re-fetch instead of a
local patch, so server-side stock adjustments show up immediately.
Operations are refused while another transition is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from kungfu import Result, Ok, Error

from storefront._errors import (
    CheckoutFailure,
    PurchaseStep,
    RequestError,
    StateError,
    ValidationError,
)
from storefront.api import Cart, ClientUpdate, ShopApi
from storefront.catalog import CatalogCache
from storefront.checkout._notify import LogNotifier, Notifier
from storefront.checkout._purchase import (
    PurchaseFailure,
    PurchaseRequest,
    failure,
    run_purchase,
)
from storefront.checkout._types import (
    CheckoutForm,
    CheckoutState,
    PaymentType,
    PurchaseReceipt,
    PurchaseTrail,
)
from storefront.lift import request
from storefront.session import Identity, SessionStore
from storefront.validation import validate_phone, validate_quantity, validate_total

logger = logging.getLogger(__name__)

ADJUSTMENT_NOTICE = "Stock changed since you added these items. Your cart was adjusted."
HISTORY_LIMIT = 50


class CheckoutCoordinator:
    """
    Owns the cart of the current identity and the purchase transaction.

    Example:
        coordinator = CheckoutCoordinator(api, session, catalog)
        await coordinator.load()
        await coordinator.change_quantity(product_id=3, quantity=2)

        form = coordinator.form()
        result = await coordinator.purchase(form, save_profile=False)
    """

    def __init__(
        self,
        api: ShopApi,
        session: SessionStore,
        catalog: CatalogCache,
        *,
        notifier: Notifier | None = None,
        purchase_timeout: float | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._api = api
        self._session = session
        self._catalog = catalog
        self._notifier = notifier or LogNotifier()
        self._purchase_timeout = purchase_timeout
        self._clock = clock
        self._cart = Cart()
        self._owner: int | None = None
        self._state = CheckoutState.IDLE
        self._history: deque[CheckoutState] = deque(
            [CheckoutState.IDLE], maxlen=HISTORY_LIMIT
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Observed state
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> CheckoutState:
        if self._state.in_flight:
            return self._state
        if not self._holds_cart_of(self._session.current()):
            return CheckoutState.IDLE
        return self._state

    @property
    def history(self) -> tuple[CheckoutState, ...]:
        """The last HISTORY_LIMIT states entered, oldest first."""
        return tuple(self._history)

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def controls_enabled(self) -> bool:
        """False while a transition is in flight or no cart of the current identity is held."""
        return (
            self._holds_cart_of(self._session.current())
            and not self._state.in_flight
        )

    def can_increase(self, product_id: int) -> bool:
        line = self._cart.line(product_id)
        return line is not None and line.quantity < line.product.stock

    def _holds_cart_of(self, identity: Identity | None) -> bool:
        return identity is not None and identity.id == self._owner

    def _enter(self, state: CheckoutState) -> None:
        if state is not self._state:
            logger.info("Checkout %s -> %s", self._state.value, state.value)
        self._state = state
        self._history.append(state)

    def _drop_cart(self) -> None:
        self._cart = Cart()
        self._owner = None
        if self._state is not CheckoutState.IDLE:
            self._enter(CheckoutState.IDLE)

    def _unwind(self) -> None:
        """Leave an in-flight state that was interrupted before settling."""
        if self._state.in_flight:
            logger.warning("Checkout interrupted while %s", self._state.value)
            self._enter(CheckoutState.READY)

    def _guard(self, *, loaded: bool = True) -> Result[Identity, StateError]:
        """
        Resolve who may act now.

        The held cart belongs to the identity that loaded it. Once another
        identity (or nobody) is current it is discarded, and with `loaded`
        the caller is refused until the cart is loaded again.
        """
        identity = self._session.current()
        if self._state.in_flight:
            if identity is None:
                return Error(StateError("Log in to continue", CheckoutState.IDLE.value))
            return Error(StateError(
                f"Another operation is in progress ({self._state.value})",
                self._state.value,
            ))
        if identity is None:
            self._drop_cart()
            return Error(StateError("Log in to continue", CheckoutState.IDLE.value))
        if self._owner is not None and self._owner != identity.id:
            logger.info(
                "Identity changed from client %s to %s, dropping cart",
                self._owner,
                identity.id,
            )
            self._drop_cart()
        if loaded and self._owner is None:
            return Error(StateError("Load the cart first", CheckoutState.IDLE.value))
        return Ok(identity)

    def _reject[T](self, error: ValidationError) -> Result[T, ValidationError]:
        self._notifier.error(error.message)
        return Error(error)

    # ───────────────────────────────────────────────────────────────────────────
    # Cart retrieval
    # ───────────────────────────────────────────────────────────────────────────

    async def _fetch(self, identity: Identity) -> Result[Cart, RequestError]:
        """GET the cart and surface adjustments once for this fetch."""
        result = await request(lambda: self._api.get_cart(identity.id))
        match result:
            case Ok(cart):
                self._cart = cart
                self._session.remember_cart(cart)
                if cart.has_adjustments:
                    logger.warning(
                        "Cart of client %s was adjusted server-side", identity.id
                    )
                    self._notifier.warning(ADJUSTMENT_NOTICE)
            case Error(e):
                logger.warning("Cart fetch failed: %s", e)
        return result

    async def load(self) -> Result[Cart, RequestError | StateError]:
        """Fetch the cart of the current identity and bind it to that identity."""
        match self._guard(loaded=False):
            case Error(e):
                return Error(e)
            case Ok(identity):
                pass

        self._enter(CheckoutState.LOADING_CART)
        try:
            result = await self._fetch(identity)
            match result:
                case Error(e):
                    self._cart = Cart()
                    self._notifier.error(f"Could not load your cart: {e}")
                case _:
                    pass
            self._owner = identity.id
            self._enter(CheckoutState.READY)
            return result
        finally:
            self._unwind()

    async def _settle(
        self,
        identity: Identity,
        outcome: Result[object, RequestError],
        success_message: str | None = None,
    ) -> Result[Cart, RequestError]:
        """After a mutation: notify, re-fetch, back to READY."""
        match outcome:
            case Ok(_):
                if success_message:
                    self._notifier.success(success_message)
            case Error(e):
                self._notifier.error(e.message)

        refreshed = await self._fetch(identity)
        self._enter(CheckoutState.READY)

        match outcome:
            case Error(e):
                return Error(e)
            case _:
                return refreshed

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    async def change_quantity(
        self, product_id: int, quantity: int
    ) -> Result[Cart, CheckoutFailure]:
        """
        Set a line's quantity.

        Rejected locally, with no request, unless 1 <= quantity <= line stock.
        """
        match self._guard():
            case Error(e):
                return Error(e)
            case Ok(identity):
                pass

        line = self._cart.line(product_id)
        if line is None:
            return self._reject(
                ValidationError("Product is not in the cart", field="product_id")
            )
        match validate_quantity(quantity, line.product.stock):
            case Error(e):
                return self._reject(e)
            case Ok(_):
                pass

        self._enter(CheckoutState.MUTATING)
        try:
            outcome = await request(
                lambda: self._api.update_cart_item(identity.id, product_id, quantity)
            )
            return await self._settle(identity, outcome)
        finally:
            self._unwind()

    async def remove_line(self, product_id: int) -> Result[Cart, CheckoutFailure]:
        match self._guard():
            case Error(e):
                return Error(e)
            case Ok(identity):
                pass

        self._enter(CheckoutState.MUTATING)
        try:
            outcome = await request(
                lambda: self._api.remove_cart_item(identity.id, product_id)
            )
            return await self._settle(identity, outcome, "Removed from cart")
        finally:
            self._unwind()

    async def add_item(
        self, product_id: int, quantity: int, stock: int | None = None
    ) -> Result[Cart, CheckoutFailure]:
        """
        Add a product to the cart.

        The stock ceiling comes from `stock` or else from the catalog cache;
        an unknown product is left for the server to judge.
        """
        match self._guard():
            case Error(e):
                return Error(e)
            case Ok(identity):
                pass

        if stock is None:
            product = self._catalog.product(product_id)
            stock = product.stock if product is not None else None
        if stock is not None:
            match validate_quantity(quantity, stock):
                case Error(e):
                    return self._reject(e)
                case Ok(_):
                    pass
        elif quantity < 1:
            return self._reject(
                ValidationError("Quantity must be at least 1", field="quantity")
            )

        self._enter(CheckoutState.MUTATING)
        try:
            outcome = await request(
                lambda: self._api.add_cart_item(identity.id, product_id, quantity)
            )
            return await self._settle(
                identity, outcome, f"Added to cart ({quantity} units)"
            )
        finally:
            self._unwind()

    # ───────────────────────────────────────────────────────────────────────────
    # Purchase
    # ───────────────────────────────────────────────────────────────────────────

    def form(self, payment_type: PaymentType = PaymentType.CARD) -> CheckoutForm:
        """Checkout form prefilled from the current identity."""
        identity = self._session.current()
        if identity is None:
            return CheckoutForm(payment_type=payment_type)
        return CheckoutForm.prefilled(identity, payment_type)

    def validate(self, form: CheckoutForm) -> Result[CheckoutForm, ValidationError]:
        match validate_phone(form.telephone):
            case Error(e):
                return Error(e)
            case _:
                return Ok(form)

    def needs_profile_decision(self, form: CheckoutForm) -> bool:
        """True when the user must choose between saving contact edits or not."""
        identity = self._session.current()
        return identity is not None and form.contact_differs(identity)

    async def _save_profile(self, identity: Identity, form: CheckoutForm) -> Identity:
        """Best effort: a failed save never blocks the purchase."""
        update = ClientUpdate(
            name=form.name,
            lastname=form.lastname,
            email=form.email or identity.email,
            telephone=form.telephone,
        )
        match await request(lambda: self._api.update_client(identity.id, update)):
            case Ok(client):
                saved = replace(
                    identity,
                    name=client.name or "",
                    lastname=client.lastname or "",
                    email=client.email or identity.email,
                    telephone=client.telephone or "",
                )
                self._session.establish(saved)
                self._notifier.success("Profile updated")
                return saved
            case Error(e):
                logger.warning("Profile save during checkout failed: %s", e)
                self._notifier.warning(
                    "Could not save your profile, continuing with the purchase"
                )
                return identity

    async def _submit(
        self, req: PurchaseRequest, trail: PurchaseTrail
    ) -> Result[PurchaseReceipt, PurchaseFailure]:
        if self._purchase_timeout is None:
            return await run_purchase(self._api, req, trail, clock=self._clock)
        try:
            async with asyncio.timeout(self._purchase_timeout):
                return await run_purchase(self._api, req, trail, clock=self._clock)
        except TimeoutError:
            pending = PurchaseStep(min(trail.steps_executed + 1, len(PurchaseStep)))
            return Error(failure(trail, pending, RequestError("Purchase timed out")))

    async def purchase(
        self, form: CheckoutForm, *, save_profile: bool = False
    ) -> Result[PurchaseReceipt, CheckoutFailure]:
        """
        Turn the cart into bill + order + order lines, then empty it.

        On success: catalog refreshed, cart empty, state SUCCESS.
        On failure: state FAILED, cart re-fetched, back to READY.
        On cancellation: state FAILED, then the cart is dropped and has to
        be loaded again, since the server may hold part of the purchase.
        Records already created server-side are left in place.
        """
        match self._guard():
            case Error(e):
                return Error(e)
            case Ok(identity):
                pass

        match self.validate(form):
            case Error(e):
                return self._reject(e)
            case Ok(_):
                pass
        if self._cart.is_empty:
            return self._reject(ValidationError("Your cart is empty", field="cart"))
        match validate_total(self._cart.total):
            case Error(e):
                return self._reject(e)
            case Ok(_):
                pass

        self._enter(CheckoutState.SUBMITTING)
        try:
            return await self._complete(identity, form, save_profile)
        except asyncio.CancelledError:
            logger.warning("Purchase of client %s was cancelled", identity.id)
            if self._state is not CheckoutState.FAILED:
                self._enter(CheckoutState.FAILED)
            self._drop_cart()
            raise

    async def _complete(
        self, identity: Identity, form: CheckoutForm, save_profile: bool
    ) -> Result[PurchaseReceipt, CheckoutFailure]:
        if save_profile and form.contact_differs(identity):
            identity = await self._save_profile(identity, form)

        trail = PurchaseTrail()
        req = PurchaseRequest(
            client_id=identity.id,
            cart=self._cart,
            payment_type=form.payment_type,
        )
        result = await self._submit(req, trail)

        match result:
            case Ok(receipt):
                match await self._catalog.refresh():
                    case Error(e):
                        self._notifier.warning(f"Catalog could not be refreshed: {e}")
                    case _:
                        pass
                self._cart = Cart()
                self._session.forget_cart()
                self._enter(CheckoutState.SUCCESS)
                self._notifier.success("Purchase complete")
                logger.info(
                    "Purchase complete: order %s, bill %s",
                    receipt.order_id,
                    receipt.bill_id,
                )
                return Ok(receipt)

            case Error(e):
                self._enter(CheckoutState.FAILED)
                self._notifier.error(f"Could not process the order: {e}")
                await self._fetch(identity)
                self._enter(CheckoutState.READY)
                return Error(e)


__all__ = ("CheckoutCoordinator", "ADJUSTMENT_NOTICE", "HISTORY_LIMIT")
