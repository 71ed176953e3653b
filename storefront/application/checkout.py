"""Use case: validate and place an order paid from the wallet balance."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from storefront.core.exceptions import (
    ApiException,
    BackendError,
    CheckoutValidationError,
    StorefrontException,
    TransportError,
)
from storefront.core.navigation import THANKS_PATH, Navigator
from storefront.core.notifications import WARNING_DURATION_MS, NotificationSink, Severity
from storefront.core.sentry_integration import capture_exception
from storefront.domain.address_selection import AddressSelection, AddressSelector
from storefront.domain.checkout_fsm import (
    BUSY_STATES,
    CheckoutState,
    ValidationResult,
    validate,
    validate_transition,
)
from storefront.domain.models import (
    Amount,
    CheckoutRequest,
    LineItem,
    OrderConfirmation,
)
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import (
    SessionStore,
    read_balance,
    read_session,
    write_balance,
)

logger = logging.getLogger(__name__)

ORDER_PLACED_MESSAGE = "Order placed successfully"
NOT_LOGGED_IN_MESSAGE = "Please log in to place an order."
CHECKOUT_TRANSPORT_MESSAGE = (
    "Could not place the order. Check that the backend is running, "
    "reachable and returns valid JSON."
)


@dataclass
class CheckoutOutcome:
    ok: bool
    error_key: str | None = None
    message: str | None = None
    confirmation: OrderConfirmation | None = None
    validation: ValidationResult | None = None
    error: ApiException | None = None

    def raise_for_error(self) -> None:
        if self.ok:
            return
        if self.error is not None:
            raise self.error
        if self.validation is not None and not self.validation.ok:
            raise CheckoutValidationError(self.validation)
        raise StorefrontException(self.message or self.error_key or "checkout failed")


class CheckoutOrchestrator:
    """Runs Idle -> Validating -> Submitting -> Succeeded|Failed -> Idle.

    At most one checkout is in flight; a call made while another one is
    validating or submitting returns ``error_key="in_flight"`` untouched.
    """

    def __init__(
        self,
        client: StorefrontApiClient,
        session_store: SessionStore,
        notifier: NotificationSink,
        navigator: Navigator,
    ) -> None:
        self.client = client
        self.session_store = session_store
        self.notifier = notifier
        self.navigator = navigator
        self._state = CheckoutState.IDLE

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in BUSY_STATES

    def _transition(self, target: CheckoutState) -> None:
        check = validate_transition(self._state, target)
        if not check.allowed:
            raise StorefrontException(check.reason or "invalid checkout transition")
        logger.info("checkout %s -> %s", self._state.value, target.value)
        self._state = target

    def _finish(self) -> None:
        if self._state in (CheckoutState.SUCCEEDED, CheckoutState.FAILED):
            self._transition(CheckoutState.IDLE)
        elif self._state is not CheckoutState.IDLE:
            logger.warning("checkout aborted in state %s, resetting", self._state.value)
            self._state = CheckoutState.IDLE

    async def checkout(
        self,
        line_items: Sequence[LineItem],
        subtotal: Amount,
        selection: AddressSelection | AddressSelector,
    ) -> CheckoutOutcome:
        if self.busy:
            logger.info("checkout ignored: another checkout is %s", self._state.value)
            return CheckoutOutcome(False, "in_flight")

        self._transition(CheckoutState.VALIDATING)
        try:
            return await self._run(line_items, subtotal, selection)
        except Exception as exc:
            logger.exception("Unexpected checkout failure in state %s", self._state.value)
            capture_exception(exc, checkout_state=self._state.value)
            raise
        finally:
            self._finish()

    async def _fail(
        self,
        error_key: str,
        message: str,
        severity: Severity,
        *,
        duration_ms: int | None = None,
        validation: ValidationResult | None = None,
        error: ApiException | None = None,
    ) -> CheckoutOutcome:
        self._transition(CheckoutState.FAILED)
        await self.notifier.notify(message, severity, duration_ms)
        return CheckoutOutcome(
            False, error_key, message=message, validation=validation, error=error
        )

    async def _run(
        self,
        line_items: Sequence[LineItem],
        subtotal: Amount,
        selection: AddressSelection | AddressSelector,
    ) -> CheckoutOutcome:
        snapshot = selection.snapshot() if isinstance(selection, AddressSelector) else selection

        session = read_session(self.session_store)
        if session is None:
            return await self._fail(
                "not_logged_in", NOT_LOGGED_IN_MESSAGE, Severity.WARNING,
                duration_ms=WARNING_DURATION_MS,
            )

        result = validate(line_items, subtotal, session, snapshot)
        if not result.ok:
            logger.info("checkout validation failed: %s", result.value)
            return await self._fail(
                result.value, result.message, Severity.WARNING,
                duration_ms=WARNING_DURATION_MS, validation=result,
            )

        request = CheckoutRequest(
            selected_address_id=snapshot.selected_id,
            line_items=tuple(line_items),
            subtotal=subtotal,
        )

        self._transition(CheckoutState.SUBMITTING)
        try:
            await self.client.checkout(session.token, request.selected_address_id)
        except BackendError as exc:
            return await self._fail(
                "backend_error", exc.message, Severity.ERROR, validation=result, error=exc
            )
        except TransportError as exc:
            return await self._fail(
                "transport_error", CHECKOUT_TRANSPORT_MESSAGE, Severity.ERROR,
                validation=result, error=exc,
            )

        self._transition(CheckoutState.SUCCEEDED)
        # Client-side deduction from the validated subtotal; the backend does
        # not return the new balance.
        balance_after = read_balance(self.session_store) - request.subtotal
        write_balance(self.session_store, balance_after)

        await self.notifier.notify(ORDER_PLACED_MESSAGE, Severity.SUCCESS)
        self.navigator.push(THANKS_PATH, {"from": "Checkout"})

        confirmation = OrderConfirmation(
            address_id=request.selected_address_id,
            amount_charged=request.subtotal,
            balance_after=balance_after,
        )
        logger.info(
            "order placed: %d line items, charged %s, balance now %s",
            len(request.line_items), request.subtotal, balance_after,
        )
        return CheckoutOutcome(True, confirmation=confirmation, validation=result)
