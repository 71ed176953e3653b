"""Checkout state machine and pre-flight validation rules."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence

from storefront.domain.address_selection import AddressSelection
from storefront.domain.models import Amount, LineItem, Session


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Mapping[CheckoutState, frozenset[CheckoutState]] = {
    CheckoutState.IDLE: frozenset({CheckoutState.VALIDATING}),
    CheckoutState.VALIDATING: frozenset(
        {
            CheckoutState.SUBMITTING,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.SUBMITTING: frozenset(
        {
            CheckoutState.SUCCEEDED,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.SUCCEEDED: frozenset({CheckoutState.IDLE}),
    CheckoutState.FAILED: frozenset({CheckoutState.IDLE}),
}

BUSY_STATES = frozenset({CheckoutState.VALIDATING, CheckoutState.SUBMITTING})


class ValidationResult(str, Enum):
    """Outcome of the local checks run before any network call."""

    OK = "ok"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    NO_ADDRESSES = "no_addresses"
    NO_ADDRESS_SELECTED = "no_address_selected"

    @property
    def message(self) -> str:
        return VALIDATION_MESSAGES[self]

    @property
    def ok(self) -> bool:
        return self is ValidationResult.OK


VALIDATION_MESSAGES: Mapping[ValidationResult, str] = {
    ValidationResult.OK: "",
    ValidationResult.INSUFFICIENT_BALANCE: "You do not have enough balance in your wallet for this purchase",
    ValidationResult.NO_ADDRESSES: "Please add a new address before proceeding.",
    ValidationResult.NO_ADDRESS_SELECTED: "Please select one shipping address to proceed.",
}


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_transition(
    current: CheckoutState, target: CheckoutState
) -> TransitionValidationResult:
    allowed_targets = ALLOWED_TRANSITIONS.get(current, frozenset())
    if target not in allowed_targets:
        return TransitionValidationResult(
            False,
            f"Transition '{current.value} -> {target.value}' is not allowed.",
        )
    return TransitionValidationResult(True)


def validate(
    line_items: Sequence[LineItem],
    subtotal: Amount,
    session: Session,
    selection: AddressSelection,
) -> ValidationResult:
    """Pre-flight checks, first failure wins.

    Order: wallet balance, then "no addresses at all", then "none selected".
    """
    if subtotal > session.balance:
        return ValidationResult.INSUFFICIENT_BALANCE
    if not selection.addresses:
        return ValidationResult.NO_ADDRESSES
    if not selection.contains(selection.selected_id):
        return ValidationResult.NO_ADDRESS_SELECTED
    return ValidationResult.OK
