"""State transition entrypoints for Freescrow Python specs."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Optional

from . import arbitrator as arbitrator_calls
from . import factory
from . import ledger
from .errors import ErrorCode, SpecError
from .escrow import auction, dispute, lifecycle
from .types import CallType, Call, ChainState

logger = logging.getLogger(__name__)

_FACTORY_TYPES = frozenset({
    CallType.CREATE_ESCROW,
})

_LIFECYCLE_TYPES = frozenset({
    CallType.DEPOSIT,
    CallType.START_AUCTION,
    CallType.END_AUCTION,
    CallType.CONFIRM_DELIVERED,
    CallType.VERIFY_DELIVERED,
    CallType.REJECT_DELIVERED,
    CallType.RELEASE_FUNDS,
    CallType.CLAIM_PAYMENT,
    CallType.RECLAIM_FUNDS,
    CallType.CLOSE_PROJECT,
})

_AUCTION_TYPES = frozenset({
    CallType.PLACE_BID,
})

_DISPUTE_TYPES = frozenset({
    CallType.DEPOSIT_ARBITRATION_FEE,
    CallType.TIME_OUT,
    CallType.RULE,
    CallType.SUBMIT_EVIDENCE,
})

_ARBITRATOR_TYPES = frozenset({
    CallType.GIVE_RULING,
    CallType.SET_ARBITRATION_COST,
})

# Calls that accept attached value; every other call must carry zero.
PAYABLE_TYPES = frozenset({
    CallType.DEPOSIT,
    CallType.PLACE_BID,
    CallType.DEPOSIT_ARBITRATION_FEE,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(self, ok: bool, error: Optional[SpecError] = None):
        self.ok = ok
        self.error = error

    @classmethod
    def success(cls) -> "TransitionResult":
        return cls(True, None)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)

    def __repr__(self) -> str:
        if self.ok:
            return "TransitionResult(ok)"
        return f"TransitionResult(failed: {self.error})"


def _dispatch_verify(state: ChainState, call: Call) -> None:
    tt = call.call_type
    if tt in _FACTORY_TYPES:
        return factory.verify(state, call)
    if tt in _LIFECYCLE_TYPES:
        return lifecycle.verify(state, call)
    if tt in _AUCTION_TYPES:
        return auction.verify(state, call)
    if tt in _DISPUTE_TYPES:
        return dispute.verify(state, call)
    if tt in _ARBITRATOR_TYPES:
        return arbitrator_calls.verify(state, call)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"verify not implemented for {call.call_type}")


def _dispatch_apply(state: ChainState, call: Call) -> ChainState:
    tt = call.call_type
    if tt in _FACTORY_TYPES:
        return factory.apply(state, call)
    if tt in _LIFECYCLE_TYPES:
        return lifecycle.apply(state, call)
    if tt in _AUCTION_TYPES:
        return auction.apply(state, call)
    if tt in _DISPUTE_TYPES:
        return dispute.apply(state, call)
    if tt in _ARBITRATOR_TYPES:
        return arbitrator_calls.apply(state, call)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"apply not implemented for {call.call_type}")


def _verify_common(state: ChainState, call: Call) -> None:
    if not isinstance(call.call_type, CallType):
        raise SpecError(ErrorCode.INVALID_TYPE, "unknown call type", None, call.call_type)
    if not isinstance(call.payload, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "call payload must be dict")
    if isinstance(call.value, bool) or not isinstance(call.value, int):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "call value must be an integer", "int", type(call.value).__name__)
    if call.value < 0:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "negative call value", 0, call.value)
    if call.value and call.call_type not in PAYABLE_TYPES:
        raise SpecError(ErrorCode.NOT_PAYABLE, f"{call.call_type.value} does not accept value", 0, call.value)


def _check_value_availability(state: ChainState, call: Call) -> None:
    """Check the sender can cover the attached value.

    Called after call-specific validation so that status, caller and timing
    violations take precedence over a short balance.
    """
    if call.value == 0:
        return
    available = ledger.balance_of(state, call.sender)
    if available < call.value:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "insufficient balance", call.value, available)


def verify_call(state: ChainState, call: Call) -> TransitionResult:
    """Check a call against the current state without applying it."""
    try:
        _verify_common(state, call)
        _dispatch_verify(state, call)
        _check_value_availability(state, call)
        return TransitionResult.success()
    except SpecError as exc:
        return TransitionResult.failure(exc)


def apply_call(state: ChainState, call: Call) -> tuple[ChainState, TransitionResult]:
    """Apply a call after verification.

    All-or-nothing: on any failure the original state is returned unchanged,
    including failures raised by transfers after the status moved.
    """
    try:
        _verify_common(state, call)
        _dispatch_verify(state, call)
        _check_value_availability(state, call)
    except SpecError as exc:
        logger.debug("call %s rejected: %s", getattr(call.call_type, "value", call.call_type), exc)
        return state, TransitionResult.failure(exc)

    working = deepcopy(state)
    try:
        ledger.receive_value(working, call.sender, call.target, call.value)
        working = _dispatch_apply(working, call)
    except SpecError as exc:
        # Execution failure: state unchanged
        logger.debug("call %s reverted: %s", getattr(call.call_type, "value", call.call_type), exc)
        return state, TransitionResult.failure(exc)

    return working, TransitionResult.success()


def apply_calls(state: ChainState, calls: list[Call]) -> tuple[ChainState, TransitionResult]:
    """Apply calls in order with batch-atomic semantics.

    If any call fails, the whole batch is rejected and the state is unchanged.
    """
    working = state
    for call in calls:
        working, result = apply_call(working, call)
        if not result.ok:
            return state, result
    return working, TransitionResult.success()
