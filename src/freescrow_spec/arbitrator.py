"""Arbitration service interface and the centralized reference arbitrator.

Escrows only use `arbitration_cost` and `create_dispute`; the ruling comes
back later as a `RULE` call made by the arbitrator. The reference arbitrator
is a single owner who rules by hand (`GIVE_RULING`) and may change the
flat quote (`SET_ARBITRATION_COST`), the service used on development networks.
"""

from __future__ import annotations

from . import ledger
from .errors import (
    ErrorCode,
    SpecError,
    access_denied,
    below_minimum,
    insufficient_deposit,
    over_maximum,
    unexpected_status,
)
from .payload import get_int
from .types import (
    ArbitratorDispute,
    ArbitratorDisputeStatus,
    ArbitratorState,
    Call,
    CallType,
    ChainState,
)


def get_arbitrator(state: ChainState, address: bytes) -> ArbitratorState:
    arb = state.arbitrators.get(address)
    if arb is None:
        raise SpecError(ErrorCode.ARBITRATOR_NOT_FOUND, "no arbitration service at address", None, address)
    return arb


def arbitration_cost(state: ChainState, address: bytes, extra_data: bytes = b"") -> int:
    # The centralized arbitrator charges a flat fee regardless of extra_data.
    return get_arbitrator(state, address).cost


def create_dispute(
    state: ChainState,
    address: bytes,
    choices: int,
    extra_data: bytes,
    value: int,
    arbitrable: bytes,
) -> int:
    """Open a dispute paid with ``value`` taken from ``arbitrable``; return its id."""
    arb = get_arbitrator(state, address)
    cost = arbitration_cost(state, address, extra_data)
    if value < cost:
        raise insufficient_deposit(cost, value)

    arb.disputes.append(ArbitratorDispute(arbitrated=arbitrable, choices=choices, fees=value))
    dispute_id = len(arb.disputes) - 1
    if value:
        ledger.transfer(state, arbitrable, arb.address, value)
    ledger.emit(state, "DisputeCreation", arb.address, dispute_id=dispute_id, arbitrable=arbitrable)
    return dispute_id


# --- GIVE_RULING / SET_ARBITRATION_COST ---


def verify(state: ChainState, call: Call) -> None:
    if call.call_type == CallType.GIVE_RULING:
        return _verify_give_ruling(state, call)
    if call.call_type == CallType.SET_ARBITRATION_COST:
        return _verify_set_cost(state, call)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported arbitrator call: {call.call_type}")


def apply(state: ChainState, call: Call) -> ChainState:
    if call.call_type == CallType.GIVE_RULING:
        return _apply_give_ruling(state, call)
    if call.call_type == CallType.SET_ARBITRATION_COST:
        return _apply_set_cost(state, call)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported arbitrator call: {call.call_type}")


def _owned_arbitrator(state: ChainState, call: Call) -> ArbitratorState:
    arb = get_arbitrator(state, call.target)
    if call.sender != arb.owner:
        raise access_denied(arb.owner, call.sender)
    return arb


def _verify_give_ruling(state: ChainState, call: Call) -> None:
    arb = _owned_arbitrator(state, call)

    p = call.payload
    dispute_id = get_int(p, "dispute_id")
    if dispute_id >= len(arb.disputes):
        raise SpecError(ErrorCode.INVALID_INDEX, "unknown dispute id", len(arb.disputes) - 1, dispute_id)

    dispute = arb.disputes[dispute_id]
    ruling = get_int(p, "ruling")
    if ruling > dispute.choices:
        raise over_maximum(dispute.choices, ruling)
    if dispute.status != ArbitratorDisputeStatus.WAITING:
        raise unexpected_status(ArbitratorDisputeStatus.WAITING, dispute.status)


def _apply_give_ruling(state: ChainState, call: Call) -> ChainState:
    arb = state.arbitrators[call.target]
    dispute_id = call.payload["dispute_id"]
    ruling = call.payload["ruling"]

    dispute = arb.disputes[dispute_id]
    dispute.ruling = ruling
    dispute.status = ArbitratorDisputeStatus.SOLVED
    fees = dispute.fees
    ledger.emit(state, "RulingGiven", arb.address, dispute_id=dispute_id, ruling=ruling)

    if fees:
        ledger.transfer(state, arb.address, arb.owner, fees)
    return _deliver_ruling(state, arb.address, dispute.arbitrated, dispute_id, ruling)


def _verify_set_cost(state: ChainState, call: Call) -> None:
    _owned_arbitrator(state, call)
    cost = get_int(call.payload, "cost")
    if cost == 0:
        raise below_minimum(0, cost)


def _apply_set_cost(state: ChainState, call: Call) -> ChainState:
    # Fees already deposited on open escrows are not touched; they are
    # compared against the new quote on the next deposit or timeout.
    arb = state.arbitrators[call.target]
    previous = arb.cost
    arb.cost = call.payload["cost"]
    ledger.emit(state, "ArbitrationCostChanged", arb.address, previous=previous, cost=arb.cost)
    return state


def _deliver_ruling(
    state: ChainState, arbitrator: bytes, arbitrable: bytes, dispute_id: int, ruling: int
) -> ChainState:
    # escrow.dispute quotes costs through this module, so import at call time.
    from .escrow import dispute as escrow_dispute

    callback = Call(
        sender=arbitrator,
        target=arbitrable,
        call_type=CallType.RULE,
        payload={"dispute_id": dispute_id, "ruling": ruling},
    )
    escrow_dispute.verify(state, callback)
    return escrow_dispute.apply(state, callback)
