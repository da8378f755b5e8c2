"""Read-only accessors over a ChainState.

None of these mutate state; errors are raised directly rather than wrapped
in a TransitionResult.
"""

from __future__ import annotations

from . import arbitrator, ledger
from .escrow import auction, dispute
from .escrow.lifecycle import verify_window_end
from .errors import ErrorCode, SpecError
from .factory import get_escrow, get_escrows
from .types import Bid, ChainState, Escrow, EscrowStatus

__all__ = [
    "arbitration_cost",
    "custody_of",
    "fee_deposit_deadline",
    "get_bid",
    "get_bids_count",
    "get_escrow",
    "get_escrows",
    "get_last_bid",
    "remaining_time",
    "verify_deadline",
]


def get_last_bid(state: ChainState, address: bytes) -> Bid:
    return auction.get_last_bid(get_escrow(state, address))


def get_bids_count(state: ChainState, address: bytes) -> int:
    return auction.get_bids_count(get_escrow(state, address))


def get_bid(state: ChainState, address: bytes, idx: int) -> Bid:
    return auction.get_bid(get_escrow(state, address), idx)


def custody_of(state: ChainState, address: bytes) -> int:
    return get_escrow(state, address).custody


def arbitration_cost(state: ChainState, address: bytes) -> int:
    escrow = get_escrow(state, address)
    return arbitrator.arbitration_cost(state, escrow.arbitrator, escrow.arbitrator_extra_data)


def fee_deposit_deadline(state: ChainState, address: bytes) -> int:
    return dispute.fee_deadline(get_escrow(state, address))


def verify_deadline(state: ChainState, address: bytes) -> int:
    escrow = get_escrow(state, address)
    if escrow.status != EscrowStatus.WORK_DELIVERED:
        raise SpecError(ErrorCode.UNEXPECTED_STATUS, "work not delivered", EscrowStatus.WORK_DELIVERED, escrow.status)
    return verify_window_end(escrow)


def remaining_time(state: ChainState, address: bytes) -> int:
    """Seconds left before the delivery deadline (0 once passed)."""
    escrow: Escrow = get_escrow(state, address)
    if escrow.status != EscrowStatus.AUCTION_COMPLETED:
        raise SpecError(
            ErrorCode.UNEXPECTED_STATUS,
            "no delivery deadline in this status",
            EscrowStatus.AUCTION_COMPLETED,
            escrow.status,
        )
    return max(0, escrow.deadline - ledger.now(state))
