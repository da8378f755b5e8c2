"""Auction controller and bid ledger specs.

The bid ledger is append-only. Only the last bid is held in custody: placing
a higher bid marks the previous one refunded and sends its amount back in
the same call.
"""

from __future__ import annotations

from typing import Optional

from .. import ledger
from ..access import Role, authorize, require_status
from ..config import MAX_AUCTION_DURATION
from ..errors import ErrorCode, SpecError, below_minimum, over_maximum, pass_deadline, too_early
from ..factory import get_escrow
from ..types import Auction, Bid, Call, CallType, ChainState, Escrow, EscrowStatus


# --- Bid ledger ---


def _bids(escrow: Escrow) -> list[Bid]:
    return escrow.auction.bids if escrow.auction is not None else []


def last_bid(escrow: Escrow) -> Optional[Bid]:
    bids = _bids(escrow)
    return bids[-1] if bids else None


def get_bids_count(escrow: Escrow) -> int:
    return len(_bids(escrow))


def get_bid(escrow: Escrow, idx: int) -> Bid:
    bids = _bids(escrow)
    if idx < 0 or idx >= len(bids):
        raise SpecError(ErrorCode.INVALID_INDEX, "bid index out of range", len(bids) - 1, idx)
    return bids[idx]


def get_last_bid(escrow: Escrow) -> Bid:
    bid = last_bid(escrow)
    if bid is None:
        raise SpecError(ErrorCode.NOT_YET_DEPOSITED, "no bid placed yet")
    return bid


# --- Auction window ---


def check_open(duration: int, min_bid: int, fund: int) -> None:
    if duration == 0:
        raise SpecError(ErrorCode.INVALID_DURATION, "auction duration must be > 0", 1, duration)
    if duration > MAX_AUCTION_DURATION:
        raise over_maximum(MAX_AUCTION_DURATION, duration)
    if min_bid >= fund:
        raise SpecError(ErrorCode.OVER_MAXIMUM, "min bid must be below the fund", fund, min_bid)


def open_auction(state: ChainState, escrow: Escrow, duration: int, min_bid: int) -> None:
    now = ledger.now(state)
    escrow.auction = Auction(min_bid=min_bid, started_at=now, end_at=now + duration)
    escrow.status = EscrowStatus.AUCTION_STARTED
    ledger.emit(
        state, "AuctionStarted", escrow.address, min_bid=min_bid, started_at=now, end_at=now + duration
    )


def check_close(state: ChainState, escrow: Escrow, requested_start: int) -> None:
    now = ledger.now(state)
    if now < escrow.auction.end_at:
        raise too_early(escrow.auction.end_at, now)
    if last_bid(escrow) is not None and requested_start != 0 and requested_start < now:
        raise pass_deadline(now, requested_start)


def close_auction(state: ChainState, escrow: Escrow, requested_start: int) -> Optional[Bid]:
    """Freeze the auction and assign the winner, if any."""
    winner = last_bid(escrow)
    if winner is None:
        escrow.status = EscrowStatus.PAYMENT_IN_HOLD
        ledger.emit(state, "AuctionEnded", escrow.address, winner=None, amount=0)
        return None

    start = requested_start or ledger.now(state)
    escrow.freelancer = winner.participant
    escrow.highest_bid = winner.amount
    escrow.started_at = start
    escrow.deadline = start + escrow.duration_in_seconds
    escrow.status = EscrowStatus.AUCTION_COMPLETED
    ledger.emit(
        state,
        "AuctionEnded",
        escrow.address,
        winner=winner.participant,
        amount=winner.amount,
        deadline=escrow.deadline,
    )
    return winner


# --- PLACE_BID ---


def verify(state: ChainState, call: Call) -> None:
    if call.call_type != CallType.PLACE_BID:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported auction call: {call.call_type}")

    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.AUCTION_STARTED)
    authorize(escrow, call.sender, Role.ANYONE)

    now = ledger.now(state)
    if now > escrow.auction.end_at:
        raise pass_deadline(escrow.auction.end_at, now)

    previous = last_bid(escrow)
    floor = previous.amount if previous is not None else escrow.auction.min_bid
    if call.value <= floor:
        raise below_minimum(floor, call.value)


def apply(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    previous = last_bid(escrow)
    if previous is not None:
        previous.refunded = True
    escrow.auction.bids.append(Bid(participant=call.sender, amount=call.value))
    ledger.emit(state, "BidPlaced", escrow.address, bidder=call.sender, amount=call.value)

    if previous is not None:
        ledger.transfer(state, escrow.address, previous.participant, previous.amount)
    return state
