"""Escrow lifecycle specs.

Initialized -> PaymentInHold -> AuctionStarted -> {PaymentInHold | AuctionCompleted}
AuctionCompleted -> WorkDelivered -> {VerifiedAndPaymentSettled | WorkRejected}
WorkRejected -> {VerifiedAndPaymentSettled | FeeDeposited}   (fee path: see dispute.py)
PaymentInHold | AuctionCompleted -> ReclaimNClosed

Each verify checks status first, then caller, then timing, so a call made in
the wrong status always reports UNEXPECTED_STATUS.
"""

from __future__ import annotations

from .. import ledger
from ..access import Role, authorize, require_status
from ..config import MAX_VERIFY_PERIOD
from ..errors import ErrorCode, SpecError, insufficient_deposit, pass_deadline, too_early
from ..factory import get_escrow
from ..payload import get_int
from ..types import Call, CallType, ChainState, Escrow, EscrowStatus
from . import auction
from .settlement import pay_freelancer, refund_client, settle


def verify(state: ChainState, call: Call) -> None:
    tt = call.call_type
    if tt == CallType.DEPOSIT:
        _verify_deposit(state, call)
    elif tt == CallType.START_AUCTION:
        _verify_start_auction(state, call)
    elif tt == CallType.END_AUCTION:
        _verify_end_auction(state, call)
    elif tt == CallType.CONFIRM_DELIVERED:
        _verify_confirm_delivered(state, call)
    elif tt in (CallType.VERIFY_DELIVERED, CallType.REJECT_DELIVERED):
        _verify_review(state, call)
    elif tt == CallType.RELEASE_FUNDS:
        _verify_release_funds(state, call)
    elif tt == CallType.CLAIM_PAYMENT:
        _verify_claim_payment(state, call)
    elif tt == CallType.RECLAIM_FUNDS:
        _verify_reclaim_funds(state, call)
    elif tt == CallType.CLOSE_PROJECT:
        _verify_close_project(state, call)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow call: {tt}")


def apply(state: ChainState, call: Call) -> ChainState:
    tt = call.call_type
    if tt == CallType.DEPOSIT:
        return _apply_deposit(state, call)
    elif tt == CallType.START_AUCTION:
        return _apply_start_auction(state, call)
    elif tt == CallType.END_AUCTION:
        return _apply_end_auction(state, call)
    elif tt == CallType.CONFIRM_DELIVERED:
        return _apply_confirm_delivered(state, call)
    elif tt == CallType.VERIFY_DELIVERED:
        return _apply_verify_delivered(state, call)
    elif tt == CallType.REJECT_DELIVERED:
        return _apply_reject_delivered(state, call)
    elif tt == CallType.RELEASE_FUNDS:
        return _settle_with(state, call, pay_freelancer, "FundsReleased")
    elif tt == CallType.CLAIM_PAYMENT:
        return _settle_with(state, call, pay_freelancer, "PaymentClaimed")
    elif tt == CallType.RECLAIM_FUNDS:
        return _settle_with(state, call, refund_client, "FundsReclaimed")
    elif tt == CallType.CLOSE_PROJECT:
        return _settle_with(state, call, refund_client, "ProjectClosed")
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow call: {tt}")


def _settle_with(state: ChainState, call: Call, build, event: str) -> ChainState:
    escrow = state.escrows[call.target]
    settlement = build(escrow)
    ledger.emit(
        state,
        event,
        escrow.address,
        caller=call.sender,
        payouts=[(p.recipient, p.amount) for p in settlement.payouts],
    )
    settle(state, escrow, settlement)
    return state


# --- DEPOSIT ---


def _verify_deposit(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.INITIALIZED)
    authorize(escrow, call.sender, Role.CLIENT)

    if call.value == 0:
        raise insufficient_deposit(1, 0)

    duration = get_int(call.payload, "auction_duration")
    min_bid = get_int(call.payload, "min_bid")
    if duration != 0:
        auction.check_open(duration, min_bid, escrow.fund + call.value)


def _apply_deposit(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    escrow.fund += call.value
    escrow.status = EscrowStatus.PAYMENT_IN_HOLD
    ledger.emit(state, "Deposited", escrow.address, client=call.sender, amount=call.value)

    duration = call.payload.get("auction_duration", 0)
    if duration != 0:
        auction.open_auction(state, escrow, duration, call.payload.get("min_bid", 0))
    return state


# --- START_AUCTION / END_AUCTION ---


def _verify_start_auction(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.PAYMENT_IN_HOLD)
    authorize(escrow, call.sender, Role.CLIENT)

    duration = get_int(call.payload, "auction_duration")
    min_bid = get_int(call.payload, "min_bid")
    auction.check_open(duration, min_bid, escrow.fund)


def _apply_start_auction(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    auction.open_auction(state, escrow, call.payload["auction_duration"], call.payload.get("min_bid", 0))
    return state


def _verify_end_auction(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.AUCTION_STARTED)
    authorize(escrow, call.sender, Role.CLIENT_OR_COUNTERPART)

    requested_start = get_int(call.payload, "requested_start")
    auction.check_close(state, escrow, requested_start)


def _apply_end_auction(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    auction.close_auction(state, escrow, call.payload.get("requested_start", 0))
    return state


# --- CONFIRM_DELIVERED ---


def _verify_confirm_delivered(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.AUCTION_COMPLETED)
    authorize(escrow, call.sender, Role.FREELANCER)

    now = ledger.now(state)
    if now >= escrow.deadline:
        raise pass_deadline(escrow.deadline, now)


def _apply_confirm_delivered(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    escrow.delivered_at = ledger.now(state)
    escrow.status = EscrowStatus.WORK_DELIVERED
    ledger.emit(state, "WorkDelivered", escrow.address, freelancer=call.sender, delivered_at=escrow.delivered_at)
    return state


# --- VERIFY_DELIVERED / REJECT_DELIVERED ---


def verify_window_end(escrow: Escrow) -> int:
    return escrow.delivered_at + MAX_VERIFY_PERIOD


def _verify_review(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.WORK_DELIVERED)
    authorize(escrow, call.sender, Role.CLIENT)

    now = ledger.now(state)
    if now > verify_window_end(escrow):
        raise pass_deadline(verify_window_end(escrow), now)


def _apply_verify_delivered(state: ChainState, call: Call) -> ChainState:
    return _settle_with(state, call, pay_freelancer, "WorkVerified")


def _apply_reject_delivered(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    escrow.status = EscrowStatus.WORK_REJECTED
    ledger.emit(state, "WorkRejected", escrow.address, client=call.sender)
    return state


# --- RELEASE_FUNDS / CLAIM_PAYMENT / RECLAIM_FUNDS / CLOSE_PROJECT ---


def _verify_release_funds(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.WORK_REJECTED)
    authorize(escrow, call.sender, Role.CLIENT)


def _verify_claim_payment(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.WORK_DELIVERED)
    authorize(escrow, call.sender, Role.ANYONE)

    now = ledger.now(state)
    if now < verify_window_end(escrow):
        raise too_early(verify_window_end(escrow), now)


def _verify_reclaim_funds(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.AUCTION_COMPLETED)
    authorize(escrow, call.sender, Role.ANYONE)

    now = ledger.now(state)
    if now < escrow.deadline:
        raise too_early(escrow.deadline, now)


def _verify_close_project(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.PAYMENT_IN_HOLD)
    authorize(escrow, call.sender, Role.CLIENT)
