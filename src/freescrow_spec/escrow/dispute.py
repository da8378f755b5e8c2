"""Dispute and arbitration specs.

Fee escrow toward the arbitration cost, default judgment on timeout, and
ruling-based settlement.

Once a dispute is raised the escrow holds one arbitration cost less than the
two recorded fees: the other cost was forwarded to the arbitrator. Whoever
wins is reimbursed their own fee (the loser's paid the arbitrator); on a
refusal to arbitrate the forwarded cost is shared before halving.
"""

from __future__ import annotations

from .. import arbitrator as arbitration
from .. import ledger
from ..access import Role, authorize, require_status
from ..config import MAX_EVIDENCE_LEN, NUMBER_OF_CHOICES
from ..errors import ErrorCode, SpecError, insufficient_deposit, over_maximum, pass_deadline, too_early
from ..factory import get_escrow
from ..payload import get_int, get_str
from ..types import Call, CallType, ChainState, Dispute, Escrow, EscrowStatus, Ruling
from .settlement import Payout, Settlement, settle


def verify(state: ChainState, call: Call) -> None:
    tt = call.call_type
    if tt == CallType.DEPOSIT_ARBITRATION_FEE:
        _verify_deposit_fee(state, call)
    elif tt == CallType.TIME_OUT:
        _verify_time_out(state, call)
    elif tt == CallType.RULE:
        _verify_rule(state, call)
    elif tt == CallType.SUBMIT_EVIDENCE:
        _verify_submit_evidence(state, call)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported dispute call: {tt}")


def apply(state: ChainState, call: Call) -> ChainState:
    tt = call.call_type
    if tt == CallType.DEPOSIT_ARBITRATION_FEE:
        return _apply_deposit_fee(state, call)
    elif tt == CallType.TIME_OUT:
        return _apply_time_out(state, call)
    elif tt == CallType.RULE:
        return _apply_rule(state, call)
    elif tt == CallType.SUBMIT_EVIDENCE:
        return _apply_submit_evidence(state, call)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported dispute call: {tt}")


def fee_of(escrow: Escrow, party: bytes) -> int:
    if escrow.dispute is None:
        return 0
    if party == escrow.client:
        return escrow.dispute.client_fee
    return escrow.dispute.freelancer_fee


def fee_deadline(escrow: Escrow) -> int:
    """Last timestamp at which a fee deposit is still accepted."""
    if escrow.dispute is None or escrow.status == EscrowStatus.WORK_REJECTED:
        raise SpecError(ErrorCode.NOT_YET_DEPOSITED, "no arbitration fee deposited yet")
    return escrow.dispute.first_deposit_fee_at + escrow.fee_deposit_period


# --- Settlement amounts ---


def timeout_settlement(escrow: Escrow, cost: int) -> Settlement:
    """Default judgment for the party that met the arbitration cost."""
    d = escrow.dispute
    client_met = d.client_fee >= cost
    freelancer_met = d.freelancer_fee >= cost
    if client_met == freelancer_met:
        # The quote moved after the deposits; the larger deposit takes the default.
        client_met = d.client_fee >= d.freelancer_fee
        freelancer_met = not client_met

    pool = escrow.fund + escrow.highest_bid
    payouts = []
    for party, fee, met in (
        (escrow.client, d.client_fee, client_met),
        (escrow.freelancer, d.freelancer_fee, freelancer_met),
    ):
        if met:
            payouts.append(Payout(party, pool + fee))
        elif fee:
            payouts.append(Payout(party, fee))
    return Settlement(EscrowStatus.RESOLVED, tuple(payouts))


def ruling_settlement(escrow: Escrow, ruling: Ruling) -> Settlement:
    d = escrow.dispute
    base = escrow.fund + escrow.highest_bid
    if ruling == Ruling.CLIENT_WINS:
        payouts = (Payout(escrow.client, base + d.client_fee),)
    elif ruling == Ruling.FREELANCER_WINS:
        payouts = (Payout(escrow.freelancer, base + d.freelancer_fee),)
    else:
        # Floor division: an odd unit stays in the escrow account unallocated.
        share = (base + d.client_fee + d.freelancer_fee - d.arbitration_paid) // 2
        payouts = (Payout(escrow.client, share), Payout(escrow.freelancer, share))
    return Settlement(EscrowStatus.RESOLVED, payouts)


# --- DEPOSIT_ARBITRATION_FEE ---


def _verify_deposit_fee(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.WORK_REJECTED, EscrowStatus.FEE_DEPOSITED)
    authorize(escrow, call.sender, Role.CLIENT_OR_COUNTERPART)

    cost = arbitration.arbitration_cost(state, escrow.arbitrator, escrow.arbitrator_extra_data)
    now = ledger.now(state)
    if escrow.status == EscrowStatus.FEE_DEPOSITED:
        deadline = fee_deadline(escrow)
        if now > deadline:
            raise pass_deadline(deadline, now)

    total = fee_of(escrow, call.sender) + call.value
    if total < cost:
        raise insufficient_deposit(cost, total)


def _apply_deposit_fee(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    cost = arbitration.arbitration_cost(state, escrow.arbitrator, escrow.arbitrator_extra_data)

    if escrow.dispute is None:
        escrow.dispute = Dispute()
    d = escrow.dispute
    if escrow.status == EscrowStatus.WORK_REJECTED:
        d.first_deposit_fee_at = ledger.now(state)

    if call.sender == escrow.client:
        d.client_fee += call.value
    else:
        d.freelancer_fee += call.value
    ledger.emit(
        state,
        "FeeDeposited",
        escrow.address,
        party=call.sender,
        amount=call.value,
        total=fee_of(escrow, call.sender),
    )

    if d.client_fee < cost or d.freelancer_fee < cost:
        escrow.status = EscrowStatus.FEE_DEPOSITED
        return state

    # Both sides covered the cost: raise the dispute.
    refunds = (
        (escrow.client, d.client_fee - cost),
        (escrow.freelancer, d.freelancer_fee - cost),
    )
    d.client_fee = cost
    d.freelancer_fee = cost
    d.arbitration_paid = cost
    escrow.status = EscrowStatus.DISPUTE_CREATED

    d.dispute_id = arbitration.create_dispute(
        state,
        escrow.arbitrator,
        NUMBER_OF_CHOICES,
        escrow.arbitrator_extra_data,
        cost,
        escrow.address,
    )
    ledger.emit(state, "Dispute", escrow.address, arbitrator=escrow.arbitrator, dispute_id=d.dispute_id)

    for party, amount in refunds:
        if amount:
            ledger.transfer(state, escrow.address, party, amount)
    return state


# --- TIME_OUT ---


def _verify_time_out(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.FEE_DEPOSITED)
    authorize(escrow, call.sender, Role.ANYONE)

    deadline = fee_deadline(escrow)
    now = ledger.now(state)
    if now <= deadline:
        raise too_early(deadline + 1, now)


def _apply_time_out(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    cost = arbitration.arbitration_cost(state, escrow.arbitrator, escrow.arbitrator_extra_data)
    settlement = timeout_settlement(escrow, cost)
    ledger.emit(
        state,
        "TimedOut",
        escrow.address,
        payouts=[(p.recipient, p.amount) for p in settlement.payouts],
    )
    settle(state, escrow, settlement)
    return state


# --- RULE ---


def _verify_rule(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(escrow, EscrowStatus.DISPUTE_CREATED)
    authorize(escrow, call.sender, Role.ARBITRATOR)

    dispute_id = get_int(call.payload, "dispute_id")
    if dispute_id != escrow.dispute.dispute_id:
        raise SpecError(ErrorCode.INVALID_INDEX, "dispute id mismatch", escrow.dispute.dispute_id, dispute_id)

    ruling = get_int(call.payload, "ruling")
    if ruling > NUMBER_OF_CHOICES:
        raise over_maximum(NUMBER_OF_CHOICES, ruling)


def _apply_rule(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    ruling = Ruling(call.payload["ruling"])
    escrow.dispute.ruling = ruling
    settlement = ruling_settlement(escrow, ruling)
    ledger.emit(
        state,
        "Ruling",
        escrow.address,
        arbitrator=call.sender,
        dispute_id=escrow.dispute.dispute_id,
        ruling=int(ruling),
    )
    settle(state, escrow, settlement)
    return state


# --- SUBMIT_EVIDENCE ---


def _verify_submit_evidence(state: ChainState, call: Call) -> None:
    escrow = get_escrow(state, call.target)
    require_status(
        escrow,
        EscrowStatus.WORK_REJECTED,
        EscrowStatus.FEE_DEPOSITED,
        EscrowStatus.DISPUTE_CREATED,
    )
    authorize(escrow, call.sender, Role.CLIENT_OR_COUNTERPART)

    evidence = get_str(call.payload, "evidence", MAX_EVIDENCE_LEN)
    if not evidence:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "evidence must not be empty")


def _apply_submit_evidence(state: ChainState, call: Call) -> ChainState:
    escrow = state.escrows[call.target]
    dispute_id = escrow.dispute.dispute_id if escrow.dispute is not None else None
    ledger.emit(
        state,
        "Evidence",
        escrow.address,
        arbitrator=escrow.arbitrator,
        dispute_id=dispute_id,
        party=call.sender,
        evidence=call.payload["evidence"],
    )
    return state
