"""Settlement engine: terminal payouts for every exit path.

Two steps. The controllers build a `Settlement` (pure, nothing mutated);
`settle` then zeroes custody, sets the terminal status and only afterwards
moves value. Anything re-entering mid-transfer sees a terminal escrow and
fails its status guard.
"""

from __future__ import annotations

from dataclasses import dataclass

from .. import ledger
from ..errors import ErrorCode, SpecError
from ..types import TERMINAL_STATUSES, ChainState, Escrow, EscrowStatus


@dataclass(frozen=True)
class Payout:
    recipient: bytes
    amount: int


@dataclass(frozen=True)
class Settlement:
    status: EscrowStatus
    payouts: tuple[Payout, ...] = ()

    @property
    def total(self) -> int:
        return sum(p.amount for p in self.payouts)


def pay_freelancer(escrow: Escrow) -> Settlement:
    return Settlement(
        EscrowStatus.VERIFIED_AND_PAYMENT_SETTLED,
        (Payout(escrow.freelancer, escrow.fund + escrow.highest_bid),),
    )


def refund_client(escrow: Escrow) -> Settlement:
    return Settlement(
        EscrowStatus.RECLAIM_N_CLOSED,
        (Payout(escrow.client, escrow.fund + escrow.highest_bid),),
    )


def settle(state: ChainState, escrow: Escrow, settlement: Settlement) -> None:
    if settlement.status not in TERMINAL_STATUSES:
        raise SpecError(ErrorCode.INTERNAL_ERROR, "settlement must end in a terminal status", None, settlement.status)
    for p in settlement.payouts:
        if p.amount < 0 or p.recipient is None:
            raise SpecError(ErrorCode.INTERNAL_ERROR, "malformed payout", None, p)
    if settlement.total > escrow.custody:
        raise SpecError(ErrorCode.INTERNAL_ERROR, "payouts exceed custody", escrow.custody, settlement.total)

    escrow.fund = 0
    escrow.highest_bid = 0
    if escrow.dispute is not None:
        escrow.dispute.client_fee = 0
        escrow.dispute.freelancer_fee = 0
        escrow.dispute.arbitration_paid = 0
    escrow.status = settlement.status

    for p in settlement.payouts:
        if p.amount:
            ledger.transfer(state, escrow.address, p.recipient, p.amount)
