"""Settlement engine specs."""

from __future__ import annotations

import pytest

from freescrow_spec.errors import ErrorCode, SpecError
from freescrow_spec.escrow.settlement import Payout, Settlement, pay_freelancer, refund_client, settle
from freescrow_spec.ledger import balance_of
from freescrow_spec.test_accounts import BOB, CLIENT
from freescrow_spec.types import EscrowStatus

from escrow_builders import BALANCE, BID, FUND, awarded, disputed


def test_pay_freelancer_amounts() -> None:
    state, escrow = awarded()
    s = pay_freelancer(state.escrows[escrow])
    assert s.status == EscrowStatus.VERIFIED_AND_PAYMENT_SETTLED
    assert s.payouts == (Payout(BOB, FUND + BID),)


def test_refund_client_amounts() -> None:
    state, escrow = awarded()
    s = refund_client(state.escrows[escrow])
    assert s.status == EscrowStatus.RECLAIM_N_CLOSED
    assert s.total == FUND + BID


def test_settle_zeroes_custody_before_paying() -> None:
    state, escrow = disputed()
    e = state.escrows[escrow]
    settle(state, e, Settlement(EscrowStatus.RESOLVED, (Payout(CLIENT, 50), Payout(BOB, 0))))

    assert e.status == EscrowStatus.RESOLVED
    assert e.fund == 0
    assert e.highest_bid == 0
    assert e.dispute.client_fee == 0
    assert e.dispute.freelancer_fee == 0
    assert e.dispute.arbitration_paid == 0
    assert e.custody == 0
    assert balance_of(state, CLIENT) == BALANCE - FUND - 10 + 50


def test_settle_requires_terminal_status() -> None:
    state, escrow = awarded()
    with pytest.raises(SpecError) as exc:
        settle(state, state.escrows[escrow], Settlement(EscrowStatus.WORK_REJECTED))
    assert exc.value.code == ErrorCode.INTERNAL_ERROR
    assert state.escrows[escrow].fund == FUND


def test_settle_refuses_more_than_custody() -> None:
    state, escrow = awarded()
    e = state.escrows[escrow]
    s = Settlement(EscrowStatus.RESOLVED, (Payout(CLIENT, FUND + BID + 1),))
    with pytest.raises(SpecError) as exc:
        settle(state, e, s)
    assert exc.value.code == ErrorCode.INTERNAL_ERROR
    assert e.status == EscrowStatus.AUCTION_COMPLETED


def test_settle_refuses_negative_payout() -> None:
    state, escrow = awarded()
    with pytest.raises(SpecError):
        settle(state, state.escrows[escrow], Settlement(EscrowStatus.RESOLVED, (Payout(CLIENT, -1),)))
