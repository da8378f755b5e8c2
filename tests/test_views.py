"""Read-only accessor specs."""

from __future__ import annotations

import pytest

from freescrow_spec import views
from freescrow_spec.config import MAX_VERIFY_PERIOD
from freescrow_spec.errors import ErrorCode, SpecError
from freescrow_spec.ledger import advance_time, balance_of
from freescrow_spec.test_accounts import ALICE, BOB
from freescrow_spec.types import CallType

from escrow_builders import BID, COST, DURATION, FUND, awarded, delivered, disputed, in_auction, mk_call, run


def test_bid_views() -> None:
    state, escrow = in_auction()
    assert views.get_bids_count(state, escrow) == 0
    state = run(state, mk_call(ALICE, escrow, CallType.PLACE_BID, 20))
    state = run(state, mk_call(BOB, escrow, CallType.PLACE_BID, 25))
    assert views.get_bids_count(state, escrow) == 2
    assert views.get_bid(state, escrow, 0).participant == ALICE
    assert views.get_last_bid(state, escrow).amount == 25


def test_custody_views() -> None:
    state, escrow = awarded()
    assert views.custody_of(state, escrow) == FUND + BID
    state, escrow = disputed()
    assert views.custody_of(state, escrow) == FUND + BID + COST
    assert views.arbitration_cost(state, escrow) == COST


def test_custody_counts_open_auction_bid() -> None:
    state, escrow = in_auction()
    assert views.custody_of(state, escrow) == FUND
    state = run(state, mk_call(ALICE, escrow, CallType.PLACE_BID, 20))
    state = run(state, mk_call(BOB, escrow, CallType.PLACE_BID, 25))
    assert views.custody_of(state, escrow) == FUND + 25
    assert views.custody_of(state, escrow) == balance_of(state, escrow)


def test_remaining_time() -> None:
    state, escrow = awarded()
    assert views.remaining_time(state, escrow) == DURATION
    advance_time(state, DURATION + 5)
    assert views.remaining_time(state, escrow) == 0


def test_verify_deadline() -> None:
    state, escrow = delivered()
    assert views.verify_deadline(state, escrow) == state.timestamp + MAX_VERIFY_PERIOD
    state, escrow = awarded()
    with pytest.raises(SpecError) as exc:
        views.verify_deadline(state, escrow)
    assert exc.value.code == ErrorCode.UNEXPECTED_STATUS


def test_views_do_not_mutate() -> None:
    state, escrow = awarded()
    events = len(state.events)
    views.custody_of(state, escrow)
    views.remaining_time(state, escrow)
    views.get_escrows(state)
    assert len(state.events) == events
