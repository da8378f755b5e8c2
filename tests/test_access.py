"""Caller and status guard specs."""

from __future__ import annotations

import pytest

from freescrow_spec.access import Role, allowed_callers, authorize, counterpart, require_status
from freescrow_spec.errors import ErrorCode, SpecError
from freescrow_spec.test_accounts import ALICE, ARBITRATOR, BOB, CLIENT, EVE
from freescrow_spec.types import CallType, EscrowStatus

from escrow_builders import awarded, in_auction, mk_call, run


def test_counterpart_follows_auction() -> None:
    state, escrow = in_auction()
    assert counterpart(state.escrows[escrow]) is None
    assert allowed_callers(state.escrows[escrow], Role.CLIENT_OR_COUNTERPART) == (CLIENT,)

    state = run(state, mk_call(ALICE, escrow, CallType.PLACE_BID, 20))
    assert counterpart(state.escrows[escrow]) == ALICE
    state = run(state, mk_call(BOB, escrow, CallType.PLACE_BID, 30))
    assert counterpart(state.escrows[escrow]) == BOB


def test_counterpart_is_freelancer_after_award() -> None:
    state, escrow = awarded()
    e = state.escrows[escrow]
    assert counterpart(e) == BOB
    assert allowed_callers(e, Role.CLIENT_OR_COUNTERPART) == (CLIENT, BOB)
    assert allowed_callers(e, Role.ARBITRATOR) == (ARBITRATOR,)


def test_authorize_reports_expected_and_found() -> None:
    state, escrow = awarded()
    e = state.escrows[escrow]
    authorize(e, EVE, Role.ANYONE)
    authorize(e, BOB, Role.FREELANCER)
    with pytest.raises(SpecError) as exc:
        authorize(e, EVE, Role.CLIENT_OR_COUNTERPART)
    assert exc.value.code == ErrorCode.ACCESS_DENIED
    assert exc.value.expected == (CLIENT, BOB)
    assert exc.value.found == EVE


def test_freelancer_role_without_bids() -> None:
    state, escrow = in_auction()
    with pytest.raises(SpecError) as exc:
        authorize(state.escrows[escrow], BOB, Role.FREELANCER)
    assert exc.value.code == ErrorCode.ACCESS_DENIED


def test_require_status() -> None:
    state, escrow = awarded()
    e = state.escrows[escrow]
    require_status(e, EscrowStatus.AUCTION_COMPLETED)
    require_status(e, EscrowStatus.WORK_DELIVERED, EscrowStatus.AUCTION_COMPLETED)
    with pytest.raises(SpecError) as exc:
        require_status(e, EscrowStatus.WORK_DELIVERED)
    assert exc.value.code == ErrorCode.UNEXPECTED_STATUS
    assert exc.value.expected == EscrowStatus.WORK_DELIVERED
    assert exc.value.found == EscrowStatus.AUCTION_COMPLETED
