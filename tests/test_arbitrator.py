"""Centralized arbitrator specs."""

from __future__ import annotations

import pytest

from freescrow_spec import arbitrator
from freescrow_spec.errors import ErrorCode, SpecError
from freescrow_spec.ledger import balance_of
from freescrow_spec.test_accounts import ALICE, ARBITRATOR, ARBITRATOR_OWNER, CLIENT
from freescrow_spec.types import ArbitratorDisputeStatus, CallType, EscrowStatus

from escrow_builders import COST, disputed, fresh_state, mk_call, run, run_expect_error

FIXTURE = "arbitrator/give_ruling.json"


def _give_ruling(sender: bytes = ARBITRATOR_OWNER, dispute_id: int = 0, ruling: int = 1):
    return mk_call(sender, ARBITRATOR, CallType.GIVE_RULING, dispute_id=dispute_id, ruling=ruling)


def test_arbitration_cost_is_flat() -> None:
    state = fresh_state(cost=25)
    assert arbitrator.arbitration_cost(state, ARBITRATOR) == 25
    assert arbitrator.arbitration_cost(state, ARBITRATOR, b"\x01\x02") == 25


def test_unknown_arbitrator() -> None:
    with pytest.raises(SpecError) as exc:
        arbitrator.arbitration_cost(fresh_state(), ALICE)
    assert exc.value.code == ErrorCode.ARBITRATOR_NOT_FOUND


def test_create_dispute_requires_cost() -> None:
    state = fresh_state()
    with pytest.raises(SpecError) as exc:
        arbitrator.create_dispute(state, ARBITRATOR, 2, b"", COST - 1, CLIENT)
    assert exc.value.code == ErrorCode.INSUFFICIENT_DEPOSIT
    assert state.arbitrators[ARBITRATOR].disputes == []


def test_create_dispute_records_and_collects() -> None:
    state = fresh_state()
    first = arbitrator.create_dispute(state, ARBITRATOR, 2, b"", COST, CLIENT)
    second = arbitrator.create_dispute(state, ARBITRATOR, 2, b"", COST, CLIENT)
    assert (first, second) == (0, 1)
    assert balance_of(state, ARBITRATOR) == 2 * COST
    d = state.arbitrators[ARBITRATOR].disputes[1]
    assert d.arbitrated == CLIENT
    assert d.status == ArbitratorDisputeStatus.WAITING


def test_give_ruling_pays_owner(state_test_group) -> None:
    state, escrow = disputed()
    post, result = state_test_group(FIXTURE, "give_ruling", state, _give_ruling())

    assert result.ok
    d = post.arbitrators[ARBITRATOR].disputes[0]
    assert d.status == ArbitratorDisputeStatus.SOLVED
    assert d.ruling == 1
    assert balance_of(post, ARBITRATOR) == 0
    assert balance_of(post, ARBITRATOR_OWNER) == COST
    assert post.escrows[escrow].status == EscrowStatus.RESOLVED
    assert [ev.name for ev in post.events[-2:]] == ["RulingGiven", "Ruling"]


def test_give_ruling_by_stranger(state_test_group) -> None:
    state, _ = disputed()
    _, result = state_test_group(FIXTURE, "give_ruling_stranger", state, _give_ruling(sender=CLIENT))
    assert result.error.code == ErrorCode.ACCESS_DENIED


def test_give_ruling_unknown_dispute() -> None:
    state, _ = disputed()
    run_expect_error(state, _give_ruling(dispute_id=1), ErrorCode.INVALID_INDEX)


def test_give_ruling_beyond_choices() -> None:
    state, _ = disputed()
    run_expect_error(state, _give_ruling(ruling=3), ErrorCode.OVER_MAXIMUM)


def test_give_ruling_twice() -> None:
    state, _ = disputed()
    state = run(state, _give_ruling())
    run_expect_error(state, _give_ruling(ruling=2), ErrorCode.UNEXPECTED_STATUS)


def test_give_ruling_on_non_arbitrator() -> None:
    state, _ = disputed()
    call = mk_call(ARBITRATOR_OWNER, ALICE, CallType.GIVE_RULING, dispute_id=0, ruling=1)
    run_expect_error(state, call, ErrorCode.ARBITRATOR_NOT_FOUND)


def _set_cost(cost: int, sender: bytes = ARBITRATOR_OWNER):
    return mk_call(sender, ARBITRATOR, CallType.SET_ARBITRATION_COST, cost=cost)


def test_owner_changes_cost(state_test_group) -> None:
    state = fresh_state()
    post, result = state_test_group(FIXTURE, "set_arbitration_cost", state, _set_cost(COST * 3))

    assert result.ok
    assert arbitrator.arbitration_cost(post, ARBITRATOR) == COST * 3
    assert arbitrator.arbitration_cost(state, ARBITRATOR) == COST
    ev = post.events[-1]
    assert ev.name == "ArbitrationCostChanged"
    assert ev.data == {"previous": COST, "cost": COST * 3}


def test_cost_change_by_stranger() -> None:
    run_expect_error(fresh_state(), _set_cost(COST * 3, sender=CLIENT), ErrorCode.ACCESS_DENIED)


def test_cost_change_to_zero() -> None:
    run_expect_error(fresh_state(), _set_cost(0), ErrorCode.BELOW_MINIMUM)


def test_cost_change_keeps_open_disputes() -> None:
    state, escrow = disputed()
    state = run(state, _set_cost(COST * 5))
    assert state.arbitrators[ARBITRATOR].disputes[0].fees == COST
    state = run(state, _give_ruling(ruling=2))
    assert balance_of(state, ARBITRATOR_OWNER) == COST
    assert state.escrows[escrow].status == EscrowStatus.RESOLVED
