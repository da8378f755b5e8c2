"""Builders that walk an escrow to a given status."""

from __future__ import annotations

from freescrow_spec.config import FACTORY_ADDRESS
from freescrow_spec.errors import ErrorCode
from freescrow_spec.ledger import advance_time
from freescrow_spec.state_transition import TransitionResult, apply_call
from freescrow_spec.test_accounts import ARBITRATOR, BOB, CLIENT, genesis_state
from freescrow_spec.types import Call, CallType, ChainState

BALANCE = 1_000
COST = 10
FUND = 100
BID = 30
DURATION = 10 * 86_400
FEE_PERIOD = 86_400
AUCTION = 7 * 86_400
MIN_BID = 10


def fresh_state(cost: int = COST) -> ChainState:
    return genesis_state(balance=BALANCE, cost=cost)


def mk_call(sender: bytes, target: bytes, call_type: CallType, value: int = 0, **payload) -> Call:
    return Call(sender=sender, target=target, call_type=call_type, payload=payload, value=value)


def run(state: ChainState, call: Call) -> ChainState:
    state, result = apply_call(state, call)
    assert result.ok, result
    return state


def create_payload(
    duration: int = DURATION,
    fee_deposit_period: int = FEE_PERIOD,
    arbitrator: bytes = ARBITRATOR,
    **extra,
) -> dict:
    payload = {
        "title": "Landing page",
        "description": "Responsive landing page",
        "duration_in_seconds": duration,
        "fee_deposit_period": fee_deposit_period,
        "arbitrator": arbitrator,
        "extra_data": b"",
    }
    payload.update(extra)
    return payload


def created(state: ChainState | None = None, duration: int = DURATION) -> tuple[ChainState, bytes]:
    state = state if state is not None else fresh_state()
    call = Call(
        sender=CLIENT,
        target=FACTORY_ADDRESS,
        call_type=CallType.CREATE_ESCROW,
        payload=create_payload(duration=duration),
    )
    state = run(state, call)
    return state, state.registry[-1]


def in_hold(fund: int = FUND) -> tuple[ChainState, bytes]:
    state, escrow = created()
    state = run(state, mk_call(CLIENT, escrow, CallType.DEPOSIT, fund, auction_duration=0, min_bid=0))
    return state, escrow


def in_auction(fund: int = FUND, min_bid: int = MIN_BID) -> tuple[ChainState, bytes]:
    state, escrow = created()
    state = run(
        state,
        mk_call(CLIENT, escrow, CallType.DEPOSIT, fund, auction_duration=AUCTION, min_bid=min_bid),
    )
    return state, escrow


def awarded(fund: int = FUND, bid: int = BID, bidder: bytes = BOB) -> tuple[ChainState, bytes]:
    state, escrow = in_auction(fund)
    state = run(state, mk_call(bidder, escrow, CallType.PLACE_BID, bid))
    advance_time(state, AUCTION)
    state = run(state, mk_call(CLIENT, escrow, CallType.END_AUCTION))
    return state, escrow


def delivered(fund: int = FUND, bid: int = BID) -> tuple[ChainState, bytes]:
    state, escrow = awarded(fund, bid)
    state = run(state, mk_call(BOB, escrow, CallType.CONFIRM_DELIVERED))
    return state, escrow


def rejected(fund: int = FUND, bid: int = BID) -> tuple[ChainState, bytes]:
    state, escrow = delivered(fund, bid)
    state = run(state, mk_call(CLIENT, escrow, CallType.REJECT_DELIVERED))
    return state, escrow


def disputed(fund: int = FUND, bid: int = BID) -> tuple[ChainState, bytes]:
    state, escrow = rejected(fund, bid)
    state = run(state, mk_call(CLIENT, escrow, CallType.DEPOSIT_ARBITRATION_FEE, COST))
    state = run(state, mk_call(BOB, escrow, CallType.DEPOSIT_ARBITRATION_FEE, COST))
    return state, escrow


def total_balance(state: ChainState) -> int:
    return sum(acct.balance for acct in state.accounts.values())


def run_expect_error(state: ChainState, call: Call, code: ErrorCode) -> TransitionResult:
    post, result = apply_call(state, call)
    assert not result.ok
    assert result.error.code == code, result
    assert post is state
    return result
