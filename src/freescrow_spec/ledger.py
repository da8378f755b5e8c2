"""Ledger and clock primitives.

The only places value moves between accounts. Callers mutate a working copy
of the state, so a failure raised here rolls the whole call back.
"""

from __future__ import annotations

from .errors import ErrorCode, SpecError
from .types import AccountState, ChainState, Event


def now(state: ChainState) -> int:
    return state.timestamp


def set_time(state: ChainState, timestamp: int) -> None:
    """Move the ambient clock forward (or keep it); it never goes back."""
    if timestamp < state.timestamp:
        raise SpecError(
            ErrorCode.INVALID_DURATION, "clock cannot move backwards", state.timestamp, timestamp
        )
    state.timestamp = timestamp


def advance_time(state: ChainState, seconds: int) -> None:
    if seconds < 0:
        raise SpecError(ErrorCode.INVALID_DURATION, "negative time advance", 0, seconds)
    state.timestamp += seconds


def _account(state: ChainState, address: bytes) -> AccountState:
    acct = state.accounts.get(address)
    if acct is None:
        acct = AccountState(address=address)
        state.accounts[address] = acct
    return acct


def balance_of(state: ChainState, address: bytes) -> int:
    acct = state.accounts.get(address)
    return acct.balance if acct is not None else 0


def receive_value(state: ChainState, sender: bytes, to: bytes, value: int) -> None:
    """Move value attached to a call from its sender into the callee."""
    if value == 0:
        return
    if value < 0:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "negative call value", 0, value)
    src = state.accounts.get(sender)
    available = src.balance if src is not None else 0
    if src is None or available < value:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "insufficient balance", value, available)
    src.balance -= value
    _account(state, to).balance += value


def transfer(state: ChainState, source: bytes, to: bytes, amount: int) -> None:
    """Send ``amount`` held by ``source`` to ``to``.

    Fails loudly when the recipient refuses value; nothing is silently lost.
    """
    if amount <= 0:
        raise SpecError(ErrorCode.INTERNAL_ERROR, "transfer amount must be > 0", 1, amount)
    src = _account(state, source)
    if src.balance < amount:
        raise SpecError(ErrorCode.INTERNAL_ERROR, "custody account underfunded", amount, src.balance)
    dst = _account(state, to)
    if not dst.accepts_value:
        raise SpecError(ErrorCode.TRANSFER_FAILED, "recipient rejected transfer", None, to)
    src.balance -= amount
    dst.balance += amount


def emit(state: ChainState, name: str, emitter: bytes, **data: object) -> None:
    state.events.append(Event(name=name, emitter=emitter, data=dict(data)))
