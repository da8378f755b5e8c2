"""Escrow factory and registry specs."""

from __future__ import annotations

from blake3 import blake3

from . import ledger
from .config import (
    FACTORY_ADDRESS,
    MAX_DESCRIPTION_LEN,
    MAX_EXTRA_DATA_LEN,
    MAX_TITLE_LEN,
)
from .errors import ErrorCode, SpecError
from .payload import get_address, get_bytes, get_int, get_str
from .types import Call, CallType, ChainState, Escrow


def escrow_address(factory: bytes, index: int) -> bytes:
    buf = bytearray()
    buf += factory
    buf += index.to_bytes(8, "big")
    return blake3(buf).digest()


def get_escrow(state: ChainState, address: bytes) -> Escrow:
    escrow = state.escrows.get(address)
    if escrow is None:
        raise SpecError(ErrorCode.ESCROW_NOT_FOUND, "no escrow at address", None, address)
    return escrow


def get_escrows(state: ChainState) -> list[bytes]:
    return list(state.registry)


# --- CREATE_ESCROW ---


def verify(state: ChainState, call: Call) -> None:
    if call.call_type != CallType.CREATE_ESCROW:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported factory call: {call.call_type}")
    if call.target != FACTORY_ADDRESS:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "not the escrow factory", FACTORY_ADDRESS, call.target)

    p = call.payload
    get_str(p, "title", MAX_TITLE_LEN)
    get_str(p, "description", MAX_DESCRIPTION_LEN)
    get_bytes(p, "extra_data", MAX_EXTRA_DATA_LEN)

    duration = get_int(p, "duration_in_seconds")
    if duration == 0:
        raise SpecError(ErrorCode.INVALID_DURATION, "project duration must be > 0", 1, duration)

    period = get_int(p, "fee_deposit_period")
    if period == 0:
        raise SpecError(ErrorCode.INVALID_DURATION, "fee deposit period must be > 0", 1, period)

    arbitrator = get_address(p, "arbitrator")
    if arbitrator not in state.arbitrators:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "arbitrator is not an arbitration service", None, arbitrator)


def apply(state: ChainState, call: Call) -> ChainState:
    p = call.payload
    address = escrow_address(call.target, len(state.registry))

    state.escrows[address] = Escrow(
        address=address,
        client=call.sender,
        title=p.get("title", ""),
        description=p.get("description", ""),
        duration_in_seconds=p["duration_in_seconds"],
        arbitrator=get_address(p, "arbitrator"),
        arbitrator_extra_data=get_bytes(p, "extra_data", MAX_EXTRA_DATA_LEN),
        fee_deposit_period=p["fee_deposit_period"],
    )
    state.registry.append(address)
    ledger.emit(state, "EscrowCreated", call.target, escrow=address, owner=call.sender)
    return state
