"""Caller and status guards for escrow operations.

Every operation names one `Role`; `authorize` is the single place that turns
a role into the set of addresses allowed to call.

Counterpart policy: while the auction runs the counterpart is the current
highest bidder; from `AUCTION_COMPLETED` on it is the assigned freelancer.
Before any bid exists, "client or counterpart" means the client alone.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .errors import access_denied, unexpected_status
from .types import Escrow, EscrowStatus


class Role(Enum):
    ANYONE = "anyone"
    CLIENT = "client"
    FREELANCER = "freelancer"
    ARBITRATOR = "arbitrator"
    CLIENT_OR_COUNTERPART = "client_or_counterpart"


def counterpart(escrow: Escrow) -> Optional[bytes]:
    if escrow.status == EscrowStatus.AUCTION_STARTED:
        if escrow.auction is None or not escrow.auction.bids:
            return None
        return escrow.auction.bids[-1].participant
    return escrow.freelancer


def allowed_callers(escrow: Escrow, role: Role) -> tuple[bytes, ...]:
    if role == Role.CLIENT:
        return (escrow.client,)
    if role == Role.ARBITRATOR:
        return (escrow.arbitrator,)
    other = counterpart(escrow)
    if role == Role.FREELANCER:
        return (other,) if other is not None else ()
    if role == Role.CLIENT_OR_COUNTERPART:
        return (escrow.client, other) if other is not None else (escrow.client,)
    raise ValueError(f"role without caller set: {role}")


def authorize(escrow: Escrow, sender: bytes, role: Role) -> None:
    if role == Role.ANYONE:
        return
    expected = allowed_callers(escrow, role)
    if sender not in expected:
        raise access_denied(expected[0] if len(expected) == 1 else expected, sender)


def require_status(escrow: Escrow, *expected: EscrowStatus) -> None:
    if escrow.status not in expected:
        raise unexpected_status(expected[0] if len(expected) == 1 else expected, escrow.status)
