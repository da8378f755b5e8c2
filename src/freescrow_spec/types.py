"""Core types for Freescrow Python specs.

One `Escrow` record per project. State-specific data hangs off optional
sub-records (`Auction`, `Dispute`) that stay `None` until the lifecycle
reaches the state that creates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional


class EscrowStatus(IntEnum):
    INITIALIZED = 0
    PAYMENT_IN_HOLD = 1
    AUCTION_STARTED = 2
    AUCTION_COMPLETED = 3
    WORK_DELIVERED = 4
    VERIFIED_AND_PAYMENT_SETTLED = 5
    WORK_REJECTED = 6
    FEE_DEPOSITED = 7
    DISPUTE_CREATED = 8
    RESOLVED = 9
    RECLAIM_N_CLOSED = 10


TERMINAL_STATUSES = frozenset({
    EscrowStatus.VERIFIED_AND_PAYMENT_SETTLED,
    EscrowStatus.RESOLVED,
    EscrowStatus.RECLAIM_N_CLOSED,
})


class Ruling(IntEnum):
    REFUSED_TO_ARBITRATE = 0
    CLIENT_WINS = 1
    FREELANCER_WINS = 2


class ArbitratorDisputeStatus(IntEnum):
    WAITING = 0
    APPEALABLE = 1
    SOLVED = 2


class CallType(Enum):
    # Factory
    CREATE_ESCROW = "create_escrow"
    # Escrow lifecycle
    DEPOSIT = "deposit"
    START_AUCTION = "start_auction"
    END_AUCTION = "end_auction"
    CONFIRM_DELIVERED = "confirm_delivered"
    VERIFY_DELIVERED = "verify_delivered"
    REJECT_DELIVERED = "reject_delivered"
    RELEASE_FUNDS = "release_funds"
    CLAIM_PAYMENT = "claim_payment"
    RECLAIM_FUNDS = "reclaim_funds"
    CLOSE_PROJECT = "close_project"
    # Auction
    PLACE_BID = "place_bid"
    # Dispute
    DEPOSIT_ARBITRATION_FEE = "deposit_arbitration_fee"
    TIME_OUT = "time_out"
    SUBMIT_EVIDENCE = "submit_evidence"
    RULE = "rule"
    # Arbitrator
    GIVE_RULING = "give_ruling"
    SET_ARBITRATION_COST = "set_arbitration_cost"


@dataclass
class Call:
    sender: bytes
    target: bytes
    call_type: CallType
    payload: dict[str, Any] = field(default_factory=dict)
    value: int = 0


@dataclass
class AccountState:
    address: bytes
    balance: int = 0
    # Models a recipient whose fallback rejects incoming value.
    accepts_value: bool = True


@dataclass
class Event:
    name: str
    emitter: bytes
    data: dict[str, Any] = field(default_factory=dict)


# --- Auction ---


@dataclass
class Bid:
    participant: bytes
    amount: int
    refunded: bool = False


@dataclass
class Auction:
    min_bid: int
    started_at: int
    end_at: int
    bids: list[Bid] = field(default_factory=list)


# --- Dispute ---


@dataclass
class Dispute:
    dispute_id: Optional[int] = None
    client_fee: int = 0
    freelancer_fee: int = 0
    ruling: Optional[Ruling] = None
    first_deposit_fee_at: int = 0
    arbitration_paid: int = 0


# --- Escrow ---


@dataclass
class Escrow:
    address: bytes
    client: bytes
    title: str
    description: str
    duration_in_seconds: int
    arbitrator: bytes
    arbitrator_extra_data: bytes = b""
    fee_deposit_period: int = 0
    freelancer: Optional[bytes] = None
    fund: int = 0
    highest_bid: int = 0
    started_at: int = 0
    delivered_at: int = 0
    deadline: int = 0
    status: EscrowStatus = EscrowStatus.INITIALIZED
    auction: Optional[Auction] = None
    dispute: Optional[Dispute] = None

    @property
    def custody(self) -> int:
        """Value still owed to a final recipient.

        While the auction is open the last bid is held for its bidder and
        counts towards custody; `end_auction` moves it into `highest_bid`.
        """
        total = self.fund + self.highest_bid
        if self.status == EscrowStatus.AUCTION_STARTED and self.auction is not None and self.auction.bids:
            total += self.auction.bids[-1].amount
        if self.dispute is not None:
            total += self.dispute.client_fee + self.dispute.freelancer_fee
            total -= self.dispute.arbitration_paid
        return total


# --- Arbitration service ---


@dataclass
class ArbitratorDispute:
    arbitrated: bytes
    choices: int
    fees: int
    ruling: int = 0
    status: ArbitratorDisputeStatus = ArbitratorDisputeStatus.WAITING


@dataclass
class ArbitratorState:
    address: bytes
    owner: bytes
    cost: int
    disputes: list[ArbitratorDispute] = field(default_factory=list)


# --- ChainState ---


@dataclass
class ChainState:
    accounts: dict[bytes, AccountState] = field(default_factory=dict)
    timestamp: int = 0
    escrows: dict[bytes, Escrow] = field(default_factory=dict)
    arbitrators: dict[bytes, ArbitratorState] = field(default_factory=dict)
    # Factory registry: escrow addresses in creation order.
    registry: list[bytes] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
