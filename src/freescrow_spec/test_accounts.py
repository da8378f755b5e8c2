"""Deterministic test account addresses.

Each address is the BLAKE3 hash of the account name, so fixtures stay
stable across runs and machines.
"""

from __future__ import annotations

from blake3 import blake3

from .config import COIN_VALUE, DEFAULT_ARBITRATION_COST, FACTORY_ADDRESS
from .types import AccountState, ArbitratorState, ChainState


def derive_address(name: str) -> bytes:
    return blake3(b"freescrow-test-account:" + name.encode()).digest()


CLIENT = derive_address("client")
ALICE = derive_address("alice")
BOB = derive_address("bob")
CAROL = derive_address("carol")
DAVE = derive_address("dave")
EVE = derive_address("eve")
ARBITRATOR_OWNER = derive_address("arbitrator-owner")
ARBITRATOR = derive_address("arbitrator")

NAMES: dict[bytes, str] = {
    CLIENT: "client",
    ALICE: "alice",
    BOB: "bob",
    CAROL: "carol",
    DAVE: "dave",
    EVE: "eve",
    ARBITRATOR_OWNER: "arbitrator_owner",
    ARBITRATOR: "arbitrator",
    FACTORY_ADDRESS: "factory",
}


def genesis_state(balance: int = 1_000 * COIN_VALUE, cost: int = DEFAULT_ARBITRATION_COST) -> ChainState:
    """Funded test accounts plus the centralized arbitrator."""
    state = ChainState()
    for addr in (CLIENT, ALICE, BOB, CAROL, DAVE, EVE):
        state.accounts[addr] = AccountState(address=addr, balance=balance)
    state.accounts[ARBITRATOR_OWNER] = AccountState(address=ARBITRATOR_OWNER)
    state.accounts[ARBITRATOR] = AccountState(address=ARBITRATOR)
    state.arbitrators[ARBITRATOR] = ArbitratorState(address=ARBITRATOR, owner=ARBITRATOR_OWNER, cost=cost)
    return state
