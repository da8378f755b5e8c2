"""Canonical state digest implementation (v1)."""
from __future__ import annotations

from typing import Any

from blake3 import blake3

from .config import ADDRESS_SIZE, ZERO_ADDRESS


def _hex_to_bytes(value: str | None) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise TypeError("hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    if v == "":
        return b""
    return bytes.fromhex(v)


def _u64_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u64 must be non-negative")
    return int(value).to_bytes(8, "big", signed=False)


def _u128_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u128 must be non-negative")
    return int(value).to_bytes(16, "big", signed=False)


def _address(value: str | None) -> bytes:
    addr = _hex_to_bytes(value)
    if not addr:
        return ZERO_ADDRESS
    if len(addr) != ADDRESS_SIZE:
        raise ValueError(f"address must be {ADDRESS_SIZE} bytes, got {len(addr)}")
    return addr


def _encode_escrow(esc: dict[str, Any]) -> bytes:
    buf = bytearray()
    buf += _address(esc.get("client"))
    buf += _address(esc.get("freelancer"))
    buf += _address(esc.get("arbitrator"))
    for field in ("fund", "highest_bid"):
        buf += _u128_be(int(esc.get(field, 0)))
    for field in ("duration_in_seconds", "started_at", "delivered_at", "deadline", "status"):
        buf += _u64_be(int(esc.get(field, 0)))

    auction = esc.get("auction")
    if auction is None:
        buf += b"\x00"
    else:
        buf += b"\x01"
        buf += _u128_be(int(auction.get("min_bid", 0)))
        buf += _u64_be(int(auction.get("started_at", 0)))
        buf += _u64_be(int(auction.get("end_at", 0)))
        bids = auction.get("bids", [])
        buf += _u64_be(len(bids))
        for bid in bids:
            buf += _address(bid.get("participant"))
            buf += _u128_be(int(bid.get("amount", 0)))
            buf += b"\x01" if bid.get("refunded") else b"\x00"

    dispute = esc.get("dispute")
    if dispute is None:
        buf += b"\x00"
    else:
        buf += b"\x01"
        dispute_id = dispute.get("dispute_id")
        buf += _u64_be(dispute_id + 1 if dispute_id is not None else 0)
        for field in ("client_fee", "freelancer_fee", "arbitration_paid"):
            buf += _u128_be(int(dispute.get(field, 0)))
        ruling = dispute.get("ruling")
        buf += _u64_be(ruling + 1 if ruling is not None else 0)
        buf += _u64_be(int(dispute.get("first_deposit_fee_at", 0)))
    return bytes(buf)


def compute_state_digest(post_state: dict[str, Any]) -> str:
    """Compute state digest v1 from post_state.

    Fields are encoded in canonical order and hashed with BLAKE3-256.
    Metadata (title, description, events) is not part of the digest.
    """
    buf = bytearray()
    buf += _u64_be(int(post_state.get("timestamp", 0)) if isinstance(post_state, dict) else 0)

    accounts = post_state.get("accounts", []) if isinstance(post_state, dict) else []
    sortable = sorted(((_address(acc.get("address")), acc) for acc in accounts), key=lambda x: x[0])
    for addr, acc in sortable:
        buf += addr
        buf += _u128_be(int(acc.get("balance", 0)))

    escrows = post_state.get("escrows", []) if isinstance(post_state, dict) else []
    sortable = sorted(((_address(esc.get("address")), esc) for esc in escrows), key=lambda x: x[0])
    buf += _u64_be(len(sortable))
    for addr, esc in sortable:
        buf += addr
        buf += _encode_escrow(esc)

    return blake3(buf).hexdigest()
