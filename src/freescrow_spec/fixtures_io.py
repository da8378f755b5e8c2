"""Helpers to serialize/deserialize fixtures for Freescrow specs."""

from __future__ import annotations

from typing import Any, Optional

from .types import (
    AccountState,
    ArbitratorDispute,
    ArbitratorDisputeStatus,
    ArbitratorState,
    Auction,
    Bid,
    Call,
    CallType,
    ChainState,
    Dispute,
    Escrow,
    EscrowStatus,
    Event,
    Ruling,
)


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v)


def _bytes_to_hex(v: bytes) -> str:
    return v.hex()


def _opt_hex(v: Optional[bytes]) -> Optional[str]:
    return _bytes_to_hex(v) if v is not None else None


def _opt_bytes(v: Optional[str]) -> Optional[bytes]:
    return _hex_to_bytes(v) if v else None


def _value_to_json(value: Any) -> Any:
    """Recursively convert a value, turning bytes into hex strings."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return _bytes_to_hex(bytes(value))
    if isinstance(value, dict):
        return {k: _value_to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_value_to_json(item) for item in value]
    return value


def _escrow_to_json(e: Escrow) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "address": _bytes_to_hex(e.address),
        "client": _bytes_to_hex(e.client),
        "freelancer": _opt_hex(e.freelancer),
        "title": e.title,
        "description": e.description,
        "arbitrator": _bytes_to_hex(e.arbitrator),
        "arbitrator_extra_data": _bytes_to_hex(e.arbitrator_extra_data),
        "fee_deposit_period": e.fee_deposit_period,
        "fund": e.fund,
        "highest_bid": e.highest_bid,
        "duration_in_seconds": e.duration_in_seconds,
        "started_at": e.started_at,
        "delivered_at": e.delivered_at,
        "deadline": e.deadline,
        "status": int(e.status),
        "auction": None,
        "dispute": None,
    }
    if e.auction is not None:
        entry["auction"] = {
            "min_bid": e.auction.min_bid,
            "started_at": e.auction.started_at,
            "end_at": e.auction.end_at,
            "bids": [
                {
                    "participant": _bytes_to_hex(b.participant),
                    "amount": b.amount,
                    "refunded": b.refunded,
                }
                for b in e.auction.bids
            ],
        }
    if e.dispute is not None:
        entry["dispute"] = {
            "dispute_id": e.dispute.dispute_id,
            "client_fee": e.dispute.client_fee,
            "freelancer_fee": e.dispute.freelancer_fee,
            "ruling": int(e.dispute.ruling) if e.dispute.ruling is not None else None,
            "first_deposit_fee_at": e.dispute.first_deposit_fee_at,
            "arbitration_paid": e.dispute.arbitration_paid,
        }
    return entry


def _escrow_from_json(data: dict[str, Any]) -> Escrow:
    escrow = Escrow(
        address=_hex_to_bytes(data["address"]),
        client=_hex_to_bytes(data["client"]),
        freelancer=_opt_bytes(data.get("freelancer")),
        title=data.get("title", ""),
        description=data.get("description", ""),
        arbitrator=_hex_to_bytes(data["arbitrator"]),
        arbitrator_extra_data=_hex_to_bytes(data.get("arbitrator_extra_data", "")),
        fee_deposit_period=data.get("fee_deposit_period", 0),
        fund=data.get("fund", 0),
        highest_bid=data.get("highest_bid", 0),
        duration_in_seconds=data.get("duration_in_seconds", 0),
        started_at=data.get("started_at", 0),
        delivered_at=data.get("delivered_at", 0),
        deadline=data.get("deadline", 0),
        status=EscrowStatus(data.get("status", 0)),
    )
    a = data.get("auction")
    if a is not None:
        escrow.auction = Auction(
            min_bid=a.get("min_bid", 0),
            started_at=a.get("started_at", 0),
            end_at=a.get("end_at", 0),
            bids=[
                Bid(
                    participant=_hex_to_bytes(b["participant"]),
                    amount=b["amount"],
                    refunded=b.get("refunded", False),
                )
                for b in a.get("bids", [])
            ],
        )
    d = data.get("dispute")
    if d is not None:
        escrow.dispute = Dispute(
            dispute_id=d.get("dispute_id"),
            client_fee=d.get("client_fee", 0),
            freelancer_fee=d.get("freelancer_fee", 0),
            ruling=Ruling(d["ruling"]) if d.get("ruling") is not None else None,
            first_deposit_fee_at=d.get("first_deposit_fee_at", 0),
            arbitration_paid=d.get("arbitration_paid", 0),
        )
    return escrow


def state_to_json(state: ChainState) -> dict[str, Any]:
    result: dict[str, Any] = {
        "timestamp": state.timestamp,
        "accounts": [
            {
                "address": _bytes_to_hex(a.address),
                "balance": a.balance,
                "accepts_value": a.accepts_value,
            }
            for a in state.accounts.values()
        ],
        "escrows": [_escrow_to_json(e) for e in state.escrows.values()],
        "registry": [_bytes_to_hex(addr) for addr in state.registry],
    }

    if state.arbitrators:
        result["arbitrators"] = [
            {
                "address": _bytes_to_hex(arb.address),
                "owner": _bytes_to_hex(arb.owner),
                "cost": arb.cost,
                "disputes": [
                    {
                        "arbitrated": _bytes_to_hex(d.arbitrated),
                        "choices": d.choices,
                        "fees": d.fees,
                        "ruling": d.ruling,
                        "status": int(d.status),
                    }
                    for d in arb.disputes
                ],
            }
            for arb in state.arbitrators.values()
        ]

    if state.events:
        result["events"] = [event_to_json(ev) for ev in state.events]

    return result


def state_from_json(data: dict[str, Any]) -> ChainState:
    state = ChainState(timestamp=data.get("timestamp", 0))

    for a in data.get("accounts", []):
        acct = AccountState(
            address=_hex_to_bytes(a["address"]),
            balance=a.get("balance", 0),
            accepts_value=a.get("accepts_value", True),
        )
        state.accounts[acct.address] = acct

    for e in data.get("escrows", []):
        escrow = _escrow_from_json(e)
        state.escrows[escrow.address] = escrow

    state.registry = [_hex_to_bytes(addr) for addr in data.get("registry", [])]

    for arb in data.get("arbitrators", []):
        rec = ArbitratorState(
            address=_hex_to_bytes(arb["address"]),
            owner=_hex_to_bytes(arb["owner"]),
            cost=arb.get("cost", 0),
            disputes=[
                ArbitratorDispute(
                    arbitrated=_hex_to_bytes(d["arbitrated"]),
                    choices=d.get("choices", 0),
                    fees=d.get("fees", 0),
                    ruling=d.get("ruling", 0),
                    status=ArbitratorDisputeStatus(d.get("status", 0)),
                )
                for d in arb.get("disputes", [])
            ],
        )
        state.arbitrators[rec.address] = rec

    for ev in data.get("events", []):
        state.events.append(
            Event(name=ev["name"], emitter=_hex_to_bytes(ev["emitter"]), data=ev.get("data", {}))
        )

    return state


def event_to_json(ev: Event) -> dict[str, Any]:
    return {
        "name": ev.name,
        "emitter": _bytes_to_hex(ev.emitter),
        "data": _value_to_json(ev.data),
    }


_BYTES_FIELDS: set[str] = {
    "arbitrator", "extra_data",
}


def _json_to_bytes_payload(payload: Any) -> Any:
    """Convert hex string fields of a JSON payload back to bytes."""
    if payload is None:
        return {}
    result: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _BYTES_FIELDS and isinstance(value, str):
            result[key] = _hex_to_bytes(value)
        else:
            result[key] = value
    return result


def call_to_json(call: Call) -> dict[str, Any]:
    return {
        "sender": _bytes_to_hex(call.sender),
        "target": _bytes_to_hex(call.target),
        "call_type": call.call_type.value,
        "payload": _value_to_json(call.payload),
        "value": call.value,
    }


def call_from_json(data: dict[str, Any]) -> Call:
    return Call(
        sender=_hex_to_bytes(data["sender"]),
        target=_hex_to_bytes(data["target"]),
        call_type=CallType(data["call_type"]),
        payload=_json_to_bytes_payload(data.get("payload")),
        value=data.get("value", 0),
    )
