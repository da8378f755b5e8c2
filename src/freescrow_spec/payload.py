"""Typed accessors for call payload dicts."""

from __future__ import annotations

from typing import Any

from .config import ADDRESS_SIZE
from .errors import ErrorCode, SpecError


def get_int(p: dict[str, Any], key: str, default: int = 0) -> int:
    v = p.get(key, default)
    # bool is an int subclass; reject it so True never reads as 1 second
    if isinstance(v, bool) or not isinstance(v, int):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be an integer", "int", type(v).__name__)
    if v < 0:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be >= 0", 0, v)
    return v


def get_str(p: dict[str, Any], key: str, max_len: int) -> str:
    v = p.get(key, "")
    if not isinstance(v, str):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be a string", "str", type(v).__name__)
    if len(v) > max_len:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} too long", max_len, len(v))
    return v


def get_bytes(p: dict[str, Any], key: str, max_len: int) -> bytes:
    v = p.get(key, b"")
    if isinstance(v, (list, tuple)):
        v = bytes(v)
    if not isinstance(v, (bytes, bytearray)):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} must be bytes", "bytes", type(v).__name__)
    if len(v) > max_len:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{key} too long", max_len, len(v))
    return bytes(v)


def get_address(p: dict[str, Any], key: str) -> bytes:
    v = p.get(key)
    if isinstance(v, (list, tuple)):
        v = bytes(v)
    if not isinstance(v, (bytes, bytearray)) or len(v) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"{key} must be a {ADDRESS_SIZE}-byte address")
    return bytes(v)
