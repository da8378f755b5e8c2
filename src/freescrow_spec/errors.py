"""Freescrow Python spec error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class ErrorCategory(IntEnum):
    SUCCESS = 0x00
    VALIDATION = 0x01
    AUTHORIZATION = 0x02
    RESOURCE = 0x03
    STATE = 0x04
    TIMING = 0x05
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Success
    SUCCESS = 0x0000

    # Validation
    INVALID_PAYLOAD = 0x0100
    INVALID_TYPE = 0x0101
    INVALID_DURATION = 0x0102
    INVALID_ADDRESS = 0x0103
    INVALID_INDEX = 0x0104
    NOT_PAYABLE = 0x0105

    # Authorization
    ACCESS_DENIED = 0x0200

    # Resource
    INSUFFICIENT_BALANCE = 0x0300
    INSUFFICIENT_DEPOSIT = 0x0301
    OVER_MAXIMUM = 0x0302
    BELOW_MINIMUM = 0x0303
    TRANSFER_FAILED = 0x0304

    # State
    UNEXPECTED_STATUS = 0x0400
    NOT_YET_DEPOSITED = 0x0401
    ESCROW_NOT_FOUND = 0x0402
    ARBITRATOR_NOT_FOUND = 0x0403

    # Timing
    PASS_DEADLINE = 0x0500
    TOO_EARLY = 0x0501

    # Internal
    INTERNAL_ERROR = 0xFF00
    NOT_IMPLEMENTED = 0xFF01
    UNKNOWN = 0xFFFF

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self.value >> 8)


@dataclass(frozen=True)
class SpecError(Exception):
    """Rejection of a call.

    ``expected`` and ``found`` carry the offending values (for example the
    required status and the current one) so callers can react without
    parsing ``message``.
    """

    code: ErrorCode
    message: str
    expected: Any = None
    found: Any = None

    def __str__(self) -> str:
        text = f"{self.code.name}({self.code:#06x}): {self.message}"
        if self.expected is not None or self.found is not None:
            text += f" (expected={_fmt(self.expected)}, found={_fmt(self.found)})"
        return text


def _fmt(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, (tuple, list, frozenset, set)):
        return "[" + ", ".join(_fmt(v) for v in value) + "]"
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name
    return repr(value)


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__"))
_frozen_setattr = SpecError.__setattr__


def _spec_error_setattr(self: SpecError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


SpecError.__setattr__ = _spec_error_setattr  # type: ignore[method-assign]


def err(code: ErrorCode, message: str, expected: Any = None, found: Any = None) -> SpecError:
    return SpecError(code=code, message=message, expected=expected, found=found)


# --- Taxonomy constructors ---


def access_denied(expected: Any, found: bytes) -> SpecError:
    return err(ErrorCode.ACCESS_DENIED, "caller not allowed", expected, found)


def unexpected_status(expected: Any, found: Any) -> SpecError:
    return err(ErrorCode.UNEXPECTED_STATUS, "operation not valid in current status", expected, found)


def pass_deadline(deadline: int, now: int) -> SpecError:
    return err(ErrorCode.PASS_DEADLINE, "deadline has passed", deadline, now)


def too_early(earliest: int, now: int) -> SpecError:
    return err(ErrorCode.TOO_EARLY, "window has not opened yet", earliest, now)


def over_maximum(maximum: int, value: int) -> SpecError:
    return err(ErrorCode.OVER_MAXIMUM, "value above maximum", maximum, value)


def below_minimum(minimum: int, value: int) -> SpecError:
    return err(ErrorCode.BELOW_MINIMUM, "value not above minimum", minimum, value)


def insufficient_deposit(required: int, deposited: int) -> SpecError:
    return err(ErrorCode.INSUFFICIENT_DEPOSIT, "deposit below required amount", required, deposited)
