"""Pytest hooks to generate state fixtures while running the specs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from freescrow_spec.fixtures_io import call_to_json, state_to_json
from freescrow_spec.state_transition import TransitionResult, apply_call
from freescrow_spec.types import Call, ChainState

_STATE_CASES: dict[str, list[dict[str, Any]]] = {}
_VECTOR_CASES: dict[str, list[dict[str, Any]]] = {}


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def state_test_group() -> Callable[[str, str, ChainState, Call], tuple[ChainState, TransitionResult]]:
    """Apply a call, collect the case under a fixture path, return the outcome."""

    def _state_test_group(
        rel_path: str, name: str, pre_state: ChainState, call: Call
    ) -> tuple[ChainState, TransitionResult]:
        pre_json = state_to_json(pre_state)
        post_state, result = apply_call(pre_state, call)
        _STATE_CASES.setdefault(rel_path, []).append(
            {
                "name": name,
                "pre_state": pre_json,
                "call": call_to_json(call),
                "expected": {
                    "ok": result.ok,
                    "error": result.error.code.name if result.error else None,
                    "post_state": state_to_json(post_state),
                },
            }
        )
        return post_state, result

    return _state_test_group


@pytest.fixture
def vector_test_group() -> Callable[[str, dict[str, Any]], None]:
    """Collect pre-built test_vectors under a specific fixture path."""

    def _vector_test_group(rel_path: str, vector: dict[str, Any]) -> None:
        _VECTOR_CASES.setdefault(rel_path, []).append(vector)

    return _vector_test_group


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    for rel_path, cases in _STATE_CASES.items():
        if not cases:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"cases": cases}, indent=2))

    for rel_path, vectors in _VECTOR_CASES.items():
        if not vectors:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"test_vectors": vectors}, indent=2))
