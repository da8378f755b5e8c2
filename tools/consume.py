"""Replay generated fixtures and validate them against the Python specs."""

from __future__ import annotations

import json
from pathlib import Path

from freescrow_spec.fixtures_io import call_from_json, state_from_json, state_to_json
from freescrow_spec.state_digest import compute_state_digest
from freescrow_spec.state_transition import apply_call

ROOT = Path(__file__).resolve().parent.parent


def _check_state_cases(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())

    for case in data.get("cases", []):
        pre_state = state_from_json(case["pre_state"])
        call = call_from_json(case["call"])
        post_state, result = apply_call(pre_state, call)

        expected = case["expected"]
        if result.ok != expected["ok"]:
            failures.append(f"{case['name']}: ok_mismatch")
            continue

        actual_err = result.error.code.name if result.error else None
        if actual_err != expected["error"]:
            failures.append(f"{case['name']}: error_mismatch")
            continue

        actual = compute_state_digest(state_to_json(post_state))
        if actual != compute_state_digest(expected["post_state"]):
            failures.append(f"{case['name']}: state_digest_mismatch")

    return failures


def main() -> None:
    fixtures = ROOT / "fixtures"

    failures: list[str] = []
    for path in sorted(fixtures.rglob("*.json")):
        failures.extend(_check_state_cases(path))

    if failures:
        for f in failures:
            print("FAIL", f)
        raise SystemExit(1)

    print("All fixtures passed")


if __name__ == "__main__":
    main()
