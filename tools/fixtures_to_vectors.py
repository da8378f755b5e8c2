#!/usr/bin/env python3
"""Convert generated state fixtures into YAML vectors.

Each case keeps its pre-state and call; the expected post-state is reduced
to its digest so other implementations can compare without matching the
JSON layout field by field.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from freescrow_spec.state_digest import compute_state_digest
from yaml_dump import write_yaml

ROOT = Path(__file__).resolve().parent.parent


def _case_to_vector(case: dict[str, Any]) -> dict[str, Any]:
    expected = case["expected"]
    return {
        "name": case["name"],
        "pre_state": case["pre_state"],
        "call": case["call"],
        "expected": {
            "ok": expected["ok"],
            "error": expected["error"],
            "state_digest": compute_state_digest(expected["post_state"]),
        },
    }


def convert(src: Path, dst: Path) -> int:
    count = 0
    for path in sorted(src.rglob("*.json")):
        data = json.loads(path.read_text())
        cases = data.get("cases")
        if not cases:
            continue
        rel = path.relative_to(src).with_suffix(".yaml")
        write_yaml(dst / rel, {"test_vectors": [_case_to_vector(c) for c in cases]})
        count += len(cases)
    return count


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--fixtures", default=str(ROOT / "fixtures"))
    parser.add_argument("--output", default=str(ROOT / "vectors"))
    args = parser.parse_args()

    count = convert(Path(args.fixtures), Path(args.output))
    print(f"Wrote {count} vectors to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
