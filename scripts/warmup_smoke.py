#!/usr/bin/env python3
"""Smoke test for the stake warmup simulator.

Runs calculate_stake_warmup over the JSONL scenarios in
scripts/fixtures/warmup/scenarios.jsonl (warmup/cooldown rate 0.25).

Usage:
    python scripts/warmup_smoke.py

Exit codes:
    - 0: All scenarios passed
    - 1: One or more scenarios failed
"""

import json
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from stake.models import StakeHistoryEntry, WarmupConfig
from stake.warmup import calculate_stake_warmup


def run_warmup_smoke_tests() -> int:
    fixture_path = Path(__file__).parent / "fixtures" / "warmup" / "scenarios.jsonl"
    config = WarmupConfig(warmup_rate=0.25, cooldown_rate=0.25)

    print("[warmup_smoke] Starting warmup simulation tests...", file=sys.stderr)

    test_count = 0
    passed_count = 0

    try:
        with open(fixture_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue

                test_count += 1
                scenario = json.loads(line)
                description = scenario.get("description", "unknown")

                entry = StakeHistoryEntry(
                    effective=scenario["effective"],
                    activating=scenario["activating"],
                    deactivating=scenario["deactivating"],
                )
                epochs = calculate_stake_warmup(entry, config)
                expected = scenario["expected_epochs"]

                if epochs == expected:
                    passed_count += 1
                    status = "PASS"
                else:
                    status = f"FAIL (got {epochs}, expected {expected})"

                print(f"[warmup_smoke] Testing {description}... {status}", file=sys.stderr)

    except FileNotFoundError:
        print(f"[warmup_smoke] ERROR: Fixture file not found at {fixture_path}", file=sys.stderr)
        return 1
    except (json.JSONDecodeError, KeyError, ValueError) as e:
        print(f"[warmup_smoke] ERROR: Invalid fixture: {e}", file=sys.stderr)
        return 1

    if passed_count == test_count:
        print(f"[warmup_smoke] OK ({passed_count}/{test_count} tests passed)", file=sys.stderr)
        return 0

    print(f"[warmup_smoke] FAILED ({passed_count}/{test_count} tests passed)", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(run_warmup_smoke_tests())
