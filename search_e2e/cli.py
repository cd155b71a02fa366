#!/usr/bin/env python3
"""Run the cross-engine search scenario from the command line.

Usage:
    python -m search_e2e.cli                          # All configured engines
    python -m search_e2e.cli --engine Firefox         # One engine
    python -m search_e2e.cli --headless --json        # CI-friendly output
    python -m search_e2e.cli --headed --demo-delay-ms 2000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .config import load_config
from .logging_config import configure_logging
from .ui_testing.runner import ScenarioResult, SearchScenarioRunner


RESULT_PREFIX = "SEARCH_E2E_RESULT_JSON="


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Search the movies demo app for Garfield on several browser engines.")
    ap.add_argument("--config", default=None, help="YAML config file (default: $SEARCH_E2E_CONFIG)")
    ap.add_argument("--engine", action="append", default=[], help="Engine name to run; repeatable")
    headless = ap.add_mutually_exclusive_group()
    headless.add_argument("--headless", dest="headless", action="store_true", default=None)
    headless.add_argument("--headed", dest="headless", action="store_false")
    ap.add_argument("--demo-delay-ms", type=_non_negative_int, default=None, help="Pause after passing assertions")
    ap.add_argument("--json", action="store_true", help="Emit one machine-readable result line per engine")
    return ap


def _print_summary(results: list[ScenarioResult]) -> None:
    passed = sum(1 for r in results if r.success)
    failed = len(results) - passed

    print("\n" + "=" * 50)
    print("SEARCH SCENARIO RESULTS")
    print("=" * 50)
    for result in results:
        status = "PASS" if result.success else "FAIL"
        print(f"{status:4}  {result.engine:<16} {result.duration:.2f}s")
        if not result.success:
            print(f"      {result.error_kind}: {result.error}")
        for cleanup_error in result.cleanup_errors:
            print(f"      cleanup: {cleanup_error}")
    print(f"\nTotal: {len(results)}  Passed: {passed}  Failed: {failed}")


async def _amain(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)

    config = load_config(args.config)
    updates = {}
    if args.headless is not None:
        updates["headless"] = args.headless
    if args.demo_delay_ms is not None:
        updates["demo_delay_ms"] = args.demo_delay_ms
    if updates:
        config = config.model_copy(update=updates)

    configure_logging(config.log_level)

    try:
        engines = config.select_engines(args.engine)
    except KeyError as e:
        print(f"error: {e.args[0]} (available: {', '.join(engine.name for engine in config.engines)})", file=sys.stderr)
        return 2

    async with SearchScenarioRunner(config) as runner:
        results = await runner.run_suite(engines)

    if args.json:
        for result in results:
            sys.stdout.write(RESULT_PREFIX + json.dumps(result.to_dict(), ensure_ascii=False, sort_keys=True) + "\n")
        sys.stdout.flush()
    else:
        _print_summary(results)

    return 0 if all(r.success for r in results) else 1


def main() -> None:
    try:
        rc = asyncio.run(_amain(sys.argv[1:]))
    except KeyboardInterrupt:
        rc = 130
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
