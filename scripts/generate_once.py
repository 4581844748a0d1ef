#!/usr/bin/env python3
"""
One-shot run - generate a service request and submit it through the form.

The intake form must be served (python3 main.py) at FORM_URL.

Usage:
    python3 scripts/generate_once.py                                   # everything generated
    python3 scripts/generate_once.py --override make=Honda --override year=2019
    python3 scripts/generate_once.py --log serviceRequest.log          # append result as JSON line
    HEADLESS=false python3 scripts/generate_once.py                    # watch the browser
"""

import sys
import json
import asyncio
import logging
import argparse
from pathlib import Path
from datetime import datetime, timezone

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from service_request.errors import SchemaValidationError, ServiceRequestError
from service_request.orchestrator import close_runner, get_runner
from service_request.schema import validate_overrides


def parse_overrides(pairs: list) -> dict:
    """key=value pairs; values are JSON-decoded when possible (year=2019 -> int)."""
    overrides = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(f"Expected key=value, got: {pair}")
        key, raw = pair.split("=", 1)
        try:
            overrides[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            overrides[key.strip()] = raw
    return overrides


async def run_once(overrides):
    try:
        return await get_runner().run(overrides)
    finally:
        await close_runner()


def append_log(path: Path, record: dict):
    entry = {"timestamp": datetime.now(timezone.utc).isoformat(), "serviceRequest": record}
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry) + "\n")


def main():
    parser = argparse.ArgumentParser(description="Generate and submit one service request")
    parser.add_argument("--override", action="append", default=[], metavar="KEY=VALUE",
                        help="Field override (repeatable)")
    parser.add_argument("--log", type=Path, help="Append the submitted record to this file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    try:
        overrides = validate_overrides(parse_overrides(args.override))
    except (argparse.ArgumentTypeError, SchemaValidationError) as e:
        parser.error(str(e))

    try:
        record = asyncio.run(run_once(overrides))
    except ServiceRequestError as e:
        print(f"❌ Run failed: {e}")
        sys.exit(1)

    data = record.to_wire()
    print(json.dumps(data, indent=2))

    if args.log:
        append_log(args.log, data)
        print(f"✅ Logged service request to {args.log}")


if __name__ == "__main__":
    main()
