#!/usr/bin/env python3
"""Replay recorded position batches through the CO₂ tracker.

Input is a JSON-lines file: one ``{"<hex>": {report}, ...}`` object per
line, as captured from the live feed once per processing cycle. Each line is
fed to ``Co2Tracker.process_cycle`` and the reconciled summary is printed at
the end (or after every cycle with ``--verbose``).

Persisted totals go to ``--storage`` (defaults to an in-memory store so a
replay never touches the real fallback file). Pass ``--authoritative-url``
to reconcile against a live aggregate daemon.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from co2tracker import Co2Tracker, JsonFileStore, MemoryStore, TrackerConfig
from co2tracker.formatting import format_co2, format_distance, format_factor, format_source
from co2tracker.models.aggregate import ReportedSummary


def _print_summary(summary: ReportedSummary) -> None:
    print(f"All time     {format_co2(summary.all_time_co2_kg):>12}  {format_distance(summary.all_time_distance_km):>12}")
    print(f"Session      {format_co2(summary.session_co2_kg):>12}  {format_distance(summary.session_distance_km):>12}")
    print(f"Aircraft     {summary.all_time_count:>12}")
    print(f"Source       {format_source(summary)}")


async def _replay(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.authoritative_url:
        overrides["authoritative_url"] = args.authoritative_url
    else:
        overrides["authoritative_enabled"] = False
    config = TrackerConfig.from_env(**overrides)
    store = JsonFileStore(args.storage) if args.storage else MemoryStore()

    async with Co2Tracker(config, store=store) as tracker:
        if config.authoritative_enabled:
            await tracker.refresh_authoritative()

        with args.batches.open(encoding="utf-8") as handle:
            for lineno, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    batch = json.loads(line)
                except json.JSONDecodeError as exc:
                    print(f"line {lineno}: invalid JSON ({exc})", file=sys.stderr)
                    continue
                if not isinstance(batch, dict):
                    print(f"line {lineno}: expected an object", file=sys.stderr)
                    continue
                summary = tracker.process_cycle(batch)
                if args.verbose:
                    print(f"--- cycle {lineno}")
                    _print_summary(summary)

        _print_summary(tracker.summary())

        for entity_id in args.select:
            snapshot = tracker.selected(entity_id)
            if snapshot is None:
                print(f"{entity_id}: not tracked")
                continue
            print(
                f"{entity_id}: {format_distance(snapshot.distance_km)}, "
                f"{format_co2(snapshot.co2_kg) if snapshot.has_emissions else 'Unknown type'}, "
                f"{format_factor(snapshot.factor)}"
            )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("batches", type=Path, help="JSON-lines file with one batch per line")
    parser.add_argument("--storage", type=Path, default=None, help="JSON file for the persisted aggregate")
    parser.add_argument("--authoritative-url", default=None, help="URL of the aggregate daemon's co2data.json")
    parser.add_argument("--select", action="append", default=[], help="Print detail for this aircraft hex")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print the summary after every cycle")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    return asyncio.run(_replay(args))


if __name__ == "__main__":
    raise SystemExit(main())
