# scripts/smoke.py
"""
Smoke script for a Lifeline session.

Runs one pass over every session operation against a throwaway data file:
seed samples, merge the CSV template, query a day, project a layout, stage
and cancel a delete, then export.

Usage
-----
1. Use a temporary data file:
    $ uv run python scripts/smoke.py

2. Use (and keep) a specific data file:
    $ uv run python scripts/smoke.py --data artifacts/lifeline/smoke.json --date 2023-07-01
"""

import argparse
import logging
import sys
import tempfile
import traceback
from pathlib import Path

from dotenv import load_dotenv

from lifeline.core.contracts.timeline import Container
from lifeline.core.store.storage import JsonFileStorage
from lifeline.session import TimelineSession

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


def run(data_file: Path, day: str) -> None:
    session = TimelineSession.open(JsonFileStorage(data_file), seed_samples=True)
    print(f"\n📂 Data file: {data_file} ({len(session.store)} events)")

    report = session.import_text(session.csv_template(), "csv")
    print(f"📥 CSV template: {report.imported} added, {report.skipped_duplicate} duplicate")

    snap = session.snapshot(day)
    print(f"\n📅 True on {snap.query_date.isoformat()}:")
    for group in snap.results:
        titles = ", ".join(e.title for e in group.matches) or "None"
        print(f"  - [{group.category.value}]: {titles}")

    geo = session.project_layout(Container(width=1000, height=400))
    print(f"\n📏 Range {geo.min_date} → {geo.max_date}, {len(geo.bars)} bars")
    for bar in geo.bars:
        print(f"  {bar.row:>2}. x={bar.x:7.1f} w={bar.width:7.1f} {bar.title}")

    first = session.list_events()[0]
    session.stage_delete(first.id)
    print(f"\n🗑  Staged delete of {first.title!r}; cancelling")
    session.cancel_delete()
    assert session.delete_state.idle

    exported = session.export()
    print(f"\n💾 Export: {len(exported)} characters, {len(session.store)} events")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run Lifeline smoke test")
    parser.add_argument("--data", "-d", type=str, help="JSON data file to use")
    parser.add_argument("--date", type=str, default="2023-07-01", help="Snapshot date")
    args = parser.parse_args()

    try:
        if args.data:
            run(Path(args.data), args.date)
        else:
            with tempfile.TemporaryDirectory() as tmp:
                run(Path(tmp) / "events.json", args.date)
    except Exception as exc:
        print(f"\n❌ Smoke run failed: {exc}")
        traceback.print_exc()
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ Smoke run finished")
    print("=" * 60)


if __name__ == "__main__":
    main()
