import argparse
import asyncio
import csv
import os
import sys
from typing import Any

# Add repo root to import path (so `import app` works when run as a script)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.catalog.importer import CatalogImporter
from app.db.session import AsyncSessionLocal, engine


def _load_csv(path: str) -> list[dict[str, Any]]:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


async def main() -> None:
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    parser = argparse.ArgumentParser(description="Import series/seasons/episodes CSV files into the catalog DB")
    parser.add_argument(
        "--data-dir",
        default=os.path.join(repo_root, "data"),
        help="Directory holding series.csv, seasons.csv and episodes.csv",
    )
    args = parser.parse_args()

    series = _load_csv(os.path.join(args.data_dir, "series.csv"))
    seasons = _load_csv(os.path.join(args.data_dir, "seasons.csv"))
    episodes = _load_csv(os.path.join(args.data_dir, "episodes.csv"))

    async with AsyncSessionLocal() as session:
        report = await CatalogImporter(session).run(series, seasons, episodes)

    await engine.dispose()
    print(
        f"Imported {report.series} series, {report.seasons} seasons, "
        f"{report.episodes} episodes ({report.skipped} skipped)"
    )


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main())
