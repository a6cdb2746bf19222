"""
Load the hospital directory CSV into the database.

Usage:
    python scripts/load_hospitals.py [path/to/hospitals.csv]

Defaults to IMPORT_CSV_PATH (data/hospitals.csv). Rows are appended; running
the script twice imports the file twice.
"""
import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from hospital_finder.config.settings import get_settings
from hospital_finder.db.session import AsyncSessionLocal, dispose_engine, init_models
from hospital_finder.services.import_service import get_import_service
from hospital_finder.utils.logger import configure_logging, get_logger
from hospital_finder.utils.tabular import UnreadableTableError, read_csv_file

logger = get_logger("scripts.load_hospitals")


async def load_hospitals(csv_path: Path) -> int:
    try:
        rows = read_csv_file(csv_path)
    except (OSError, UnreadableTableError) as exc:
        logger.error("loader.read_failed", path=str(csv_path), error=str(exc))
        return 1

    if not rows:
        logger.error("loader.empty", path=str(csv_path))
        return 1

    try:
        await init_models()
        async with AsyncSessionLocal() as session:
            summary = await get_import_service().import_rows(session, rows)
    finally:
        await dispose_engine()

    print(f"Loaded {summary.imported} of {summary.total} hospitals ({summary.failed} failed)")
    return 0 if summary.imported else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load hospitals from a CSV file")
    parser.add_argument("csv_path", nargs="?", default=get_settings().import_csv_path)
    args = parser.parse_args(argv)

    configure_logging()
    return asyncio.run(load_hospitals(Path(args.csv_path)))


if __name__ == "__main__":
    sys.exit(main())
