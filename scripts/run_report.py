"""Script to run the report task once without a Celery worker."""

import asyncio
import sys

sys.path.insert(0, ".")

from mediacost.db.session import init_db
from mediacost.worker import run_report


async def main():
    """Build and store the report data once."""
    print("Initializing database...")
    await init_db()

    print("Processing report...")
    values = await run_report()

    if values is None:
        print("AWS API key is not set, nothing was processed.")
        return

    print("\n" + "=" * 60)
    print("REPORT DATA")
    print("=" * 60)
    for name, value in values.items():
        print(f"{name:>24}: {'cannot calculate' if value is None else value}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
