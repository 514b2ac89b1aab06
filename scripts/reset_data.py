"""
Write the default dataset to the configured blob store and local mirror.

Run this to bring a console back to the seed data without starting the
server. Uses the same DATABASE_URL / BLOB_STORE / DATA_DIR settings.

Usage:
    python -m scripts.reset_data
    python -m scripts.reset_data --clear
"""
import argparse
import asyncio

from app.core.context import build_context
from app.utils import get_logger


log = get_logger(__name__)


async def reset_data(clear: bool = False) -> None:
    context = build_context()
    try:
        await context.start()
        if clear:
            await context.store.clear_all()
        else:
            await context.store.reset_to_defaults()
        log.info("Collections now: %s", context.store.counts())
    finally:
        await context.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--clear", action="store_true", help="empty every collection instead")
    args = parser.parse_args()
    asyncio.run(reset_data(clear=args.clear))


if __name__ == "__main__":
    main()
