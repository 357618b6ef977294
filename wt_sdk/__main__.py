"""
Command line entry point.
Uploads local files as a new transfer and prints its download URL.

Usage:
    WT_API_KEY=... python -m wt_sdk --message "Holiday pictures" a.jpg b.jpg
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from wt_sdk.client import Client
from wt_sdk.core.config import settings
from wt_sdk.core.errors import WTError
from wt_sdk.uploads.sources import LocalFile

logger = logging.getLogger("wt_sdk")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wt_sdk", description="Send files with WeTransfer.")
    parser.add_argument("paths", nargs="+", help="files to send")
    parser.add_argument("--message", "-m", default=None, help="message for the recipients")
    return parser.parse_args(argv)


async def send(paths: List[str], message: Optional[str]) -> str:
    files = [LocalFile(path) for path in paths]
    async with await Client.authorized(settings.WT_API_KEY, base_url=settings.WT_BASE_URL) as client:
        transfer = await client.transfers.create(message, *files)
    return transfer.url or ""


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = parse_args(argv)

    try:
        url = asyncio.run(send(args.paths, args.message))
    except WTError as e:
        logger.error(f"Transfer failed: {e}")
        return 1

    print(url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
