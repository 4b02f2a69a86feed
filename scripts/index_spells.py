import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from spell_search.config import settings
from spell_search.core.errors import SearchBackendError, SourceAccessError
from spell_search.ingestion.driver import run_ingestion
from spell_search.search.client import TypesenseClient


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Rebuild the spell search collection.")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help=f"Directory with spells-*.json books (default: {settings.data_dir})")
    parser.add_argument("--collection", default=None,
                        help=f"Target collection (default: {settings.collection_name})")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    async with TypesenseClient.from_settings(settings) as client:
        try:
            result = await run_ingestion(
                client,
                data_dir=args.data_dir,
                collection=args.collection,
            )
        except SourceAccessError as e:
            print(f"Could not read spell books: {e}", file=sys.stderr)
            return 1
        except SearchBackendError as e:
            print(f"Indexing failed (status={e.status}): {e.message}", file=sys.stderr)
            return 1

    print(
        f"Done! Indexed {result.report.documents} spells from {result.files} books "
        f"into '{result.report.collection}' ({result.rejected} records skipped)."
    )
    return 0

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
