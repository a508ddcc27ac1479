# cli.py
import argparse
import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from csv_buffer import TaxCsvBuffer  # noqa: E402
from errors import InvalidInputError, OutOfRangeError  # noqa: E402
from fetchers import QPUBLIC_WAIT_SECONDS, Pacer  # noqa: E402
from orchestrator import run_query  # noqa: E402
from parsers import DEFAULT_YEAR_FILTER  # noqa: E402
from prompts import collect_query  # noqa: E402
from tmk_index import REFERENCE_FILE, reference_tmks  # noqa: E402

OUTPUT_CSV = os.getenv("TMK_OUTPUT_CSV", "taxInfo.csv")
YEAR_FILTER = os.getenv("TMK_YEAR_FILTER", DEFAULT_YEAR_FILTER)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

BANNER = (
    "**********************************************************\n"
    "Welcome to the Parcel Search Command Line Tool\n"
    "**********************************************************\n\n"
    "This tool is currently designed for parcel searches strictly on the Big Island\n"
)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tmk-tool",
        description="Look up Hawaii County parcels by TMK and collect owners, mailing addresses and back taxes into a CSV.",
    )
    p.add_argument("--reference", default=str(REFERENCE_FILE), help="newline-delimited list of known TMKs")
    p.add_argument("--output", default=OUTPUT_CSV, help="CSV file to (over)write at the end of the run")
    p.add_argument("--year", default=YEAR_FILTER, help="only keep parcels whose back-tax years mention this year")
    p.add_argument("--wait", type=float, default=QPUBLIC_WAIT_SECONDS,
                   help="minimum seconds between requests in range mode")
    p.add_argument("--log-level", default=LOG_LEVEL)
    return p


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv=None, ask=input) -> int:
    args = _parser().parse_args(argv)
    setup_logging(args.log_level)

    print("Starting up...", flush=True)
    tmks = reference_tmks(args.reference)
    print(BANNER, flush=True)

    try:
        query = collect_query(ask)
    except (InvalidInputError, OutOfRangeError) as e:
        print(f"❌ {e}", flush=True)
        return 2
    except KeyboardInterrupt:
        print("\nCancelled.", flush=True)
        return 130

    buffer = TaxCsvBuffer()
    summary = run_query(
        query,
        buffer,
        tmks=tmks,
        pacer=Pacer(args.wait),
        year_filter=args.year,
    )

    try:
        path = buffer.flush(args.output)
    except OSError as e:
        logger.error(f"Could not write {args.output}: {e}")
        print(f"❌ Could not write {args.output}; previous file left untouched.", flush=True)
        return 1

    print(
        f"Fetched {summary.fetched} of {summary.requested} parcels "
        f"({summary.fetch_failed} failed, {summary.dropped} skipped, {summary.appended} saved)",
        flush=True,
    )
    if summary.interrupted:
        print("⚠️ Run was interrupted; the CSV holds the parcels finished so far.", flush=True)
    print(f"All done! Open `{path}` to see all fetched data", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
