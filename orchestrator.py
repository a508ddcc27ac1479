# orchestrator.py
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger

from csv_buffer import TaxCsvBuffer
from errors import ExtractionAbsence
from fetchers import Pacer, fetch_parcel_html
from models import ExtractedRecord, TmkQuery
from parsers import DEFAULT_YEAR_FILTER, extract_record, require_fields
from tmk_index import expand_prefix, reference_tmks


@dataclass
class RunSummary:
    requested: int = 0
    fetched: int = 0
    fetch_failed: int = 0
    dropped: int = 0
    appended: int = 0
    interrupted: bool = False


def expand_query(query: TmkQuery, tmks: Optional[Sequence[str]] = None) -> list[str]:
    """Exact query -> [tmk]; range query -> every reference TMK under the prefix."""
    if not query.is_range:
        return [query.tmk]
    if tmks is None:
        tmks = reference_tmks()
    return expand_prefix(query.tmk, tmks)


def process_tmk(
    tmk: str,
    buffer: TaxCsvBuffer,
    summary: RunSummary,
    fetch: Optional[Callable[[str], dict]] = None,
    year_filter: str = DEFAULT_YEAR_FILTER,
) -> Optional[ExtractedRecord]:
    """Fetch, extract and (maybe) append one TMK. Never raises for a bad record."""
    res = (fetch or fetch_parcel_html)(tmk)
    if res.get("_status") != "ok":
        summary.fetch_failed += 1
        logger.info(f"Skipping {tmk}: fetch failed ({res.get('_meta', {}).get('error', 'unknown error')})")
        return None
    summary.fetched += 1

    record = extract_record(tmk, res.get("html") or "")
    try:
        require_fields(record, year_filter)
    except ExtractionAbsence as e:
        summary.dropped += 1
        logger.info(f"Skipping {tmk}: {e.reason}")
        return None

    buffer.append(record)
    summary.appended += 1
    logger.info(f"Added {tmk}: {record.names} / {record.back_taxes.years} {record.back_taxes.total}")
    return record


def run_query(
    query: TmkQuery,
    buffer: TaxCsvBuffer,
    tmks: Optional[Sequence[str]] = None,
    fetch: Optional[Callable[[str], dict]] = None,
    pacer: Optional[Pacer] = None,
    year_filter: str = DEFAULT_YEAR_FILTER,
    announce: Callable[[str], None] = lambda msg: print(msg, flush=True),
) -> RunSummary:
    """
    Sequential loop: one TMK at a time, fetched, extracted and buffered before
    the next one starts. Ctrl-C stops between TMKs; whatever is already in
    `buffer` stays valid for the caller to flush.
    """
    targets = expand_query(query, tmks)
    summary = RunSummary(requested=len(targets))

    if query.is_range:
        announce(f"There are {len(targets)} parcels within {query.tmk}")
        if targets:
            announce("Fetching parcel data for all of them. Hang tight...")
        pacer = pacer if pacer is not None else Pacer()
    else:
        announce(f"Fetching parcel data for TMK: {query.tmk}. Hang tight...")

    try:
        for tmk in targets:
            if pacer is not None:
                pacer.wait()
            process_tmk(tmk, buffer, summary, fetch=fetch, year_filter=year_filter)
    except KeyboardInterrupt:
        summary.interrupted = True
        logger.warning(f"Interrupted after {summary.fetched + summary.fetch_failed} of {summary.requested} parcels")

    return summary
