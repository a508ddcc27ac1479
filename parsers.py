# parsers.py
"""
Field extraction from qPublic parcel pages.

The registry's markup is not valid enough for a DOM parser, so every field is
carved out by splitting on fixed markers, in order. Each parser keeps the
legacy fallbacks apart:
  - owner names:      () when nothing qualifies
  - mailing address:  None when a marker is missing, "No Mailing Address"
                      when the page shows the placeholder
  - back taxes:       ("", "$0.00") when there are no data rows
"""

import re
from typing import Optional, Tuple

from errors import ExtractionAbsence
from models import BackTaxSummary, ExtractedRecord

SEPARATOR = "&nbsp;"
_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)

OWNER_MARKER = "Owner Name"
OWNER_END = "</tr>"

MAILING_MARKER = "Mailing Address"
VALUE_MARKER = "owner_value"
MISSING_ADDRESS_PHRASE = "Parcel Number"
NO_MAILING_ADDRESS = "No Mailing Address"

TAX_MARKER = "Current Tax Bill Information"
TAX_END = "</B>"
ROW_START = "<tr"
TAX_CELL = '<td class="tax_value">'
_TAX_CELL_STRIP = ("</td>", "<B>", " ")
NO_TAXES = "$0.00"

DEFAULT_YEAR_FILTER = "2016"


def _has_line_break(s: str) -> bool:
    return bool(_LINE_BREAK_RE.search(s))


def parse_owner_names(html: str) -> Tuple[str, ...]:
    """
    Names live after the last "Owner Name" label, up to the end of its row,
    separated by &nbsp;. Only "SURNAME,GIVEN" pieces count.
    """
    if OWNER_MARKER not in html:
        return ()
    segment = html.rsplit(OWNER_MARKER, 1)[1].split(OWNER_END, 1)[0]

    names = []
    for piece in segment.split(SEPARATOR):
        if "," not in piece or _has_line_break(piece):
            continue
        name = piece.replace(",", ".").strip()
        if name:
            names.append(name)
    return tuple(names)


def parse_mailing_address(html: str) -> Optional[str]:
    parts = html.split(MAILING_MARKER, 1)
    if len(parts) < 2:
        return None
    inner = parts[1].split(VALUE_MARKER, 1)
    if len(inner) < 2:
        return None

    pieces = inner[1].split(SEPARATOR)
    if len(pieces) < 3:
        return None

    address = _LINE_BREAK_RE.sub(" ", pieces[1] + pieces[2]).replace(",", "")
    if MISSING_ADDRESS_PHRASE in address:
        return NO_MAILING_ADDRESS
    return address.strip()


def _tax_cell_value(row: str) -> Optional[str]:
    if TAX_CELL not in row:
        return None
    value = row.split(TAX_CELL, 1)[1]
    value = value.split("<td", 1)[0].split("</tr>", 1)[0]
    for token in _TAX_CELL_STRIP:
        value = value.replace(token, "")
    return value.strip()


def summarize_back_taxes(values) -> BackTaxSummary:
    """
    Collapse the tax-history cell values into (year range, total).
    The last value is the running total; the rest are years.
    """
    values = list(values)
    if not values:
        return BackTaxSummary("", NO_TAXES)
    total = values.pop().replace(",", "")
    if not values:
        return BackTaxSummary("", total)
    return BackTaxSummary(f"{values[0]}-{values[-1]}", total)


def parse_back_taxes(html: str) -> BackTaxSummary:
    cleaned = html.replace(SEPARATOR, "").replace("  ", "")
    parts = cleaned.split(TAX_MARKER, 1)
    if len(parts) < 2:
        return BackTaxSummary("", NO_TAXES)
    segment = parts[1].split(TAX_END, 1)[0]

    rows = segment.split(ROW_START)[2:]  # preamble + header row
    values = [v for v in (_tax_cell_value(r) for r in rows) if v is not None]
    return summarize_back_taxes(values)


def extract_record(tmk: str, html: str) -> ExtractedRecord:
    """Pure function of the page text: same html, same record."""
    return ExtractedRecord(
        tmk=tmk,
        owner_names=parse_owner_names(html),
        mailing_address=parse_mailing_address(html),
        back_taxes=parse_back_taxes(html),
    )


def drop_reason(record: ExtractedRecord, year_filter: str = DEFAULT_YEAR_FILTER) -> Optional[str]:
    if not record.owner_names:
        return "no names exist for this one"
    if record.mailing_address is None:
        return "no mailing address found"
    if year_filter and year_filter not in record.back_taxes.years:
        return f"no back taxes owed for {year_filter}"
    return None


def require_fields(record: ExtractedRecord, year_filter: str = DEFAULT_YEAR_FILTER) -> ExtractedRecord:
    """Return the record if it belongs in the output; raise ExtractionAbsence otherwise."""
    reason = drop_reason(record, year_filter)
    if reason:
        raise ExtractionAbsence(record.tmk, reason)
    return record
