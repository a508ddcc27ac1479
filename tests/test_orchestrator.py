from csv_buffer import TaxCsvBuffer
from orchestrator import RunSummary, expand_query, process_tmk, run_query
from utils import UNSPECIFIED, build_tmk

REFERENCE = ("3390010001", "3120340002", "3390020003")


def _quiet(_msg):
    pass


class NoWait:
    def __init__(self):
        self.calls = 0

    def wait(self):
        self.calls += 1
        return 0.0


def _fetch_with(pages):
    calls = []

    def fetch(tmk):
        calls.append(tmk)
        html = pages.get(tmk)
        if html is None:
            return {"_status": "error", "_meta": {"tmk": tmk, "error": "404 Not Found"}, "html": ""}
        return {"_status": "ok", "_meta": {"tmk": tmk}, "html": html}

    fetch.calls = calls
    return fetch


def test_expand_exact_query_is_just_itself():
    q = build_tmk(3, 9, 1, 1)
    assert expand_query(q, REFERENCE) == ["390010010000"]


def test_expand_range_query():
    q = build_tmk(3, 9, UNSPECIFIED)
    assert expand_query(q, REFERENCE) == ["3900100010000", "3900200030000"]


def test_section_range_with_one_match_appends_one_row(parcel_page):
    q = build_tmk(3, 9, UNSPECIFIED)
    fetch = _fetch_with({"3900100010000": parcel_page()})
    buf = TaxCsvBuffer()
    summary = run_query(q, buf, tmks=("3390010001",), fetch=fetch, pacer=NoWait(), announce=_quiet)
    assert len(buf) == 1
    assert buf.rows[0][0] == "3900100010000"
    assert summary == RunSummary(requested=1, fetched=1, appended=1)


def test_section_range_without_2016_appends_nothing(parcel_page):
    q = build_tmk(3, 9, UNSPECIFIED)
    fetch = _fetch_with({"3900100010000": parcel_page(tax_values=("2013", "2014", "$10.00"))})
    buf = TaxCsvBuffer()
    summary = run_query(q, buf, tmks=("3390010001",), fetch=fetch, pacer=NoWait(), announce=_quiet)
    assert len(buf) == 0
    assert summary.dropped == 1 and summary.appended == 0


def test_fetch_failures_do_not_stop_the_batch(parcel_page):
    q = build_tmk(3, 9, UNSPECIFIED)
    fetch = _fetch_with({"3900200030000": parcel_page()})  # first TMK 404s
    buf = TaxCsvBuffer()
    pacer = NoWait()
    summary = run_query(q, buf, tmks=REFERENCE, fetch=fetch, pacer=pacer, announce=_quiet)
    assert fetch.calls == ["3900100010000", "3900200030000"]
    assert [r[0] for r in buf.rows] == ["3900200030000"]
    assert summary.fetch_failed == 1 and summary.appended == 1
    assert pacer.calls == 2


def test_custom_year_filter(parcel_page):
    q = build_tmk(3, 9, 1, 1)
    fetch = _fetch_with({"390010010000": parcel_page(tax_values=("2013", "2014", "$10.00"))})
    buf = TaxCsvBuffer()
    run_query(q, buf, tmks=(), fetch=fetch, year_filter="2014", announce=_quiet)
    assert buf.rows == [("390010010000", "DOE. JOHN & DOE. JANE", "123 MAIN ST HILO HI 96720", "2013-2014", "$10.00")]


def test_range_with_no_matches_fetches_nothing():
    msgs = []
    fetch = _fetch_with({})
    summary = run_query(build_tmk(8, 8, UNSPECIFIED), TaxCsvBuffer(), tmks=REFERENCE,
                        fetch=fetch, pacer=NoWait(), announce=msgs.append)
    assert fetch.calls == []
    assert summary.requested == 0
    assert msgs == ["There are 0 parcels within 88"]


def test_interrupt_keeps_finished_rows(parcel_page):
    q = build_tmk(3, 9, UNSPECIFIED)
    good = _fetch_with({"3900100010000": parcel_page()})

    def fetch(tmk):
        if tmk == "3900200030000":
            raise KeyboardInterrupt
        return good(tmk)

    buf = TaxCsvBuffer()
    summary = run_query(q, buf, tmks=REFERENCE, fetch=fetch, pacer=NoWait(), announce=_quiet)
    assert summary.interrupted
    assert len(buf) == 1


def test_process_tmk_returns_record(parcel_page):
    buf, summary = TaxCsvBuffer(), RunSummary()
    rec = process_tmk("390010010000", buf, summary, fetch=_fetch_with({"390010010000": parcel_page()}))
    assert rec.names == "DOE. JOHN & DOE. JANE"
    assert summary.appended == 1
