import os
import stat

import pytest

from csv_buffer import CSV_HEADER, TaxCsvBuffer
from models import BackTaxSummary, ExtractedRecord


def _record(tmk="390010010000", names=("DOE. JOHN",), address="123 MAIN ST HILO HI 96720"):
    return ExtractedRecord(tmk, names, address, BackTaxSummary("2014-2016", "$1500.00"))


def test_empty_buffer_is_header_only():
    buf = TaxCsvBuffer()
    assert len(buf) == 0
    assert buf.to_csv_text() == ",".join(CSV_HEADER) + "\n"


def test_rows_keep_column_order_and_duplicates():
    buf = TaxCsvBuffer()
    buf.append(_record())
    buf.append(_record())
    assert buf.header == ("tmk", "names", "mailingAddress", "backTaxYears", "backTaxTotal")
    assert buf.rows == [
        ("390010010000", "DOE. JOHN", "123 MAIN ST HILO HI 96720", "2014-2016", "$1500.00"),
    ] * 2


def test_csv_text_quotes_when_needed():
    buf = TaxCsvBuffer()
    buf.append(_record(names=("DOE. JOHN", "DOE. JANE"), address='PO BOX 1 "REAR", HILO'))
    lines = buf.to_csv_text().splitlines()
    assert lines[1] == '390010010000,DOE. JOHN & DOE. JANE,"PO BOX 1 ""REAR"", HILO",2014-2016,$1500.00'


def test_flush_replaces_file(tmp_path):
    out = tmp_path / "taxInfo.csv"
    out.write_text("old contents\n")
    buf = TaxCsvBuffer()
    buf.append(_record())
    assert buf.flush(out) == out
    text = out.read_text()
    assert text.startswith("tmk,names,")
    assert "old contents" not in text
    assert [p.name for p in tmp_path.iterdir()] == ["taxInfo.csv"]


def test_failed_flush_leaves_old_file(tmp_path, monkeypatch):
    out = tmp_path / "taxInfo.csv"
    out.write_text("old contents\n")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    buf = TaxCsvBuffer()
    buf.append(_record())
    with pytest.raises(OSError, match="disk full"):
        buf.flush(out)
    assert out.read_text() == "old contents\n"
    assert [p.name for p in tmp_path.iterdir()] == ["taxInfo.csv"]


def test_new_file_gets_umask_permissions(tmp_path):
    out = tmp_path / "taxInfo.csv"
    old = os.umask(0o022)
    try:
        TaxCsvBuffer().flush(out)
    finally:
        os.umask(old)
    assert stat.S_IMODE(out.stat().st_mode) == 0o644


def test_flush_keeps_existing_permissions(tmp_path):
    out = tmp_path / "taxInfo.csv"
    out.write_text("old contents\n")
    out.chmod(0o664)
    buf = TaxCsvBuffer()
    buf.append(_record())
    buf.flush(out)
    assert stat.S_IMODE(out.stat().st_mode) == 0o664
    assert "old contents" not in out.read_text()
