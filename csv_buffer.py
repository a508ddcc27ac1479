# csv_buffer.py
"""
Run-level accumulator for the output CSV.
Append-only; written to disk once, at the end of a run.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from models import ExtractedRecord

CSV_HEADER = ("tmk", "names", "mailingAddress", "backTaxYears", "backTaxTotal")


def _output_mode(target: Path) -> int:
    """Keep an existing file's permissions; new files get 0666 minus the umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class TaxCsvBuffer:
    def __init__(self):
        self._rows: List[Tuple[str, ...]] = []

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def header(self) -> Tuple[str, ...]:
        return CSV_HEADER

    @property
    def rows(self) -> List[Tuple[str, ...]]:
        return list(self._rows)

    def append(self, record: ExtractedRecord) -> None:
        # no dedupe: a TMK processed twice shows up twice
        self._rows.append(record.as_row())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._rows, columns=list(CSV_HEADER), dtype=str)

    def to_csv_text(self) -> str:
        return self.to_frame().to_csv(index=False, lineterminator="\n")

    def flush(self, path) -> Path:
        """
        Replace `path` with the buffered rows. The file is written to a temp
        file in the same directory first, so a failed write leaves the old
        file as it was.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        mode = _output_mode(target)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(self.to_csv_text())
            os.chmod(tmp, mode)  # mkstemp always creates 0600
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        return target
