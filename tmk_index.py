# tmk_index.py
# Reference list of every known TMK, one per line (tmk.csv).
# Loaded once per process; range queries expand against it by prefix.

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from loguru import logger

from errors import SourceUnavailableError
from utils import TMK_SUFFIX

# ---------- configuration ----------
REFERENCE_FILE = Path(os.getenv("TMK_REFERENCE_FILE", "tmk.csv"))

# Entries for this parcel class carry a leading "3" in the reference list
PARCEL_CLASS_DIGIT = "3"


def load_reference(source=None) -> tuple[str, ...]:
    """
    Read the newline-delimited reference list.
    Raises SourceUnavailableError if the file is missing or unreadable.
    """
    path = Path(source) if source else REFERENCE_FILE
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(f"Cannot read TMK reference list {path}: {e}") from e
    return tuple(line.strip() for line in text.splitlines() if line.strip())


@lru_cache(maxsize=8)
def reference_tmks(source=None) -> tuple[str, ...]:
    """Cached reference list; an unreadable source degrades to an empty list."""
    try:
        tmks = load_reference(source)
    except SourceUnavailableError as e:
        logger.warning(f"{e} (range queries will match nothing)")
        return ()
    logger.info(f"Loaded {len(tmks)} reference TMKs from {source or REFERENCE_FILE}")
    return tmks


def refresh_local_cache() -> None:
    """Clear cache (if you replace the file on disk)."""
    reference_tmks.cache_clear()  # type: ignore[attr-defined]


def expand_prefix(prefix: str, tmks: Iterable[str]) -> list[str]:
    """
    Every reference entry under `prefix`, as a fetch-ready TMK.
      "3120340001" with prefix "12034" -> "1203400010000"
    Order follows the reference list; no match -> [].
    """
    needle = PARCEL_CLASS_DIGIT + prefix
    return [t[len(PARCEL_CLASS_DIGIT):] + TMK_SUFFIX for t in tmks if t.startswith(needle)]

