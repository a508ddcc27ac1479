# fetchers.py
"""
qPublic adapter for Hawaii County parcel pages.
One GET per TMK; failures come back as an error envelope, never raised.
"""

import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# --- qPublic config ---
QPUBLIC_BASE = os.getenv("QPUBLIC_BASE", "http://qpublic9.qpublic.net/hi_hawaii_display.php")
QPUBLIC_COUNTY = os.getenv("QPUBLIC_COUNTY", "hi_hawaii")
QPUBLIC_KEY_PARAM = "KEY"
QPUBLIC_TIMEOUT = float(os.getenv("QPUBLIC_TIMEOUT", "25"))
QPUBLIC_WAIT_SECONDS = float(os.getenv("QPUBLIC_WAIT_SECONDS", "1.0"))  # gentle delay between requests to be polite

DEFAULT_UA = "TMK-Tool/1.0"


def _retrying_session(
    total: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: Tuple[int, ...] = (429, 500, 502, 503, 504),
    allowed_methods: Tuple[str, ...] = ("HEAD", "GET", "OPTIONS"),
) -> requests.Session:
    """
    Requests session with retry/backoff for idempotent GETs.
    """
    sess = requests.Session()
    retry = Retry(
        total=total,
        read=total,
        connect=total,
        status=total,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=set(allowed_methods),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    sess.headers.update({"User-Agent": DEFAULT_UA})
    return sess


_SESSION: Optional[requests.Session] = None


def _session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _retrying_session()
    return _SESSION


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _ok(meta: Dict[str, Any], html: str) -> Dict[str, Any]:
    """
    Standard success envelope.
    """
    return {
        "_status": "ok",
        "_meta": meta,
        "html": html,
    }


def _err(meta: Dict[str, Any], message: str) -> Dict[str, Any]:
    """
    Standard error envelope.
    """
    return {
        "_status": "error",
        "_meta": {**meta, "error": str(message)},
        "html": "",
    }


def query_params(tmk: str, county: str = QPUBLIC_COUNTY) -> Dict[str, str]:
    return {"county": county, QPUBLIC_KEY_PARAM: tmk}


def build_parcel_url(tmk: str, county: str = QPUBLIC_COUNTY, base: str = QPUBLIC_BASE) -> str:
    return f"{base}?{urlencode(query_params(tmk, county))}"


def fetch_parcel_html(tmk: str, sess: Optional[requests.Session] = None,
                      timeout: float = QPUBLIC_TIMEOUT) -> dict:
    """
    Fetch the qPublic display page for one full TMK.
    Returns:
      {"_status": "ok", "_meta": {...}, "html": "<html>..."}
      {"_status": "error", "_meta": {..., "error": "..."}, "html": ""}
    """
    t0 = time.time()
    url = build_parcel_url(tmk)
    meta = {
        "source": "QPUBLIC",
        "url": url,
        "tmk": tmk,
        "fetched_at": _now_iso(),
    }
    sess = sess or _session()

    try:
        r = sess.get(QPUBLIC_BASE, params=query_params(tmk), timeout=timeout)
        r.raise_for_status()
        html = r.content.decode(r.encoding or "utf-8")
    except requests.RequestException as e:
        logger.warning(f"qPublic fetch failed for {tmk}: {e}")
        return _err(meta, e)
    except (UnicodeDecodeError, LookupError) as e:
        logger.warning(f"qPublic returned an undecodable body for {tmk}: {e}")
        return _err(meta, f"undecodable response: {e}")

    meta["elapsed_ms"] = int((time.time() - t0) * 1000)
    meta["html_size_bytes"] = len(r.content)
    return _ok(meta, html)


class Pacer:
    """
    Minimum interval between consecutive requests.
    Sleeps only for whatever is left of the interval since the last call.
    """

    def __init__(self, min_interval: float = QPUBLIC_WAIT_SECONDS, clock=time.monotonic, sleep=time.sleep):
        self.min_interval = max(0.0, float(min_interval))
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None

    def wait(self) -> float:
        slept = 0.0
        if self._last is not None and self.min_interval > 0:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last = self._clock()
        return slept
