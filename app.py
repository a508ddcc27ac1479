import os

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException, Query  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

import fetchers  # noqa: E402
from errors import InvalidInputError, OutOfRangeError  # noqa: E402
from orchestrator import expand_query  # noqa: E402
from parsers import DEFAULT_YEAR_FILTER, drop_reason, extract_record  # noqa: E402
from utils import UNSPECIFIED, build_tmk, dashed_tmk, parse_tmk  # noqa: E402


# ---------------- App & middleware ----------------
app = FastAPI(title="TMK Tool API", version="1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)


# ---------------- Health ----------------
@app.get("/api/health")
def health():
    return {"status": "ok"}


# ---------------- Helpers ----------------
def _must_tmk(tmk: str) -> str:
    try:
        return parse_tmk(tmk).tmk
    except (InvalidInputError, OutOfRangeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------------- Single parcel ----------------
@app.get("/api/tmk/{tmk}")
def api_tmk(tmk: str, year: str = DEFAULT_YEAR_FILTER):
    full = _must_tmk(tmk)
    res = fetchers.fetch_parcel_html(full)
    if res["_status"] != "ok":
        raise HTTPException(status_code=502, detail=res["_meta"].get("error", "fetch failed"))

    record = extract_record(full, res["html"])
    reason = drop_reason(record, year)
    return {
        **record.as_dict(),
        "tmk_dashed": dashed_tmk(full),
        "kept": reason is None,
        "drop_reason": reason,
        "url": res["_meta"]["url"],
    }


# ---------------- Range expansion (no fetching) ----------------
@app.get("/api/range")
def api_range(
    zone: int = Query(...),
    section: int = Query(...),
    plat: int | None = Query(default=None),
):
    try:
        query = build_tmk(zone, section, UNSPECIFIED if plat is None else plat)
    except (InvalidInputError, OutOfRangeError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    tmks = expand_query(query)
    return {"prefix": query.tmk, "count": len(tmks), "tmks": tmks}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
