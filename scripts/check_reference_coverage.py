# scripts/check_reference_coverage.py
# Reads the TMK reference list (tmk.csv) and prints how many parcels each
# zone / zone+section (and optionally plat) prefix expands to, so a range
# query can be sized before hitting qPublic.
#
#   python scripts/check_reference_coverage.py [path] [--plats]

import os
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from errors import SourceUnavailableError  # noqa: E402
from tmk_index import PARCEL_CLASS_DIGIT, REFERENCE_FILE, load_reference  # noqa: E402


def coverage_frame(tmks) -> pd.DataFrame:
    """One row per reference entry with its prefix columns; malformed lines flagged."""
    df = pd.DataFrame({"raw": list(tmks)}, dtype=str)
    df["ok"] = df["raw"].str.fullmatch(r"\d+") & df["raw"].str.startswith(PARCEL_CLASS_DIGIT) & (df["raw"].str.len() >= 6)
    body = df["raw"].str[len(PARCEL_CLASS_DIGIT):]
    df["zone"] = body.str[0]
    df["section"] = body.str[0:2]
    df["plat"] = body.str[0:5]
    return df


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    show_plats = "--plats" in argv
    args = [a for a in argv if not a.startswith("--")]
    path = Path(args[0]) if args else Path(os.getenv("TMK_REFERENCE_FILE", str(REFERENCE_FILE)))

    print(f"Loading reference list {path}…")
    try:
        tmks = load_reference(path)
    except SourceUnavailableError as e:
        print("ERROR:", e)
        return 1
    print(f"  entries: {len(tmks):,}")

    df = coverage_frame(tmks)
    bad = df.loc[~df["ok"], "raw"].tolist()
    good = df[df["ok"]]

    print("\n=== Per-zone ===")
    for zone, n in good.groupby("zone").size().items():
        print(f" - zone {zone}: {n:,}")

    print("\n=== Per zone+section (range prefix) ===")
    for prefix, n in good.groupby("section").size().items():
        print(f" - {prefix:5}: {n:,}")

    if show_plats:
        print("\n=== Per zone+section+plat ===")
        for prefix, n in good.groupby("plat").size().items():
            print(f" - {prefix:5}: {n:,}")

    print("\n=== Overall ===")
    print(f"  usable entries:   {len(good):,}")
    print(f"  malformed lines:  {len(bad):,}")
    if bad:
        print("   ⚠ First malformed examples:")
        for raw in bad[:5]:
            print(f"     {raw!r}")
    else:
        print("\n✅ Every line is a parcel-class TMK.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
