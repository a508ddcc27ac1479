# utils.py
import re

from errors import InvalidInputError, OutOfRangeError
from models import UNSPECIFIED, TmkQuery

# Hawaii County TMK helpers
# Formats supported:
#   - exact parcel:   "390010010000"  (zone, section, plat:3, parcel:3, "0000")
#   - section range:  "39"
#   - plat range:     "39001"
#   - with/without dashes or spaces when parsing ("3-9-001-001-0000")

TMK_SUFFIX = "0000"
_TMK_DIGITS = 12
_TMK_DASHED_RE = re.compile(r"^\d-\d-\d{3}-\d{3}(-\d{4})?$")
_INT_RE = re.compile(r"[+-]?[0-9]+")  # ASCII only; "²" or "٣" are not numbers here

# Older runs used the year 1970 to mean "no parcel given"
LEGACY_UNSPECIFIED = 1970

# (low, high) exclusive bounds per field
BOUNDS = {
    "zone": (0, 10),
    "section": (0, 10),
    "plat": (0, 1000),
    "parcel": (0, 1000),
}


def only_digits(s: str) -> str:
    return re.sub(r"\D+", "", s or "")


def parse_int(text) -> int:
    """
    Strict integer parse for prompt input; raises InvalidInputError.
    A sign is allowed so "-3" parses and is then rejected by the bounds check.
    """
    if isinstance(text, bool):
        raise InvalidInputError(f"Not a number: {text!r}")
    if isinstance(text, int):
        return text
    s = str(text or "").strip()
    if not _INT_RE.fullmatch(s):
        raise InvalidInputError(f"Not a number: {text!r}")
    return int(s)


def validate_field(name: str, value, allow_unspecified: bool = False):
    """Return the validated int (or UNSPECIFIED) for one TMK field."""
    if allow_unspecified and (value is UNSPECIFIED or value is None or value == LEGACY_UNSPECIFIED):
        return UNSPECIFIED
    n = parse_int(value)
    low, high = BOUNDS[name]
    if low < n < high:
        return n
    raise OutOfRangeError(name, n)


def pad3(n: int) -> str:
    """Left-pad plat/parcel to exactly 3 digits."""
    s = str(n)
    if len(s) == 1:
        s = "00" + s
    elif len(s) == 2:
        s = "0" + s
    return s


def render_tmk(zone: int, section: int, plat=UNSPECIFIED, parcel=UNSPECIFIED) -> str:
    if plat is UNSPECIFIED:
        return f"{zone}{section}"
    if parcel is UNSPECIFIED:
        return f"{zone}{section}{pad3(plat)}"
    return f"{zone}{section}{pad3(plat)}{pad3(parcel)}{TMK_SUFFIX}"


def build_tmk(zone, section, plat=UNSPECIFIED, parcel=UNSPECIFIED) -> TmkQuery:
    """
    Validate the four TMK fields and decide the query mode.
      - plat unspecified   -> range over zone+section (parcel ignored)
      - parcel unspecified -> range over zone+section+plat
      - otherwise          -> exact TMK with the "0000" suffix
    """
    z = validate_field("zone", zone)
    s = validate_field("section", section)
    p = validate_field("plat", plat, allow_unspecified=True)
    if p is UNSPECIFIED:
        pa = UNSPECIFIED
    else:
        pa = validate_field("parcel", parcel, allow_unspecified=True)

    return TmkQuery(
        zone=z,
        section=s,
        plat=p,
        parcel=pa,
        tmk=render_tmk(z, s, p, pa),
    )


def parse_tmk(tmk: str) -> TmkQuery:
    """Parse a full 12-digit TMK ("390010010000" or "3-9-001-001-0000")."""
    raw = (tmk or "").strip()
    if "-" in raw and not _TMK_DASHED_RE.match(raw):
        raise InvalidInputError(f"Malformed TMK: {tmk!r}")
    d = only_digits(raw)
    if len(d) == _TMK_DIGITS - len(TMK_SUFFIX):
        d += TMK_SUFFIX
    if len(d) != _TMK_DIGITS or not d.endswith(TMK_SUFFIX):
        raise InvalidInputError(f"TMK must be {_TMK_DIGITS} digits ending in {TMK_SUFFIX}: {tmk!r}")
    return build_tmk(int(d[0]), int(d[1]), int(d[2:5]), int(d[5:8]))


def dashed_tmk(tmk: str) -> str:
    """Return Z-S-PPP-PPP-0000 for display, or '' if not a full TMK."""
    d = only_digits(tmk)
    if len(d) != _TMK_DIGITS:
        return ""
    return f"{d[0]}-{d[1]}-{d[2:5]}-{d[5:8]}-{d[8:12]}"
