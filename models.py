"""
Data models for TMK queries and extracted parcel records.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


class _Unspecified:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSPECIFIED"

    def __bool__(self) -> bool:
        return False


# plat/parcel left out of a query
UNSPECIFIED = _Unspecified()

Field = Union[int, _Unspecified]


@dataclass(frozen=True)
class TmkQuery:
    """A validated request: one exact parcel, or every parcel under a prefix"""
    zone: int
    section: int
    plat: Field = UNSPECIFIED
    parcel: Field = UNSPECIFIED
    tmk: str = ""  # rendered form (exact TMK or range prefix)

    @property
    def is_range(self) -> bool:
        return self.plat is UNSPECIFIED or self.parcel is UNSPECIFIED

    @property
    def prefix_fields(self) -> int:
        if self.plat is UNSPECIFIED:
            return 2
        if self.parcel is UNSPECIFIED:
            return 3
        return 4


@dataclass(frozen=True)
class BackTaxSummary:
    years: str = ""
    total: str = "$0.00"


@dataclass(frozen=True)
class ExtractedRecord:
    """Fields carved out of one qPublic parcel page"""
    tmk: str
    owner_names: Tuple[str, ...] = field(default_factory=tuple)
    mailing_address: Optional[str] = None  # None = not found on the page
    back_taxes: BackTaxSummary = field(default_factory=BackTaxSummary)

    @property
    def names(self) -> str:
        return " & ".join(self.owner_names)

    def as_row(self) -> Tuple[str, str, str, str, str]:
        return (
            self.tmk,
            self.names,
            self.mailing_address or "",
            self.back_taxes.years,
            self.back_taxes.total,
        )

    def as_dict(self) -> dict:
        return {
            "tmk": self.tmk,
            "owner_names": list(self.owner_names),
            "names": self.names,
            "mailing_address": self.mailing_address,
            "back_tax_years": self.back_taxes.years,
            "back_tax_total": self.back_taxes.total,
        }
