"""
Core MRZ value types.

Positions, document formats, sex codes and dates as they appear in a
Machine Readable Zone per ICAO Doc 9303.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class MRZRange:
    """Half-open column span ``[col_from, col_to)`` on a single MRZ row."""

    col_from: int
    col_to: int
    row: int

    def __post_init__(self) -> None:
        if self.col_from < 0 or self.row < 0:
            msg = f"Negative MRZ position: column {self.col_from}, row {self.row}"
            raise ValueError(msg)
        if self.col_from >= self.col_to:
            msg = f"Empty MRZ range: column {self.col_from} is not before {self.col_to}"
            raise ValueError(msg)

    @property
    def length(self) -> int:
        return self.col_to - self.col_from

    def __str__(self) -> str:
        return f"row {self.row}, columns {self.col_from}-{self.col_to}"


class MRZFormat(str, Enum):
    """MRZ layouts with their fixed dimensions."""

    TD1 = "TD1"  # 3 lines, 30 chars each (ID cards)
    TD2 = "TD2"  # 2 lines, 36 chars each (ID cards)
    TD3 = "TD3"  # 2 lines, 44 chars each (passports)
    MRV_A = "MRV_A"  # 2 lines, 44 chars each (full size visas)
    MRV_B = "MRV_B"  # 2 lines, 36 chars each (reduced size visas)

    @property
    def rows(self) -> int:
        """Number of lines in this format."""
        return 3 if self is MRZFormat.TD1 else 2

    @property
    def columns(self) -> int:
        """Number of characters per line in this format."""
        return {"TD1": 30, "TD2": 36, "TD3": 44, "MRV_A": 44, "MRV_B": 36}[self.value]

    @property
    def total_length(self) -> int:
        """Total number of characters in this format."""
        return self.rows * self.columns

    @property
    def is_visa(self) -> bool:
        return self in (MRZFormat.MRV_A, MRZFormat.MRV_B)


class MRZVariant(str, Enum):
    """Issuing-country sub-variant of a format's field layout."""

    GENERIC = "GENERIC"
    PORTUGAL = "PORTUGAL"  # I<PRT citizen card
    FRANCE = "FRANCE"  # IDFRA identity card


class Sex(str, Enum):
    """Sex code of the holder."""

    MALE = "M"
    FEMALE = "F"
    UNSPECIFIED = "<"

    @classmethod
    def from_mrz(cls, char: str) -> Sex:
        if char == "M":
            return cls.MALE
        if char == "F":
            return cls.FEMALE
        # 'X' and the filler both mean unspecified
        return cls.UNSPECIFIED


class DateKind(str, Enum):
    """Which century policy applies when decoding a two-digit year."""

    BIRTH = "BIRTH"
    EXPIRY = "EXPIRY"


class MRZDate(BaseModel):
    """A YYMMDD date read from the MRZ."""

    mrz: str = Field(..., description="Raw six characters as printed")
    year: int | None = Field(default=None, description="Full year after century resolution")
    month: int | None = Field(default=None, description="Month (1-12)")
    day: int | None = Field(default=None, description="Day of month")
    is_valid: bool = Field(default=False, description="Whether the value is a real calendar date")

    model_config = {"frozen": True}

    @classmethod
    def from_date(cls, value: date) -> MRZDate:
        return cls(
            mrz=value.strftime("%y%m%d"),
            year=value.year,
            month=value.month,
            day=value.day,
            is_valid=True,
        )

    def to_date(self) -> date | None:
        """Return a ``datetime.date`` or ``None`` if the value is not a real date."""
        if not self.is_valid or self.year is None:
            return None
        return date(self.year, self.month, self.day)

    def to_mrz(self) -> str:
        return self.mrz

    def __str__(self) -> str:
        if self.is_valid:
            return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        return f"{self.mrz} (invalid)"
