"""Data models for MRZ records."""

from icao_mrz.models.mrz_record import MRZRecord
from icao_mrz.models.mrz_types import DateKind, MRZDate, MRZFormat, MRZRange, MRZVariant, Sex

__all__ = [
    "DateKind",
    "MRZDate",
    "MRZFormat",
    "MRZRange",
    "MRZRecord",
    "MRZVariant",
    "Sex",
]
