"""
ICAO 9303 Machine Readable Zone parsing and generation.

Usage:
    from icao_mrz import parse, serialize

    record = parse(mrz_text)
    if not record.is_valid:
        print(record.failed_checks)
    text = serialize(record)
"""

from icao_mrz.exceptions import MRZException, MRZParseException, MRZSerializationError
from icao_mrz.models import DateKind, MRZDate, MRZFormat, MRZRange, MRZRecord, MRZVariant, Sex
from icao_mrz.utils.mrz_serializer import MRZFormatter, serialize
from icao_mrz.utils.mrz_utils import MRZParser, compute_check_digit, compute_check_digit_char, parse

__version__ = "0.1.0"

__all__ = [
    "DateKind",
    "MRZDate",
    "MRZException",
    "MRZFormat",
    "MRZFormatter",
    "MRZParseException",
    "MRZParser",
    "MRZRange",
    "MRZRecord",
    "MRZSerializationError",
    "MRZVariant",
    "Sex",
    "compute_check_digit",
    "compute_check_digit_char",
    "parse",
    "serialize",
]
