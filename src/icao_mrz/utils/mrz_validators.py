"""
Issuing-country document number validators.

Some issuers print document numbers that do not carry a standard ICAO check
digit next to them. For those sub-variants the document-number validity
flag comes from a country-specific rule instead. Validators work on the
already extracted document number and never look at the MRZ text again.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from icao_mrz.models.mrz_types import MRZVariant

DocumentNumberValidator = Callable[[str], bool]
DocumentNumberCorrector = Callable[[str], str]

# Letters commonly printed or read where a digit belongs
NUMBER_CHAR_REPLACEMENTS = {
    "O": "0",
    "I": "1",
    "B": "8",
    "S": "5",
    "J": "3",
    "Z": "2",
}

# Indices that hold the two letters of a Portuguese document number
PROTECTED_INDICES = frozenset({9, 10})

PORTUGAL_ID_PATTERN = re.compile(r"^[0-9]{9}[A-Za-z]{2}[0-9]$")

FRANCE_ID_PATTERN = re.compile(r"^[A-Z0-9]{8}[0-9]$")
FRANCE_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
FRANCE_ID_WEIGHTS = (7, 3, 1, 7, 3, 1, 7, 3)


def replace_number_char(value: str | None) -> str | None:
    """
    Replace letters that stand in for digits in a numeric document number.

    ``O I B S J Z`` become ``0 1 8 5 3 2``; fillers and spaces are dropped.
    Characters at indices 9 and 10 are copied unchanged.

    Args:
        value: Document number as read from the MRZ

    Returns:
        Corrected document number, or None if ``value`` is None
    """
    if value is None:
        return None

    result = []
    for index, char in enumerate(value):
        if index in PROTECTED_INDICES:
            result.append(char)
        elif char in ("<", " "):
            continue
        else:
            result.append(NUMBER_CHAR_REPLACEMENTS.get(char, char))

    return "".join(result).replace(" ", "")


def is_valid_portugal_id_number(document_number: str) -> bool:
    """Check a Portuguese citizen card number: 9 digits, 2 letters, 1 digit."""
    trimmed = document_number.strip()
    if not trimmed:
        return False
    return PORTUGAL_ID_PATTERN.match(trimmed) is not None


def is_valid_france_id_number(document_number: str) -> bool:
    """
    Check a French identity card number.

    The number is 9 characters: 8 from ``[A-Z0-9]`` followed by a digit. The
    first 8 characters, valued by their index in ``0-9A-Z`` and weighted
    ``7 3 1 7 3 1 7 3``, must sum to a multiple of 10. The trailing digit is
    required to be a digit but is not compared against the sum.
    """
    if len(document_number) != 9 or not FRANCE_ID_PATTERN.match(document_number):
        return False

    total = sum(
        FRANCE_ID_ALPHABET.index(char) * weight
        for char, weight in zip(document_number[:8], FRANCE_ID_WEIGHTS)
    )
    return total % 10 == 0


# None means the standard ICAO check digit printed after the number applies
DOCUMENT_NUMBER_VALIDATORS: Mapping[MRZVariant, DocumentNumberValidator | None] = MappingProxyType(
    {
        MRZVariant.GENERIC: None,
        MRZVariant.PORTUGAL: is_valid_portugal_id_number,
        MRZVariant.FRANCE: is_valid_france_id_number,
    }
)

DOCUMENT_NUMBER_CORRECTORS: Mapping[MRZVariant, DocumentNumberCorrector] = MappingProxyType(
    {
        MRZVariant.PORTUGAL: replace_number_char,
    }
)


def get_document_number_validator(variant: MRZVariant) -> DocumentNumberValidator | None:
    return DOCUMENT_NUMBER_VALIDATORS.get(variant)


def get_document_number_corrector(variant: MRZVariant) -> DocumentNumberCorrector | None:
    return DOCUMENT_NUMBER_CORRECTORS.get(variant)
