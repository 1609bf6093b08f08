"""
MRZ layout tables and format dispatch.

Every document format has a generic field table; TD1 additionally has
issuing-country sub-variants (Portugal and France identity cards) chosen by
the first five characters of the first row. Selection is total: any input
with the right dimensions resolves to exactly one layout.

Layout reference (ICAO Doc 9303 Parts 4-7):

TD1 (3 x 30):
    Row 0: code(2) issuing state(3) document number(9) check(1) optional(15)
    Row 1: birth(6) check(1) sex(1) expiry(6) check(1) nationality(3)
           optional(11) composite check(1)
    Row 2: name(30)
TD2 / MRV-B (2 x 36) and TD3 / MRV-A (2 x 44):
    Row 0: code(2) issuing state(3) name
    Row 1: document number(9) check(1) nationality(3) birth(6) check(1)
           sex(1) expiry(6) check(1) optional / personal number ...
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from icao_mrz.exceptions import MRZParseException
from icao_mrz.models.mrz_types import MRZFormat, MRZRange, MRZVariant

logger = logging.getLogger(__name__)

# Total lengths of unbroken single-line input, checked in this order
_SINGLE_LINE_WIDTHS = {
    MRZFormat.TD1.total_length: MRZFormat.TD1.columns,
    MRZFormat.TD2.total_length: MRZFormat.TD2.columns,
    MRZFormat.TD3.total_length: MRZFormat.TD3.columns,
}


@dataclass(frozen=True)
class MRZLayout:
    """Field positions of one format sub-variant.

    ``check_digits`` maps a field name to the ``(column, row)`` of the check
    digit printed for it. ``views`` are fields read from the same columns as
    another field; they are parsed but never written back.
    """

    mrz_format: MRZFormat
    variant: MRZVariant
    fields: Mapping[str, MRZRange]
    check_digits: Mapping[str, tuple[int, int]] = field(default_factory=dict)
    composite_ranges: tuple[MRZRange, ...] = ()
    composite_check: tuple[int, int] | None = None
    views: frozenset[str] = frozenset()

    def has_field(self, name: str) -> bool:
        return name in self.fields


def _freeze(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


def _two_line_layout(
    mrz_format: MRZFormat,
    tail_field: str,
    tail_check: bool,
    composite: bool,
) -> MRZLayout:
    """Build the shared two-row layout used by TD2, TD3 and both visa types."""
    width = mrz_format.columns
    tail_end = width
    if composite:
        tail_end -= 1
    if tail_check:
        tail_end -= 1

    fields = {
        "code": MRZRange(0, 2, 0),
        "issuing_country": MRZRange(2, 5, 0),
        "name": MRZRange(5, width, 0),
        "document_number": MRZRange(0, 9, 1),
        "nationality": MRZRange(10, 13, 1),
        "date_of_birth": MRZRange(13, 19, 1),
        "sex": MRZRange(20, 21, 1),
        "expiration_date": MRZRange(21, 27, 1),
        tail_field: MRZRange(28, tail_end, 1),
    }
    check_digits = {
        "document_number": (9, 1),
        "date_of_birth": (19, 1),
        "expiration_date": (27, 1),
    }
    if tail_check:
        check_digits[tail_field] = (tail_end, 1)

    composite_ranges: tuple[MRZRange, ...] = ()
    composite_check = None
    if composite:
        composite_ranges = (
            MRZRange(0, 10, 1),
            MRZRange(13, 20, 1),
            MRZRange(21, width - 1, 1),
        )
        composite_check = (width - 1, 1)

    return MRZLayout(
        mrz_format=mrz_format,
        variant=MRZVariant.GENERIC,
        fields=_freeze(fields),
        check_digits=_freeze(check_digits),
        composite_ranges=composite_ranges,
        composite_check=composite_check,
    )


_TD1_FIELDS = {
    "code": MRZRange(0, 2, 0),
    "issuing_country": MRZRange(2, 5, 0),
    "document_number": MRZRange(5, 14, 0),
    "optional": MRZRange(15, 30, 0),
    # For some issuers the first nine optional characters carry a personal number
    "personal_number": MRZRange(15, 24, 0),
    "date_of_birth": MRZRange(0, 6, 1),
    "sex": MRZRange(7, 8, 1),
    "expiration_date": MRZRange(8, 14, 1),
    "nationality": MRZRange(15, 18, 1),
    "optional2": MRZRange(18, 29, 1),
    "name": MRZRange(0, 30, 2),
}

_TD1_CHECK_DIGITS = {
    "document_number": (14, 0),
    "date_of_birth": (6, 1),
    "expiration_date": (14, 1),
}

# Order matters: the composite digit is computed over this exact concatenation
_TD1_COMPOSITE = (
    MRZRange(5, 30, 0),
    MRZRange(0, 7, 1),
    MRZRange(8, 15, 1),
    MRZRange(18, 29, 1),
)

TD1_GENERIC = MRZLayout(
    mrz_format=MRZFormat.TD1,
    variant=MRZVariant.GENERIC,
    fields=_freeze(dict(_TD1_FIELDS)),
    check_digits=_freeze(dict(_TD1_CHECK_DIGITS)),
    composite_ranges=_TD1_COMPOSITE,
    composite_check=(29, 1),
    views=frozenset({"personal_number"}),
)

# Portuguese citizen cards print a 12 character number (9 digits, 2 letters,
# 1 digit) over columns 5-17 with no separate check digit for it.
_PORTUGAL_FIELDS = dict(_TD1_FIELDS)
_PORTUGAL_FIELDS["document_number"] = MRZRange(5, 18, 0)
_PORTUGAL_FIELDS["optional"] = MRZRange(18, 30, 0)
del _PORTUGAL_FIELDS["personal_number"]
_PORTUGAL_CHECK_DIGITS = dict(_TD1_CHECK_DIGITS)
del _PORTUGAL_CHECK_DIGITS["document_number"]

TD1_PORTUGAL = MRZLayout(
    mrz_format=MRZFormat.TD1,
    variant=MRZVariant.PORTUGAL,
    fields=_freeze(_PORTUGAL_FIELDS),
    check_digits=_freeze(_PORTUGAL_CHECK_DIGITS),
    composite_ranges=_TD1_COMPOSITE,
    composite_check=(29, 1),
)

TD1_FRANCE = MRZLayout(
    mrz_format=MRZFormat.TD1,
    variant=MRZVariant.FRANCE,
    fields=_freeze(dict(_TD1_FIELDS)),
    check_digits=_freeze(dict(_TD1_CHECK_DIGITS)),
    composite_ranges=_TD1_COMPOSITE,
    composite_check=(29, 1),
    views=frozenset({"personal_number"}),
)

TD2_GENERIC = _two_line_layout(MRZFormat.TD2, "optional", tail_check=False, composite=True)
TD3_GENERIC = _two_line_layout(MRZFormat.TD3, "personal_number", tail_check=True, composite=True)
MRV_A_GENERIC = _two_line_layout(MRZFormat.MRV_A, "optional", tail_check=False, composite=False)
MRV_B_GENERIC = _two_line_layout(MRZFormat.MRV_B, "optional", tail_check=False, composite=False)

LAYOUTS: Mapping[tuple[MRZFormat, MRZVariant], MRZLayout] = _freeze(
    {
        (layout.mrz_format, layout.variant): layout
        for layout in (
            TD1_GENERIC,
            TD1_PORTUGAL,
            TD1_FRANCE,
            TD2_GENERIC,
            TD3_GENERIC,
            MRV_A_GENERIC,
            MRV_B_GENERIC,
        )
    }
)

# Row 0 prefixes that select an issuing-country sub-variant
SUBVARIANT_PREFIXES: Mapping[MRZFormat, tuple[tuple[str, MRZVariant], ...]] = _freeze(
    {
        MRZFormat.TD1: (
            ("I<PRT", MRZVariant.PORTUGAL),
            ("IDFRA", MRZVariant.FRANCE),
        ),
    }
)


def get_layout(mrz_format: MRZFormat, variant: MRZVariant = MRZVariant.GENERIC) -> MRZLayout | None:
    """Look up a layout; ``None`` if the variant is not defined for the format."""
    return LAYOUTS.get((mrz_format, variant))


def select_variant(mrz_format: MRZFormat, first_row: str) -> MRZVariant:
    """Pick the sub-variant from the leading characters of the first row."""
    for prefix, variant in SUBVARIANT_PREFIXES.get(mrz_format, ()):
        if first_row.startswith(prefix):
            return variant
    return MRZVariant.GENERIC


def select_layout(mrz_format: MRZFormat, rows: list[str]) -> MRZLayout:
    """Select the field table for already dimension-checked rows."""
    variant = select_variant(mrz_format, rows[0] if rows else "")
    logger.debug("Selected %s layout variant %s", mrz_format.value, variant.value)
    return LAYOUTS[(mrz_format, variant)]


def normalize_mrz(mrz: str) -> str:
    """Unify line endings, drop surrounding whitespace and upper-case the text."""
    normalized = mrz.replace("\r\n", "\n").replace("\r", "\n").strip()
    rows = [row.rstrip(" \t") for row in normalized.split("\n")]
    return "\n".join(rows).upper()


def split_rows(mrz: str) -> list[str]:
    """Split normalized MRZ text into rows.

    A single unbroken line whose length equals a known format's total
    length is cut into rows of that format's width.
    """
    if not mrz:
        return []
    if "\n" in mrz:
        return mrz.split("\n")
    width = _SINGLE_LINE_WIDTHS.get(len(mrz))
    if width is None:
        return [mrz]
    return [mrz[i : i + width] for i in range(0, len(mrz), width)]


def detect_format(rows: list[str], mrz: str = "") -> MRZFormat:
    """Choose the document format from the row count and width.

    Raises:
        MRZParseException: if the input has fewer than two rows
    """
    if len(rows) >= 3:
        return MRZFormat.TD1

    if len(rows) == 2:
        first = rows[0]
        # Nearest of the three widths wins; a TD1 row means the third line is missing
        if len(first) <= (MRZFormat.TD1.columns + MRZFormat.TD2.columns) // 2:
            return MRZFormat.TD1
        if len(first) <= (MRZFormat.TD2.columns + MRZFormat.TD3.columns) // 2:
            return MRZFormat.MRV_B if first.startswith("V") else MRZFormat.TD2
        return MRZFormat.MRV_A if first.startswith("V") else MRZFormat.TD3

    width = len(rows[0]) if rows else 0
    raise MRZParseException(
        f"Unrecognized MRZ shape: {len(rows)} line(s) of {width} characters",
        mrz,
        MRZRange(0, max(width, 1), 0),
    )


def check_dimensions(rows: list[str], mrz_format: MRZFormat, mrz: str = "") -> None:
    """Verify the rows have exactly the format's line count and width.

    Raises:
        MRZParseException: pointing at the first missing, short, long or extra row
    """
    columns = mrz_format.columns
    for row in range(mrz_format.rows):
        if row >= len(rows):
            raise MRZParseException(
                f"{mrz_format.value} requires {mrz_format.rows} lines, got {len(rows)}",
                mrz,
                MRZRange(0, columns, row),
                mrz_format,
            )
        length = len(rows[row])
        if length < columns:
            raise MRZParseException(
                f"{mrz_format.value} line {row + 1} is too short ({length} < {columns})",
                mrz,
                MRZRange(length, columns, row),
                mrz_format,
            )
        if length > columns:
            raise MRZParseException(
                f"{mrz_format.value} line {row + 1} is too long ({length} > {columns})",
                mrz,
                MRZRange(columns, length, row),
                mrz_format,
            )

    if len(rows) > mrz_format.rows:
        extra = mrz_format.rows
        raise MRZParseException(
            f"{mrz_format.value} requires {mrz_format.rows} lines, got {len(rows)}",
            mrz,
            MRZRange(0, max(len(rows[extra]), 1), extra),
            mrz_format,
        )
