"""
MRZ generation from parsed records.

The serializer writes each field into the columns given by the same layout
table the parser reads from, then recomputes every check digit from the
freshly written text.
"""

from __future__ import annotations

import logging

from icao_mrz.config import MRZSettings, get_settings
from icao_mrz.exceptions import MRZSerializationError
from icao_mrz.models.mrz_record import MRZRecord
from icao_mrz.models.mrz_types import MRZRange
from icao_mrz.utils.mrz_formats import MRZLayout, get_layout
from icao_mrz.utils.mrz_utils import FILLER, MRZParser
from icao_mrz.utils.mrz_validators import get_document_number_corrector

logger = logging.getLogger(__name__)


class MRZFormatter:
    """Formatter for Machine Readable Zone (MRZ) text according to ICAO Doc 9303."""

    @staticmethod
    def _write(grid: list[list[str]], mrz_range: MRZRange, text: str) -> None:
        grid[mrz_range.row][mrz_range.col_from : mrz_range.col_to] = list(text)

    @staticmethod
    def _read(grid: list[list[str]], *ranges: MRZRange) -> str:
        return "".join(
            "".join(grid[r.row][r.col_from : r.col_to]) for r in ranges
        )

    @staticmethod
    def _document_number(record: MRZRecord) -> str:
        """Printed form of the document number.

        A corrected number cannot be written back as is: the corrector would
        run again on the next parse with its protected indices shifted. The
        printed text is used while it still corrects to the record's number.
        """
        corrector = get_document_number_corrector(record.variant)
        printed = record.document_number_mrz
        if corrector is not None and printed is not None and corrector(printed) == record.document_number:
            return printed
        return record.document_number

    @classmethod
    def _field_text(cls, record: MRZRecord, name: str, mrz_range: MRZRange) -> str:
        if name == "document_number":
            return MRZParser.to_mrz(cls._document_number(record), mrz_range.length)
        if name == "name":
            return MRZParser.name_to_mrz(record.surname, record.given_names, mrz_range.length)
        if name == "sex":
            return record.sex.value
        if name in ("date_of_birth", "expiration_date"):
            return MRZParser.to_mrz(getattr(record, name).to_mrz(), mrz_range.length)
        return MRZParser.to_mrz(getattr(record, name), mrz_range.length)

    @classmethod
    def render_rows(cls, record: MRZRecord, layout: MRZLayout) -> list[str]:
        """Render a record into rows of exactly the layout's width."""
        mrz_format = layout.mrz_format
        grid = [[FILLER] * mrz_format.columns for _ in range(mrz_format.rows)]

        for name, mrz_range in layout.fields.items():
            if name in layout.views:
                continue
            cls._write(grid, mrz_range, cls._field_text(record, name, mrz_range))

        for name, (col, row) in layout.check_digits.items():
            data = cls._read(grid, layout.fields[name])
            grid[row][col] = MRZParser.compute_check_digit_char(data)

        # Composite ranges cover the check digits above, so this comes last
        if layout.composite_check is not None:
            col, row = layout.composite_check
            data = cls._read(grid, *layout.composite_ranges)
            grid[row][col] = MRZParser.compute_check_digit_char(data)

        return ["".join(row) for row in grid]

    @classmethod
    def serialize(cls, record: MRZRecord, settings: MRZSettings | None = None) -> str:
        """
        Generate MRZ text for a record.

        Args:
            record: Record to render
            settings: Supplies the line separator

        Returns:
            MRZ rows joined by the configured separator

        Raises:
            MRZSerializationError: if the record's variant is not defined for its format
        """
        layout = get_layout(record.mrz_format, record.variant)
        if layout is None:
            msg = f"variant {record.variant.value} is not defined for {record.mrz_format.value}"
            raise MRZSerializationError(msg)

        separator = (settings or get_settings()).line_separator
        rows = cls.render_rows(record, layout)
        logger.debug("Serialized %s record for %s", layout.mrz_format.value, record.issuing_country)
        return separator.join(rows)


def serialize(record: MRZRecord, settings: MRZSettings | None = None) -> str:
    """Render an MRZRecord as MRZ text. See ``MRZFormatter.serialize``."""
    return MRZFormatter.serialize(record, settings=settings)
