"""
Machine Readable Zone (MRZ) parsing utilities.

Implements field extraction and check digit validation according to ICAO
Doc 9303 Part 3, with layouts from Parts 4 to 7.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date

from icao_mrz.config import MRZSettings, get_settings
from icao_mrz.exceptions import MRZParseException
from icao_mrz.models.mrz_record import MRZRecord
from icao_mrz.models.mrz_types import DateKind, MRZDate, MRZFormat, MRZRange, Sex
from icao_mrz.utils.mrz_formats import (
    MRZLayout,
    check_dimensions,
    detect_format,
    normalize_mrz,
    select_layout,
    split_rows,
)
from icao_mrz.utils.mrz_validators import (
    get_document_number_corrector,
    get_document_number_validator,
)

logger = logging.getLogger(__name__)

FILLER = "<"
VALID_CHARACTERS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789<")


class MRZDateNormalizer:
    """Decode YYMMDD values with century inference."""

    @classmethod
    def normalize_date(
        cls,
        date_str: str,
        kind: DateKind,
        today: date | None = None,
        birth_year_tolerance: int = 0,
        expiry_year_lookback: int = 50,
    ) -> MRZDate:
        """
        Normalize a YYMMDD string.

        Never raises on bad content; values that are not digits or not a
        real calendar date come back with ``is_valid=False``.

        Args:
            date_str: Six characters read from the MRZ
            kind: Birth dates resolve to the past, expiry dates to the present or future
            today: Reference date for century inference
            birth_year_tolerance: Years past the current year a birth date may land on
            expiry_year_lookback: Years before the current year an expiry date may land on

        Returns:
            MRZDate with the resolved year, month and day
        """
        if len(date_str) != 6 or not date_str.isdigit():
            return MRZDate(mrz=date_str, is_valid=False)

        year_2digit = int(date_str[:2])
        month = int(date_str[2:4])
        day = int(date_str[4:6])

        current_year = (today or date.today()).year
        full_year = cls._infer_century(
            year_2digit, kind, current_year, birth_year_tolerance, expiry_year_lookback
        )

        try:
            date(full_year, month, day)
        except ValueError:
            logger.debug("Not a calendar date: %s", date_str)
            return MRZDate(mrz=date_str, year=full_year, month=month, day=day, is_valid=False)

        return MRZDate(mrz=date_str, year=full_year, month=month, day=day, is_valid=True)

    @staticmethod
    def _infer_century(
        year_2digit: int,
        kind: DateKind,
        current_year: int,
        birth_year_tolerance: int,
        expiry_year_lookback: int,
    ) -> int:
        if kind is DateKind.BIRTH:
            # Latest candidate not after the current year (plus tolerance)
            limit = current_year + birth_year_tolerance
            candidates = [1900 + year_2digit, 2000 + year_2digit]
            eligible = [year for year in candidates if year <= limit]
            return max(eligible) if eligible else candidates[0]

        # Earliest candidate inside the lookback window, so expiries lean to the future
        floor = current_year - expiry_year_lookback
        candidates = [1900 + year_2digit, 2000 + year_2digit, 2100 + year_2digit]
        return min(year for year in candidates if year >= floor)


class MRZParser:
    """Positional reader over the rows of one MRZ."""

    WEIGHTS = (7, 3, 1)

    def __init__(
        self,
        mrz: str,
        mrz_format: MRZFormat | None = None,
        settings: MRZSettings | None = None,
        today: date | None = None,
    ) -> None:
        self.mrz = mrz
        self.rows = split_rows(mrz)
        self.mrz_format = mrz_format
        self.settings = settings or get_settings()
        self.today = today

    # Grid access

    def raw_value(self, *ranges: MRZRange) -> str:
        """
        Return the characters of the given ranges, concatenated in order.

        Raises:
            MRZParseException: if a row does not exist or is shorter than the range
        """
        parts = []
        for mrz_range in ranges:
            if mrz_range.row >= len(self.rows):
                msg = f"Row {mrz_range.row} does not exist"
                raise MRZParseException(msg, self.mrz, mrz_range, self.mrz_format)
            row = self.rows[mrz_range.row]
            if len(row) < mrz_range.col_to:
                msg = f"Row {mrz_range.row} has only {len(row)} characters"
                raise MRZParseException(msg, self.mrz, mrz_range, self.mrz_format)
            parts.append(row[mrz_range.col_from : mrz_range.col_to])
        return "".join(parts)

    def check_valid_characters(self, mrz_range: MRZRange) -> None:
        """Raise on the first character outside ``[A-Z0-9<]``."""
        value = self.raw_value(mrz_range)
        for offset, char in enumerate(value):
            if char not in VALID_CHARACTERS:
                column = mrz_range.col_from + offset
                msg = f"Invalid character '{char}'"
                raise MRZParseException(
                    msg, self.mrz, MRZRange(column, column + 1, mrz_range.row), self.mrz_format
                )

    # Field decoding

    def parse_string(self, mrz_range: MRZRange) -> str:
        """Read a field, dropping trailing fillers; leading and inner characters are kept."""
        self.check_valid_characters(mrz_range)
        value = self.raw_value(mrz_range)
        return value.replace(FILLER, " ").rstrip(" ").replace(" ", FILLER)

    def parse_name(self, mrz_range: MRZRange) -> tuple[str, str]:
        """
        Read a name field.

        Returns:
            Tuple of (surname, given_names); ``<`` inside each part becomes a space
        """
        self.check_valid_characters(mrz_range)
        value = self.raw_value(mrz_range).rstrip(FILLER)
        names = value.split("<<", 1)
        surname = names[0].replace(FILLER, " ")
        given_names = names[1].replace(FILLER, " ") if len(names) > 1 else ""
        return surname, given_names

    def parse_date(self, mrz_range: MRZRange, kind: DateKind = DateKind.BIRTH) -> MRZDate:
        """
        Read a YYMMDD field. Bad date content yields an invalid MRZDate rather than an error.

        Raises:
            MRZParseException: if the range is not 6 columns wide or lies outside the text
        """
        if mrz_range.length != 6:
            msg = f"Date range must be 6 characters, got {mrz_range.length}"
            raise MRZParseException(msg, self.mrz, mrz_range, self.mrz_format)
        return MRZDateNormalizer.normalize_date(
            self.raw_value(mrz_range),
            kind,
            today=self.today,
            birth_year_tolerance=self.settings.birth_year_tolerance,
            expiry_year_lookback=self.settings.expiry_year_lookback,
        )

    def parse_sex(self, col: int, row: int) -> Sex:
        return Sex.from_mrz(self.raw_value(MRZRange(col, col + 1, row)))

    # Check digits

    @staticmethod
    def char_value(char: str) -> int:
        """Numeric value of an MRZ character: digits as-is, A=10 ... Z=35, filler 0."""
        if char.isdigit():
            return int(char)
        upper = char.upper()
        if "A" <= upper <= "Z":
            return ord(upper) - ord("A") + 10
        return 0

    @classmethod
    def compute_check_digit(cls, data: str) -> int:
        """
        Calculate the check digit as per ICAO Doc 9303 Part 3.

        Args:
            data: String to calculate the check digit for

        Returns:
            Check digit value 0-9
        """
        total = 0
        for i, char in enumerate(data):
            total += cls.char_value(char) * cls.WEIGHTS[i % 3]
        return total % 10

    @classmethod
    def compute_check_digit_char(cls, data: str) -> str:
        """Check digit of ``data`` as the character printed in the MRZ."""
        return str(cls.compute_check_digit(data))

    def check_digit(self, col: int, row: int, data: MRZRange | str, field_label: str) -> bool:
        """
        Compare the check digit printed at ``(col, row)`` with the one computed from ``data``.

        A filler at the check position reads as 0. A mismatch is reported as
        ``False``; it is content, not a structural error.

        Args:
            col: Column of the printed check digit
            row: Row of the printed check digit
            data: Range to read the checked data from, or the data itself
            field_label: Name used in log messages
        """
        if isinstance(data, MRZRange):
            data = self.raw_value(data)
        expected = self.compute_check_digit_char(data)
        printed = self.raw_value(MRZRange(col, col + 1, row))
        if printed == FILLER:
            printed = "0"
        if expected != printed:
            logger.info(
                "Check digit verification failed for %s: expected %s but got %s",
                field_label,
                expected,
                printed,
            )
            return False
        return True

    # Rendering helpers used by the serializer

    @staticmethod
    def deaccent(value: str) -> str:
        """Strip diacritics, e.g. 'Müller' -> 'Muller'."""
        decomposed = unicodedata.normalize("NFD", value)
        return "".join(char for char in decomposed if not unicodedata.combining(char))

    @classmethod
    def to_mrz(cls, value: str | None, length: int) -> str:
        """
        Format a value as a fixed-width MRZ field.

        Upper-cases, turns spaces and other non-MRZ characters into fillers,
        truncates values longer than ``length`` and pads shorter ones.
        """
        cleaned = cls.deaccent(value or "").upper().replace(" ", FILLER)
        cleaned = re.sub(r"[^A-Z0-9<]", FILLER, cleaned)
        return cleaned[:length].ljust(length, FILLER)

    @classmethod
    def name_to_mrz(cls, surname: str, given_names: str, length: int) -> str:
        """Format the name field: surname, ``<<``, given names, padded to ``length``."""
        name = (surname or "").replace(" ", FILLER)
        if given_names:
            name += "<<" + given_names.replace(" ", FILLER)
        return cls.to_mrz(name, length)

    # Whole-record parsing

    @classmethod
    def parse_mrz(
        cls,
        mrz: str,
        mrz_format: MRZFormat | None = None,
        settings: MRZSettings | None = None,
        today: date | None = None,
    ) -> MRZRecord:
        """
        Parse MRZ text into a record.

        Args:
            mrz: MRZ text, rows separated by line breaks (or one unbroken line)
            mrz_format: Expected format; detected from the shape when omitted
            settings: Century and formatting settings
            today: Reference date for century inference

        Returns:
            MRZRecord with one validity flag per checked field

        Raises:
            MRZParseException: on structural errors (dimensions, invalid characters)
        """
        normalized = normalize_mrz(mrz)
        rows = split_rows(normalized)
        text = "\n".join(rows)

        try:
            detected = mrz_format or detect_format(rows, text)
            check_dimensions(rows, detected, text)
        except MRZParseException as e:
            logger.warning("Rejected MRZ: %s", e, extra=e.log_context())
            raise

        parser = cls(text, detected, settings=settings, today=today)
        layout = select_layout(detected, rows)
        try:
            return parser._build_record(layout)
        except MRZParseException as e:
            logger.warning("Rejected MRZ: %s", e, extra=e.log_context())
            raise

    def _build_record(self, layout: MRZLayout) -> MRZRecord:
        fields = layout.fields
        checks = layout.check_digits

        self.check_valid_characters(fields["code"])
        code = self.raw_value(fields["code"])
        surname, given_names = self.parse_name(fields["name"])

        document_number = self.parse_string(fields["document_number"])
        document_number_mrz = None
        corrector = get_document_number_corrector(layout.variant)
        if corrector is not None:
            document_number_mrz = document_number
            document_number = corrector(document_number)
        validator = get_document_number_validator(layout.variant)
        if validator is not None:
            valid_document_number = validator(document_number)
        else:
            col, row = checks["document_number"]
            valid_document_number = self.check_digit(
                col, row, fields["document_number"], "document number"
            )

        date_of_birth = self.parse_date(fields["date_of_birth"], DateKind.BIRTH)
        col, row = checks["date_of_birth"]
        valid_date_of_birth = (
            self.check_digit(col, row, fields["date_of_birth"], "date of birth")
            and date_of_birth.is_valid
        )

        expiration_date = self.parse_date(fields["expiration_date"], DateKind.EXPIRY)
        col, row = checks["expiration_date"]
        valid_expiration_date = (
            self.check_digit(col, row, fields["expiration_date"], "expiration date")
            and expiration_date.is_valid
        )

        personal_number = None
        valid_personal_number = None
        if layout.has_field("personal_number"):
            personal_number = self.parse_string(fields["personal_number"])
            if "personal_number" in checks:
                col, row = checks["personal_number"]
                # An empty personal number may carry a filler instead of a digit
                valid_personal_number = self.check_digit(
                    col, row, fields["personal_number"], "personal number"
                )

        valid_composite = None
        if layout.composite_check is not None:
            col, row = layout.composite_check
            valid_composite = self.check_digit(
                col, row, self.raw_value(*layout.composite_ranges), "composite"
            )

        optional2 = None
        if layout.has_field("optional2"):
            optional2 = self.parse_string(fields["optional2"])

        return MRZRecord(
            mrz_format=layout.mrz_format,
            variant=layout.variant,
            code=code.rstrip(FILLER),
            code1=code[0],
            code2=code[1],
            issuing_country=self.parse_string(fields["issuing_country"]),
            document_number=document_number,
            document_number_mrz=document_number_mrz,
            surname=surname,
            given_names=given_names,
            nationality=self.parse_string(fields["nationality"]),
            date_of_birth=date_of_birth,
            sex=self.parse_sex(fields["sex"].col_from, fields["sex"].row),
            expiration_date=expiration_date,
            optional=self.parse_string(fields["optional"]) if layout.has_field("optional") else "",
            optional2=optional2,
            personal_number=personal_number,
            valid_document_number=valid_document_number,
            valid_date_of_birth=valid_date_of_birth,
            valid_expiration_date=valid_expiration_date,
            valid_composite=valid_composite,
            valid_personal_number=valid_personal_number,
        )


def parse(
    mrz: str,
    mrz_format: MRZFormat | None = None,
    settings: MRZSettings | None = None,
    today: date | None = None,
) -> MRZRecord:
    """Parse MRZ text into an MRZRecord. See ``MRZParser.parse_mrz``."""
    return MRZParser.parse_mrz(mrz, mrz_format=mrz_format, settings=settings, today=today)


def compute_check_digit(data: str) -> int:
    return MRZParser.compute_check_digit(data)


def compute_check_digit_char(data: str) -> str:
    return MRZParser.compute_check_digit_char(data)
