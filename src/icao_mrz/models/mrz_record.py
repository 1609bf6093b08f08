"""
Parsed MRZ record.

The record is built in one pass by the parser and is immutable afterwards.
Every ``valid_*`` flag is derived from the MRZ text by a check-digit or
format validator; flags that do not apply to a format are ``None``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from icao_mrz.models.mrz_types import MRZDate, MRZFormat, MRZVariant, Sex


def camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class MRZRecord(BaseModel):
    """Model for the content of a Machine Readable Zone."""

    mrz_format: MRZFormat
    variant: MRZVariant = MRZVariant.GENERIC

    code: str = Field(..., description="Document code, e.g. P, I, ID, V")
    code1: str = Field(..., description="First character of the document code")
    code2: str = Field(..., description="Second character of the document code")
    issuing_country: str = Field(..., description="3-letter issuing state or organization")
    document_number: str
    document_number_mrz: str | None = Field(
        default=None, description="Document number as printed, kept when a correction was applied"
    )
    surname: str
    given_names: str
    nationality: str = Field(..., description="3-letter nationality code")
    date_of_birth: MRZDate
    sex: Sex
    expiration_date: MRZDate

    optional: str = Field(default="", description="Optional data")
    optional2: str | None = Field(default=None, description="Second optional data field (TD1)")
    personal_number: str | None = Field(default=None, description="Personal number, when the format has one")

    valid_document_number: bool = False
    valid_date_of_birth: bool = False
    valid_expiration_date: bool = False
    valid_composite: bool | None = Field(
        default=None, description="Composite check digit result, None for formats without one"
    )
    valid_personal_number: bool | None = Field(
        default=None, description="Personal number check digit result (TD3)"
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @property
    def validity_flags(self) -> dict[str, bool]:
        """All validity flags that apply to this record's format."""
        flags = {
            "document_number": self.valid_document_number,
            "date_of_birth": self.valid_date_of_birth,
            "expiration_date": self.valid_expiration_date,
            "composite": self.valid_composite,
            "personal_number": self.valid_personal_number,
        }
        return {name: value for name, value in flags.items() if value is not None}

    @property
    def is_valid(self) -> bool:
        """Whether every check digit and format constraint held."""
        return all(self.validity_flags.values())

    @property
    def failed_checks(self) -> list[str]:
        return [name for name, value in self.validity_flags.items() if not value]

    def to_dict(self) -> dict[str, Any]:
        """Render the record with camelCase keys, dates as ISO strings where valid."""
        data = self.model_dump(mode="json")
        data["dateOfBirth"] = str(self.date_of_birth)
        data["expirationDate"] = str(self.expiration_date)
        data.pop("date_of_birth")
        data.pop("expiration_date")
        data["isValid"] = self.is_valid
        return {camel_case(k): v for k, v in data.items()}

    def __str__(self) -> str:
        return (
            f"MRZRecord({self.mrz_format.value}/{self.variant.value}, code={self.code}, "
            f"issuing_country={self.issuing_country}, document_number={self.document_number}, "
            f"surname={self.surname}, given_names={self.given_names}, "
            f"date_of_birth={self.date_of_birth}, sex={self.sex.value}, "
            f"expiration_date={self.expiration_date}, nationality={self.nationality}, "
            f"valid={self.is_valid})"
        )
