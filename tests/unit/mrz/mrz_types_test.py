import pytest
from pydantic import ValidationError

from icao_mrz.models import MRZFormat, MRZRange, Sex


class TestMRZRange:
    def test_length(self):
        assert MRZRange(5, 14, 0).length == 9

    def test_str(self):
        assert str(MRZRange(5, 14, 1)) == "row 1, columns 5-14"

    @pytest.mark.parametrize(("col_from", "col_to", "row"), [(5, 5, 0), (6, 5, 0), (-1, 2, 0), (0, 2, -1)])
    def test_invalid_ranges_rejected(self, col_from, col_to, row):
        with pytest.raises(ValueError):
            MRZRange(col_from, col_to, row)

    def test_hashable_and_equal(self):
        assert MRZRange(0, 2, 0) == MRZRange(0, 2, 0)
        assert len({MRZRange(0, 2, 0), MRZRange(0, 2, 0)}) == 1


@pytest.mark.parametrize(
    ("mrz_format", "rows", "columns"),
    [
        (MRZFormat.TD1, 3, 30),
        (MRZFormat.TD2, 2, 36),
        (MRZFormat.TD3, 2, 44),
        (MRZFormat.MRV_A, 2, 44),
        (MRZFormat.MRV_B, 2, 36),
    ],
)
def test_format_dimensions(mrz_format, rows, columns):
    assert mrz_format.rows == rows
    assert mrz_format.columns == columns
    assert mrz_format.total_length == rows * columns


def test_visa_formats():
    assert MRZFormat.MRV_A.is_visa
    assert MRZFormat.MRV_B.is_visa
    assert not MRZFormat.TD3.is_visa


@pytest.mark.parametrize(
    ("char", "expected"),
    [("M", Sex.MALE), ("F", Sex.FEMALE), ("X", Sex.UNSPECIFIED), ("<", Sex.UNSPECIFIED)],
)
def test_sex_from_mrz(char, expected):
    assert Sex.from_mrz(char) is expected


def test_record_is_immutable(td3_mrz, today):
    from icao_mrz import parse

    record = parse(td3_mrz, today=today)
    with pytest.raises(ValidationError):
        record.surname = "SMITH"
