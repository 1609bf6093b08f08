from datetime import date

import pytest

from icao_mrz import MRZParseException, MRZParser, parse
from icao_mrz.models import MRZFormat, MRZRange, MRZVariant, Sex


def replace_at(mrz, row, col, value):
    rows = mrz.split("\n")
    rows[row] = rows[row][:col] + value + rows[row][col + len(value) :]
    return "\n".join(rows)


class TestTD3:
    def test_fields(self, td3_mrz, today):
        record = parse(td3_mrz, today=today)

        assert record.mrz_format is MRZFormat.TD3
        assert record.variant is MRZVariant.GENERIC
        assert record.code == "P"
        assert (record.code1, record.code2) == ("P", "<")
        assert record.issuing_country == "UTO"
        assert record.surname == "ERIKSSON"
        assert record.given_names == "ANNA MARIA"
        assert record.document_number == "L898902C3"
        assert record.nationality == "UTO"
        assert record.date_of_birth.to_date() == date(1974, 8, 12)
        assert record.sex is Sex.FEMALE
        assert record.expiration_date.to_date() == date(2012, 4, 15)
        assert record.personal_number == "ZE184226B"
        assert record.document_number_mrz is None
        assert record.optional == ""
        assert record.optional2 is None

    def test_all_checks_pass(self, td3_mrz, today):
        record = parse(td3_mrz, today=today)

        assert record.valid_document_number
        assert record.valid_date_of_birth
        assert record.valid_expiration_date
        assert record.valid_personal_number
        assert record.valid_composite
        assert record.is_valid
        assert record.failed_checks == []

    def test_empty_personal_number_with_filler_check(self, today):
        mrz = (
            "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\n"
            "L898902C36UTO7408122F1204159<<<<<<<<<<<<<<<8"
        )
        record = parse(mrz, today=today)

        assert record.personal_number == ""
        assert record.valid_personal_number
        assert record.valid_composite

    def test_bad_document_check_digit_is_a_flag(self, td3_mrz, today):
        record = parse(replace_at(td3_mrz, 1, 9, "5"), today=today)

        assert record.surname == "ERIKSSON"
        assert record.document_number == "L898902C3"
        assert record.valid_document_number is False
        assert record.valid_date_of_birth
        assert not record.is_valid
        assert "document_number" in record.failed_checks

    def test_impossible_date_is_a_flag(self, td3_mrz, today):
        # 741332 with its correct check digit 4
        record = parse(replace_at(td3_mrz, 1, 13, "7413324"), today=today)

        assert record.date_of_birth.mrz == "741332"
        assert record.date_of_birth.is_valid is False
        assert record.date_of_birth.to_date() is None
        assert record.valid_date_of_birth is False

    def test_unspecified_sex(self, td3_mrz, today):
        record = parse(replace_at(td3_mrz, 1, 20, "X"), today=today)

        assert record.sex is Sex.UNSPECIFIED
        assert record.is_valid


class TestTD1:
    def test_fields(self, td1_mrz, today):
        record = parse(td1_mrz, today=today)

        assert record.mrz_format is MRZFormat.TD1
        assert record.variant is MRZVariant.GENERIC
        assert record.code == "I"
        assert record.issuing_country == "UTO"
        assert record.document_number == "D23145890"
        assert record.surname == "ERIKSSON"
        assert record.given_names == "ANNA MARIA"
        assert record.date_of_birth.year == 1974
        assert record.expiration_date.year == 2012
        assert record.optional == ""
        assert record.optional2 == ""
        assert record.personal_number == ""

    def test_flags(self, td1_mrz, today):
        record = parse(td1_mrz, today=today)

        assert record.is_valid
        assert record.valid_composite
        assert record.valid_personal_number is None
        assert set(record.validity_flags) == {"document_number", "date_of_birth", "expiration_date", "composite"}

    def test_bad_composite(self, td1_mrz, today):
        record = parse(replace_at(td1_mrz, 1, 29, "5"), today=today)

        assert record.valid_composite is False
        assert record.failed_checks == ["composite"]


class TestTD2:
    def test_fields_and_flags(self, td2_mrz, today):
        record = parse(td2_mrz, today=today)

        assert record.mrz_format is MRZFormat.TD2
        assert record.document_number == "D23145890"
        assert record.surname == "ERIKSSON"
        assert record.given_names == "ANNA MARIA"
        assert record.optional == ""
        assert record.personal_number is None
        assert record.is_valid
        assert record.valid_composite


class TestVisas:
    def test_mrv_a(self, mrv_a_mrz, today):
        record = parse(mrv_a_mrz, today=today)

        assert record.mrz_format is MRZFormat.MRV_A
        assert record.code == "V"
        assert record.document_number == "L8988901C"
        assert record.nationality == "XXX"
        assert record.date_of_birth.year == 1940
        assert record.expiration_date.to_date() == date(1996, 12, 10)
        assert record.optional == "6ZE184226B"
        assert record.valid_composite is None
        assert record.is_valid

    def test_mrv_b(self, mrv_b_mrz, today):
        record = parse(mrv_b_mrz, today=today)

        assert record.mrz_format is MRZFormat.MRV_B
        assert record.document_number == "L8988901C"
        assert record.optional == ""
        assert record.valid_composite is None
        assert record.is_valid


class TestPortugal:
    def test_document_number_is_corrected_and_validated(self, portugal_mrz, today):
        record = parse(portugal_mrz, today=today)

        assert record.variant is MRZVariant.PORTUGAL
        assert record.document_number == "001234567ZZ5"
        assert record.document_number_mrz == "O0I234567ZZS"
        assert record.valid_document_number
        assert record.personal_number is None
        assert record.surname == "SILVA"
        assert record.given_names == "JOAO PEDRO"
        assert record.is_valid

    def test_malformed_number_fails_validation(self, portugal_mrz, today):
        # A digit where the second letter belongs is not corrected
        record = parse(replace_at(portugal_mrz, 0, 15, "1"), today=today)

        assert record.document_number == "001234567Z15"
        assert record.valid_document_number is False


class TestFrance:
    def test_document_number_uses_own_validator(self, france_mrz, today):
        record = parse(france_mrz, today=today)

        assert record.variant is MRZVariant.FRANCE
        assert record.document_number == "ABCD12367"
        assert record.valid_document_number
        assert record.sex is Sex.MALE
        assert record.surname == "MARTIN"
        assert record.given_names == "CLAIRE"
        assert record.expiration_date.year == 2030
        assert record.is_valid

    def test_generic_check_digit_is_not_consulted(self, france_mrz, today):
        record = parse(replace_at(france_mrz, 0, 14, "0"), today=today)

        assert record.valid_document_number
        # The column still feeds the composite digit
        assert record.valid_composite is False


class TestStructuralErrors:
    def test_invalid_character(self, td3_mrz, today):
        with pytest.raises(MRZParseException) as exc_info:
            parse(replace_at(td3_mrz, 0, 10, "*"), today=today)

        assert exc_info.value.range == MRZRange(10, 11, 0)
        assert exc_info.value.mrz_format is MRZFormat.TD3
        assert "Invalid character '*'" in exc_info.value.message

    def test_rejection_is_logged(self, today, caplog):
        with caplog.at_level("WARNING", logger="icao_mrz.utils.mrz_utils"), pytest.raises(MRZParseException):
            parse("HELLO", today=today)

        assert "Rejected MRZ" in caplog.text

    def test_raw_value_beyond_rows(self, today):
        parser = MRZParser("ABC", today=today)

        with pytest.raises(MRZParseException) as exc_info:
            parser.raw_value(MRZRange(0, 2, 1))
        assert exc_info.value.range == MRZRange(0, 2, 1)

        with pytest.raises(MRZParseException):
            parser.raw_value(MRZRange(0, 5, 0))

    def test_date_range_must_be_six_wide(self, today):
        parser = MRZParser("7408122", today=today)

        with pytest.raises(MRZParseException) as exc_info:
            parser.parse_date(MRZRange(0, 7, 0))

        assert exc_info.value.range == MRZRange(0, 7, 0)


class TestInputNormalization:
    def test_lower_case(self, td3_mrz, today):
        assert parse(td3_mrz.lower(), today=today) == parse(td3_mrz, today=today)

    def test_crlf_and_padding(self, td3_mrz, today):
        text = "  " + td3_mrz.replace("\n", "  \r\n") + "\r\n"
        assert parse(text, today=today) == parse(td3_mrz, today=today)

    @pytest.mark.parametrize("fixture", ["td1_mrz", "td2_mrz", "td3_mrz"])
    def test_single_unbroken_line(self, fixture, request, today):
        mrz = request.getfixturevalue(fixture)
        assert parse(mrz.replace("\n", ""), today=today) == parse(mrz, today=today)


class TestFieldDecoding:
    def test_parse_name_without_given_names(self, today):
        parser = MRZParser("NGUYEN<<<<<<<<", today=today)
        assert parser.parse_name(MRZRange(0, 14, 0)) == ("NGUYEN", "")

    def test_parse_name_keeps_inner_separators(self, today):
        parser = MRZParser("VAN<DER<BERG<<ANNA<<LISA<<<<", today=today)
        surname, given_names = parser.parse_name(MRZRange(0, 28, 0))

        assert surname == "VAN DER BERG"
        assert given_names == "ANNA  LISA"

    def test_parse_string_keeps_inner_fillers(self, today):
        parser = MRZParser("<AB<C<<<", today=today)
        assert parser.parse_string(MRZRange(0, 8, 0)) == "<AB<C"


def test_to_dict(td3_mrz, today):
    data = parse(td3_mrz, today=today).to_dict()

    assert data["mrzFormat"] == "TD3"
    assert data["documentNumber"] == "L898902C3"
    assert data["dateOfBirth"] == "1974-08-12"
    assert data["expirationDate"] == "2012-04-15"
    assert data["sex"] == "F"
    assert data["validComposite"] is True
    assert data["isValid"] is True
    assert "date_of_birth" not in data


def test_str_mentions_validity(td3_mrz, today):
    text = str(parse(td3_mrz, today=today))

    assert "TD3/GENERIC" in text
    assert "valid=True" in text
