import datetime
import pytest

from st_onboarding.errors import InvalidSnapshotError
from st_onboarding.utils.converters import deserialize_state, serialize_state
from st_onboarding.utils.dates import (
    DateParts,
    age_from_iso,
    compute_age,
    days_in_month,
    format_nice_date,
    join_date_parts,
    parse_iso_date,
    split_iso_date,
)


class TestStateSerialization:
    """Tests for the JSON encoding of snapshots."""

    @pytest.mark.parametrize("data", [
        {"step": 2, "done": False, "data": {"firstName": "Ada"}, "touched": {"firstName": True}},
        {},
    ])
    def test_plain_json_roundtrip(self, data):
        assert deserialize_state(serialize_state(data)) == data

    def test_dates_are_written_as_iso_strings(self):
        data = {"dob": datetime.date(1990, 5, 4)}
        assert deserialize_state(serialize_state(data)) == {"dob": "1990-05-04"}

    def test_non_serializable_replaced_with_none(self):
        """Non-JSON-serializable values are dropped to None instead of crashing."""

        data = {"good": 42, "bad": lambda x: x, "also_bad": object()}
        result = deserialize_state(serialize_state(data))

        assert result == {"good": 42, "bad": None, "also_bad": None}

    def test_bytes_input_is_decoded(self):
        assert deserialize_state(b'{"step": 1}') == {"step": 1}

    @pytest.mark.parametrize("raw", ["", "{", "not json", None])
    def test_unparseable_input_raises(self, raw):
        with pytest.raises(InvalidSnapshotError):
            deserialize_state(raw)


class TestDates:

    def test_parse_iso_date(self):
        assert parse_iso_date("1990-05-04") == datetime.date(1990, 5, 4)
        assert parse_iso_date("1990-02-30") is None
        assert parse_iso_date("04/05/1990") is None
        assert parse_iso_date("") is None
        assert parse_iso_date(None) is None

    @pytest.mark.parametrize("born, today, age", [
        (datetime.date(2008, 10, 17), datetime.date(2026, 10, 17), 18),
        (datetime.date(2008, 10, 18), datetime.date(2026, 10, 17), 17),
        (datetime.date(2008, 11, 1), datetime.date(2026, 10, 17), 17),
        (datetime.date(2000, 2, 29), datetime.date(2018, 2, 28), 17),
        (datetime.date(2000, 2, 29), datetime.date(2018, 3, 1), 18),
    ])
    def test_compute_age(self, born, today, age):
        assert compute_age(born, today) == age

    def test_age_from_iso_treats_garbage_as_zero(self):
        assert age_from_iso("", datetime.date(2026, 1, 1)) == 0
        assert age_from_iso("yesterday", datetime.date(2026, 1, 1)) == 0

    def test_days_in_month(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28
        assert days_in_month(2023, 12) == 31

    def test_split_iso_date(self):
        assert split_iso_date("1990-05-04") == DateParts("1990", "05", "04")
        assert split_iso_date("1990-5-4") == DateParts()
        assert split_iso_date("") == DateParts()

    @pytest.mark.parametrize("parts, expected", [
        (("1990", "5", "4"), "1990-05-04"),
        (("2024", "02", "31"), "2024-02-29"),
        (("1990", "", "4"), ""),
        (("1990", "13", "4"), ""),
        (("1990", "5", "0"), ""),
        (("abcd", "5", "4"), ""),
    ])
    def test_join_date_parts(self, parts, expected):
        assert join_date_parts(*parts) == expected

    def test_format_nice_date(self):
        assert format_nice_date("1990-05-04") == "04 May 1990"
        assert format_nice_date("nope") == ""
