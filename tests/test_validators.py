"""NIC parsing tests."""
from datetime import date

import pytest

from hercycle.utils.errors import InvalidNICError
from hercycle.utils.validators import is_valid_nic, normalize_nic, parse_nic


@pytest.mark.parametrize(
    "nic, gender, dob",
    [
        ("200419201396", "male", date(2004, 7, 10)),
        ("851234567V", "male", date(1985, 5, 3)),
        ("855234567V", "female", date(1985, 1, 23)),
        ("200006012345", "male", date(2000, 2, 29)),
        ("200086612345", "female", date(2000, 12, 31)),
        ("199900112345", "male", date(1999, 1, 1)),
    ],
)
def test_parse_nic(nic, gender, dob):
    info = parse_nic(nic)
    assert info.gender == gender
    assert info.date_of_birth == dob
    assert info.nic == nic


def test_old_nic_is_normalized():
    assert normalize_nic(" 851234567v ") == "851234567V"
    assert parse_nic("851234567x").nic == "851234567X"


@pytest.mark.parametrize(
    "nic",
    ["", "12345", "123456789A", "855234567F", "1234567890123", "ABCDEFGHIJKL", "199936612345", "199900012345", "19998671234V"],
)
def test_invalid_nic(nic):
    with pytest.raises(InvalidNICError) as exc:
        parse_nic(nic)
    assert exc.value.status_code == 400
    assert not is_valid_nic(nic)


def test_day_of_year_error_names_the_limit():
    with pytest.raises(InvalidNICError) as exc:
        parse_nic("199936612345")
    assert exc.value.detail == "Invalid day of year: 366. Max is 365 for 1999"
