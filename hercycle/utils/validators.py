"""Custom validators: Sri Lankan NIC numbers.

Two formats are in circulation:

* old, ``YYDDDNNNNC``: two-digit year (19xx), three-digit day code, four
  serial digits and a trailing ``V`` or ``X``;
* new, ``YYYYDDDNNNNN``: four-digit year, three-digit day code, five digits.

The day code is the day of the year the holder was born, plus 500 for women.
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta

from hercycle.utils.errors import InvalidNICError

OLD_NIC_RE = re.compile(r"^\d{9}[VX]$")
NEW_NIC_RE = re.compile(r"^\d{12}$")
FEMALE_DAY_OFFSET = 500


@dataclass(frozen=True)
class NICInfo:
    nic: str
    gender: str
    date_of_birth: date


def normalize_nic(nic: str) -> str:
    return re.sub(r"[^0-9A-Z]", "", (nic or "").strip().upper())


def _date_from_day_of_year(year: int, day_of_year: int) -> date:
    max_days = 366 if calendar.isleap(year) else 365
    if day_of_year < 1 or day_of_year > max_days:
        raise InvalidNICError(f"Invalid day of year: {day_of_year}. Max is {max_days} for {year}")
    return date(year, 1, 1) + timedelta(days=day_of_year - 1)


def parse_nic(nic: str) -> NICInfo:
    """Decode gender and date of birth from a NIC, raising InvalidNICError."""
    value = normalize_nic(nic)

    if OLD_NIC_RE.match(value):
        year = 1900 + int(value[0:2])
        day_code = int(value[2:5])
    elif NEW_NIC_RE.match(value):
        year = int(value[0:4])
        day_code = int(value[4:7])
    else:
        raise InvalidNICError()

    if day_code > FEMALE_DAY_OFFSET:
        gender = "female"
        day_of_year = day_code - FEMALE_DAY_OFFSET
    else:
        gender = "male"
        day_of_year = day_code

    return NICInfo(nic=value, gender=gender, date_of_birth=_date_from_day_of_year(year, day_of_year))


def is_valid_nic(nic: str) -> bool:
    try:
        parse_nic(nic)
    except InvalidNICError:
        return False
    return True
