from __future__ import annotations

from datetime import date


# PUBLIC_INTERFACE
def calculate_age(birth_date: date, now: date) -> int:
    """
    Return the full age in years at `now` for someone born at `birth_date`.

    Works on the calendar fields (year, month, day) of both values exactly as
    given; `datetime` instances are accepted too and are not converted between
    timezones here. The result is negative when `birth_date` is after `now`.
    """
    age = now.year - birth_date.year
    # Birthday not reached yet this year
    if (now.month, now.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def decade_bucket(age: int) -> int:
    """Round an age down to the nearest multiple of 10 (45 -> 40)."""
    return (age // 10) * 10
