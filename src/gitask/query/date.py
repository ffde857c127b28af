# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum

from gitask.error import InvalidDate

_ABSOLUTE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MONTH_DAY = re.compile(r"^(\d{1,2})-(\d{1,2})$")
_DAY = re.compile(r"^(\d{1,2})$")

# pendulum numbers weekdays Monday=0 .. Sunday=6
WEEKDAYS: dict[str, int] = {
    "mon": 0,
    "monday": 0,
    "tue": 1,
    "tues": 1,
    "tuesday": 1,
    "wed": 2,
    "wednesday": 2,
    "thu": 3,
    "thur": 3,
    "thurs": 3,
    "thursday": 3,
    "fri": 4,
    "friday": 4,
    "sat": 5,
    "saturday": 5,
    "sun": 6,
    "sunday": 6,
}


def resolve(expression: str, now: pendulum.DateTime) -> pendulum.DateTime:
    """
    Resolve a date expression to local midnight of the day it names.

    Grammars are tried in order: YYYY-MM-DD, MM-DD, DD, the keywords
    today/tomorrow/yesterday, weekday names, next-<weekday> and
    this-<weekday>. Partial dates roll forward to their nearest future
    occurrence; today is never considered past.
    """
    value = expression.strip().lower()
    today = now.start_of("day")

    absolute = _ABSOLUTE.match(value)
    if absolute:
        resolved = _build(now, *map(int, absolute.groups()))
        if resolved is None:
            raise InvalidDate(expression)
        return resolved

    month_day = _MONTH_DAY.match(value)
    if month_day:
        month, day = map(int, month_day.groups())
        for year in (today.year, today.year + 1):
            candidate = _build(now, year, month, day)
            if candidate is not None and candidate >= today:
                return candidate
        # 02-29 outside a leap year pair, or an impossible date
        raise InvalidDate(expression)

    only_day = _DAY.match(value)
    if only_day:
        day = int(only_day.group(1))
        first_of_month = today.start_of("month")
        for offset in range(12):
            month_start = first_of_month.add(months=offset)
            candidate = _build(now, month_start.year, month_start.month, day)
            if candidate is not None and candidate >= today:
                return candidate
        raise InvalidDate(expression)

    match value:
        case "today":
            return today
        case "tomorrow":
            return today.add(days=1)
        case "yesterday":
            return today.subtract(days=1)

    if value in WEEKDAYS:
        return today.add(days=_days_until(today, WEEKDAYS[value]))

    if "-" in value:
        selector, weekday_name = value.split("-", 1)
        if weekday_name in WEEKDAYS:
            days_ahead = _days_until(today, WEEKDAYS[weekday_name])
            match selector:
                case "next":
                    return today.add(days=days_ahead + 7)
                case "this":
                    # A weekday already behind us in this week rolls to the next one
                    return today.add(days=days_ahead)

    raise InvalidDate(expression)


def _days_until(today: pendulum.DateTime, weekday: int) -> int:
    return (weekday - today.weekday()) % 7


def _build(
    now: pendulum.DateTime, year: int, month: int, day: int
) -> Optional[pendulum.DateTime]:
    try:
        return pendulum.datetime(year, month, day, tz=now.tzinfo)
    except ValueError:
        return None
