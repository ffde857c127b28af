# SPDX-License-Identifier: MIT

import datetime as dt
from typing import Optional

import pendulum

# Unset timestamps in the legacy file layout
ZERO_DATE_PREFIX = "0001-01-01"


def now_local() -> pendulum.DateTime:
    return pendulum.now("local")


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.isoformat()


def datetime_to_iso_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_iso_str(datetime)


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    parsed = pendulum.parse(datetime)
    if not isinstance(parsed, pendulum.DateTime):
        raise ValueError(f"'{datetime}' is not a timestamp")
    return parsed


def coerce_datetime(value: object) -> pendulum.DateTime:
    """
    YAML loaders hand back datetime objects for unquoted timestamps and
    strings for quoted ones; normalise both to pendulum.
    """
    if isinstance(value, pendulum.DateTime):
        return value
    if isinstance(value, str):
        return datetime_from_str(value)
    if isinstance(value, dt.datetime):
        return pendulum.instance(value)
    if isinstance(value, dt.date):
        return pendulum.datetime(value.year, value.month, value.day, tz="local")
    raise ValueError(f"'{value}' is not a timestamp")


def coerce_datetime_optional(value: object) -> Optional[pendulum.DateTime]:
    if value is None:
        return None
    return coerce_datetime(value)


def is_same_day(datetime: pendulum.DateTime, reference: pendulum.DateTime) -> bool:
    """Whether both fall on the same calendar day in the reference's timezone."""
    return datetime.in_timezone(reference.timezone or "UTC").date() == reference.date()


def datetime_to_date_str(datetime: pendulum.DateTime) -> str:
    return datetime.format("YYYY-MM-DD")


def datetime_to_display_local_date_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY-MM-DD ddd")


def datetime_to_display_local_date_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_display_local_date_str(datetime)
