#!/usr/bin/env python3

# DropProject - submission processing pipeline
# Copyright © 2019-2024 The DropProject development team
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import time
from datetime import datetime, timezone, tzinfo

import babel.dates


__all__ = [
    "make_datetime", "make_timestamp", "minutes_between", "format_datetime",
    "get_timezone",

    "utc", "local_tz",
    ]


def make_datetime(timestamp: int | float | None = None) -> datetime:
    """Return the datetime object associated with the given timestamp.

    timestamp: a POSIX timestamp, or None to use now.

    return: the naive datetime representing the UTC time of the
        given timestamp.

    """
    if timestamp is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    else:
        return datetime.fromtimestamp(timestamp, timezone.utc)\
            .replace(tzinfo=None)


EPOCH = datetime(1970, 1, 1)


def make_timestamp(_datetime: datetime | None = None) -> float:
    """Return the timestamp associated with the given datetime object.

    _datetime: a datetime object, or None to use now.

    return: the POSIX timestamp corresponding to the given
        datetime ("read" in UTC).

    """
    if _datetime is None:
        return time.time()
    else:
        return (_datetime - EPOCH).total_seconds()


def minutes_between(start: datetime, end: datetime) -> int:
    """Return the number of whole minutes from start to end.

    Partial minutes are truncated towards zero, so 59 seconds are 0
    minutes and -59 seconds are 0 minutes too.

    """
    return int((end - start).total_seconds() / 60)


utc = babel.dates.UTC
local_tz = babel.dates.LOCALTZ


def get_timezone(name: str | None) -> tzinfo:
    """Return the timezone with the given name, or the local one.

    name: a timezone name like "Europe/Lisbon", or None.

    raise (LookupError): if there is no timezone with that name.

    """
    if name is None:
        return local_tz
    return babel.dates.get_timezone(name)


def format_datetime(dt: datetime, tz: tzinfo = local_tz,
                    pattern: str = "dd/MM/yyyy HH:mm:ss") -> str:
    """Format a naive UTC datetime in the given timezone.

    dt: the datetime to format, naive and in UTC.
    tz: the timezone to show the time in.
    pattern: a CLDR date pattern.

    """
    return babel.dates.format_datetime(dt.replace(tzinfo=utc), pattern,
                                       tzinfo=tz, locale="en")
