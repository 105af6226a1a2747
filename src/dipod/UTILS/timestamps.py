# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
RFC 3339 timestamp parsing.
"""
import re
from datetime import datetime, timedelta, timezone

# Go's RFC3339Nano allows up to nine fractional digits; datetime keeps six.
RFC3339_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)


def parse_rfc3339(value: str) -> datetime:
    """
    Parses an RFC 3339 timestamp into an aware datetime.

    :param value: Timestamp such as ``2019-08-20T14:30:00.123456789Z``.
    :raises ValueError: If the value is not RFC 3339.
    """
    match = RFC3339_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0

    if match.group(8):
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(match.group(10)), minutes=int(match.group(11)))
        if match.group(9) == "-":
            offset = -offset
        tz = timezone(offset)

    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)


def to_unix(value: str) -> int:
    """Seconds since the epoch for an RFC 3339 timestamp."""
    return int(parse_rfc3339(value).timestamp())
