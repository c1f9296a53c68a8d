# Copyright 2024, Keith D Gregory
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

""" Time and naming helpers for the export: the window covering yesterday
    (UTC), the date prefix used for S3 keys, and the export task name.
    """

from collections import namedtuple
from datetime import datetime, timezone, timedelta


ExportWindow = namedtuple('ExportWindow', ['from_millis', 'to_millis', 'date_prefix'])


def utc_now():
    """ The default clock.
        """
    return datetime.now(tz=timezone.utc)


def start_of_day_millis(dt):
    """ Returns midnight UTC of the calendar day containing the provided
        datetime, as millis since epoch.
        """
    dt = dt.astimezone(timezone.utc)
    midnight = datetime(dt.year, dt.month, dt.day, tzinfo=timezone.utc)
    return int(midnight.timestamp()) * 1000


def date_prefix(dt):
    # existing buckets use unpadded month and day, so this can't be isoformat()
    return f"{dt.year}-{dt.month}-{dt.day}"


def compute_window(now):
    """ Returns the window [yesterday 00:00, today 00:00) for the provided
        time, along with the prefix derived from yesterday's date.
        """
    now = now.astimezone(timezone.utc)
    yesterday = now - timedelta(hours=24)
    return ExportWindow(
        from_millis=start_of_day_millis(yesterday),
        to_millis=start_of_day_millis(now),
        date_prefix=date_prefix(yesterday))


def short_group_name(log_group_name):
    return log_group_name.rpartition("/")[2]


def task_name(log_group_name, prefix):
    return f"{short_group_name(log_group_name)}-{prefix}"


def format_wallclock(dt):
    """ Formats a timestamp the way the Unix date command does, for example
        "Thu Mar 14 10:00:00 UTC 2024". Like date, the day of month is padded
        with a space rather than a zero.
        """
    dt = dt.astimezone(timezone.utc)
    return f"{dt:%a %b} {dt.day:2d} {dt:%H:%M:%S} UTC {dt.year}"
