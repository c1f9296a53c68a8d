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

import logging
import math
import os

from collections import namedtuple

from cloudwatch_export.errors import ConfigurationError


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


DEFAULT_POLL_INTERVAL = 10
DEFAULT_PAGE_SIZE = 50
DEFAULT_EXPORT_TAG = "ExportLogs"

# DescribeLogGroups rejects anything larger
MAX_PAGE_SIZE = 50


_ExportConfig = namedtuple('ExportConfig', [
    'bucket',
    'poll_interval',
    'page_size',
    'max_log_groups',
    'export_tag',
    'export_timeout',
    'continue_on_error',
    ])


class ExportConfig(_ExportConfig):
    """ Settings for a sweep. Normally built by from_environment(); tests
        construct it directly.

        bucket              - Destination S3 bucket (S3_BUCKET_NAME). Required.
        poll_interval       - Seconds between calls to DescribeExportTasks
                              (POLL_INTERVAL_SECONDS).
        page_size           - Limit passed to DescribeLogGroups (LOG_GROUP_PAGE_SIZE).
        max_log_groups      - If set, stop enumerating log groups after this many
                              (MAX_LOG_GROUPS). Use 50 to look at only the first page.
        export_tag          - Tag key that opts a log group in to export (EXPORT_TAG).
        export_timeout      - If set, the maximum number of seconds to wait for a
                              single export task (EXPORT_TIMEOUT_SECONDS).
        continue_on_error   - If True, an error exporting one log group doesn't stop
                              the sweep (CONTINUE_ON_ERROR).
        """

    __slots__ = ()

    def __new__(cls, bucket, poll_interval=DEFAULT_POLL_INTERVAL, page_size=DEFAULT_PAGE_SIZE,
                max_log_groups=None, export_tag=DEFAULT_EXPORT_TAG, export_timeout=None,
                continue_on_error=False):
        if not bucket:
            raise ConfigurationError("destination bucket not configured (S3_BUCKET_NAME)")
        if not math.isfinite(poll_interval) or poll_interval < 0:
            raise ConfigurationError(f"poll interval must be a non-negative number: {poll_interval}")
        if export_timeout is not None and (not math.isfinite(export_timeout) or export_timeout <= 0):
            raise ConfigurationError(f"export timeout must be a positive number: {export_timeout}")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ConfigurationError(f"page size must be between 1 and {MAX_PAGE_SIZE}: {page_size}")
        if max_log_groups is not None and max_log_groups < 1:
            raise ConfigurationError(f"max log groups must be positive: {max_log_groups}")
        if not export_tag:
            raise ConfigurationError("export tag must not be empty")
        return super().__new__(cls, bucket, poll_interval, page_size, max_log_groups,
                               export_tag, export_timeout, continue_on_error)


    @classmethod
    def from_environment(cls, environ=None):
        if environ is None:
            environ = os.environ
        config = cls(
            bucket=environ.get('S3_BUCKET_NAME', "").strip(),
            poll_interval=_number(environ, 'POLL_INTERVAL_SECONDS', float, DEFAULT_POLL_INTERVAL),
            page_size=_number(environ, 'LOG_GROUP_PAGE_SIZE', int, DEFAULT_PAGE_SIZE),
            max_log_groups=_number(environ, 'MAX_LOG_GROUPS', int, None),
            export_tag=environ.get('EXPORT_TAG', DEFAULT_EXPORT_TAG),
            export_timeout=_number(environ, 'EXPORT_TIMEOUT_SECONDS', float, None),
            continue_on_error=_flag(environ, 'CONTINUE_ON_ERROR'))
        logger.debug(f"configuration: {config}")
        return config


def _number(environ, name, convert, default):
    value = environ.get(name, "").strip()
    if not value:
        return default
    try:
        return convert(value)
    except ValueError:
        raise ConfigurationError(f"invalid value for {name}: {value!r}")


def _flag(environ, name):
    value = environ.get(name, "").strip().lower()
    if value in ("", "0", "false", "no"):
        return False
    if value in ("1", "true", "yes"):
        return True
    raise ConfigurationError(f"invalid value for {name}: {value!r}")
