# Copyright 2019 Keith D Gregory
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
################################################################################

import json
import logging
import sys
import traceback

from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """A formatter for the Python logging module that converts a LogRecord into JSON.

    Besides the standard fields, it writes optional application tags, the Lambda
    invocation (populated by configure_logging()), and an "exportTask" sub-object
    for records that were logged with extra={'exportTask': {...}}.
    """

    def __init__(self, tags=None, lambda_info=None):
        super().__init__()
        self.tags = tags
        self.lambda_info = lambda_info

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created, timezone.utc)
        result = {
            'timestamp':    timestamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp.microsecond // 1000:03d}Z",
            'level':        record.levelname,
            'logger':       record.name,
            'message':      record.getMessage(),
            'processId':    record.process,
            'thread':       record.threadName,
            'locationInfo': {
                            'fileName':     record.filename,
                            'lineNumber':   record.lineno
                            }
            }
        export_task = getattr(record, 'exportTask', None)
        if export_task:
            result['exportTask'] = export_task
        if self.tags:
            result['tags'] = self.tags
        if self.lambda_info:
            result['lambda'] = self.lambda_info
        if record.exc_info:
            result['exception'] = traceback.format_exception(*record.exc_info)
        return json.dumps(result, default=str)


def configure_logging(context=None, level=logging.INFO, tags=None):
    """Configures the root logger to use JSON output, adding tags and information
       retrieved from the Lambda context (if available)"""

    lambda_info = None
    if context:
        lambda_info = {
            'requestId':        context.aws_request_id,
            'functionName':     context.function_name,
            'functionVersion':  context.function_version,
        }

    if tags:
        tags = tags.copy()

    formatter = JSONFormatter(tags, lambda_info)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        # in Lambda the root logger already has a handler; just replace its formatter
        for handler in root.handlers:
            handler.setFormatter(formatter)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return formatter
