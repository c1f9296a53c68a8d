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

import json
import logging
import pytest
import re
import sys

from unittest.mock import Mock

import jsonlogging


###
### Helpers
###

def create_record(msg, args=(), exc_info=None, **extra):
    record = logging.LogRecord("example", logging.INFO, "/tmp/example.py", 123, msg, args, exc_info)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


@pytest.fixture
def root_logger():
    """ Gives the test a root logger with no handlers, restoring the
        original afterward (pytest attaches its own capture handlers).
        """
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


###
### Test cases
###

def test_basic_format():
    formatter = jsonlogging.JSONFormatter()
    result = json.loads(formatter.format(create_record("exported %d log groups", (3,))))
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", result['timestamp'])
    assert result['level'] == "INFO"
    assert result['logger'] == "example"
    assert result['message'] == "exported 3 log groups"
    assert result['locationInfo'] == {'fileName': "example.py", 'lineNumber': 123}
    assert 'exportTask' not in result
    assert 'tags' not in result
    assert 'lambda' not in result
    assert 'exception' not in result


def test_export_task_context():
    formatter = jsonlogging.JSONFormatter()
    context = {'logGroup': "/svc/api", 'datePrefix': "2024-3-14", 'taskId': "task-000", 'status': "FAILED"}
    result = json.loads(formatter.format(create_record("completed", exportTask=context)))
    assert result['exportTask'] == context


def test_tags_and_lambda_info():
    formatter = jsonlogging.JSONFormatter(tags={'app': "export"}, lambda_info={'requestId': "abc"})
    result = json.loads(formatter.format(create_record("hello")))
    assert result['tags'] == {'app': "export"}
    assert result['lambda'] == {'requestId': "abc"}


def test_exception():
    try:
        raise ValueError("oops")
    except ValueError:
        record = create_record("failed", exc_info=sys.exc_info())
    result = json.loads(jsonlogging.JSONFormatter().format(record))
    assert result['exception'][-1] == "ValueError: oops\n"


def test_configure_logging_without_handlers(root_logger):
    formatter = jsonlogging.configure_logging(level=logging.DEBUG, tags={'app': "export"})
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert root_logger.handlers[0].formatter is formatter
    assert formatter.tags == {'app': "export"}
    assert formatter.lambda_info is None


def test_configure_logging_replaces_existing_formatter(root_logger):
    existing = logging.StreamHandler()
    root_logger.addHandler(existing)
    context = Mock(aws_request_id="req-1", function_name="cloudwatch-s3-export", function_version="$LATEST")
    formatter = jsonlogging.configure_logging(context)
    assert root_logger.handlers == [existing]
    assert existing.formatter is formatter
    assert formatter.lambda_info == {
        'requestId':        "req-1",
        'functionName':     "cloudwatch-s3-export",
        'functionVersion':  "$LATEST",
    }
