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


class ExportError(Exception):
    """ Base class for errors raised by this package. Errors reported by AWS
        are not wrapped; they propagate as botocore exceptions.
        """
    pass


class ConfigurationError(ExportError):
    pass


class ExportProtocolError(ExportError):
    """ Raised when CloudWatch Logs returns a response that doesn't contain
        what we asked for (eg, describe_export_tasks with no tasks).
        """
    pass


class ExportTimeoutError(ExportError):

    def __init__(self, task_id, waited):
        super().__init__(f"export task {task_id} did not complete within {waited} seconds")
        self.task_id = task_id
        self.waited = waited


class SweepFailedError(ExportError):
    """ Raised at the end of a sweep that was configured to continue past
        per-group errors, if any such errors happened.

        failures    - list of (log_group_name, exception) tuples.
        """

    def __init__(self, failures):
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"export failed for {len(failures)} log group(s): {names}")
        self.failures = failures
