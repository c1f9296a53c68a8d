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

""" Exports the previous day's events from tagged CloudWatch Logs log groups
    to S3, one export task at a time.
    """

from cloudwatch_export.config import ExportConfig
from cloudwatch_export.errors import (ExportError, ConfigurationError, ExportProtocolError,
                                      ExportTimeoutError, SweepFailedError)
from cloudwatch_export.exporter import ExportDriver, ExportResult, TERMINAL_STATUSES
from cloudwatch_export.window import ExportWindow, compute_window, task_name, utc_now


def run_sweep(client, config, clock=utc_now, **kwargs):
    """ Convenience function: creates a driver and runs one sweep, returning
        the driver's results.
        """
    driver = ExportDriver(client, config, clock=clock, **kwargs)
    driver.run_sweep()
    return driver.results
