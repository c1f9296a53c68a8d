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
import time

from botocore.exceptions import ClientError
from collections import namedtuple

from cloudwatch_export.errors import ExportProtocolError, ExportTimeoutError, SweepFailedError
from cloudwatch_export.window import compute_window, format_wallclock, task_name, utc_now


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


TERMINAL_STATUSES = frozenset(["COMPLETED", "CANCELLED", "FAILED"])


ExportResult = namedtuple('ExportResult', ['log_group', 'date_prefix', 'task_id', 'status'])


class ExportDriver:

    def __init__(self, client, config, clock=utc_now, sleep=time.sleep):
        """ Initializes a new driver. No AWS calls are made until run_sweep().

            client  - The Boto3 CloudWatch Logs client.
            config  - An ExportConfig.
            clock   - A function that returns the current time as a UTC datetime.
            sleep   - A function that waits for the given number of seconds.
            """
        self._client = client
        self._config = config
        self._clock = clock
        self._sleep = sleep
        self._active_task = None
        self.results = []


    def run_sweep(self):
        """ Exports yesterday's events for every tagged log group, one at a time.

            CloudWatch Logs only allows one active export task per account, so
            each task is polled until it finishes (in whatever state) before the
            next is created. By default any exception from AWS ends the sweep;
            if the configuration says to continue on error, per-group failures
            are logged and reported together by a SweepFailedError at the end.

            Even when continuing on error, a failure that leaves an export task
            possibly still active (for example, an error from DescribeExportTasks)
            ends the sweep, because no further task could be created.
            """
        self.results = []
        self._active_task = None
        failures = []
        window = compute_window(self._clock())
        logger.info(f"exporting log groups tagged {self._config.export_tag} "
                    f"for {window.date_prefix} to bucket {self._config.bucket}")
        for group_name in self.retrieve_log_groups():
            try:
                result = self.process_log_group(group_name, window)
            except Exception as ex:
                if not self._config.continue_on_error or self._active_task:
                    raise
                logger.exception(f"exception while exporting log group {group_name}; skipping to next")
                failures.append((group_name, ex))
                continue
            if result:
                self.results.append(result)
        logger.info(f"exported {len(self.results)} log groups")
        if failures:
            raise SweepFailedError(failures)


    def retrieve_log_groups(self):
        """ A generator that returns log group names in the order that
            DescribeLogGroups provides them, making calls as needed.
            """
        args = {'limit': self._config.page_size}
        limit = self._config.max_log_groups
        count = 0
        # paginated by hand so that max_log_groups stops before fetching another page
        while True:
            resp = self._client.describe_log_groups(**args)
            for group in resp.get('logGroups', []):
                yield group['logGroupName']
                count += 1
                if limit and count >= limit:
                    logger.info(f"retrieved {count} log groups; limited to {limit}")
                    return
            if resp.get('nextToken'):
                args['nextToken'] = resp['nextToken']
            else:
                break
        logger.info(f"retrieved {count} log groups")


    def process_log_group(self, group_name, window):
        """ Exports a single log group, if it's tagged for export. Returns an
            ExportResult, or None if the group was skipped.
            """
        tags = self._client.list_tags_log_group(logGroupName=group_name).get('tags', {})
        if self._config.export_tag not in tags:
            logger.debug(f"skipping {group_name}: not tagged for export")
            return None
        task_id = self.start_export(group_name, window)
        status = self.wait_for_completion(task_id)
        logger.info(f"completed export of log group {group_name}, date {window.date_prefix}, "
                    f"at {format_wallclock(self._clock())} with status {status}",
                    extra=_export_context(group_name, window.date_prefix, task_id, status))
        return ExportResult(group_name, window.date_prefix, task_id, status)


    def start_export(self, group_name, window):
        resp = self._client.create_export_task(
            taskName=task_name(group_name, window.date_prefix),
            logGroupName=group_name,
            fromTime=window.from_millis,
            to=window.to_millis,
            destination=self._config.bucket,
            destinationPrefix=window.date_prefix)
        task_id = resp['taskId']
        self._active_task = task_id
        logger.info(f"started export of log group {group_name}, date {window.date_prefix}, "
                    f"at {format_wallclock(self._clock())}",
                    extra=_export_context(group_name, window.date_prefix, task_id))
        return task_id


    def wait_for_completion(self, task_id):
        """ Polls the export task until it reaches a terminal status, and
            returns that status. Note that CANCELLED and FAILED are returned,
            not raised.

            If the configured timeout elapses, the task is cancelled and this
            method waits for the cancellation to take effect before raising
            ExportTimeoutError, so that the next group can start its export.
            """
        timeout = self._config.export_timeout
        started = self._clock()
        while True:
            status = self._describe_status(task_id)
            if status in TERMINAL_STATUSES:
                self._active_task = None
                return status
            if timeout is not None:
                waited = (self._clock() - started).total_seconds()
                if waited >= timeout:
                    self.cancel_export(task_id)
                    raise ExportTimeoutError(task_id, waited)
            logger.info(f"waiting for export task {task_id} to complete (status: {status})")
            self._sleep(self._config.poll_interval)


    def cancel_export(self, task_id):
        """ Cancels an export task and polls until it's no longer active.
            Returns the final status, which may not be CANCELLED if the task
            finished before the cancel request arrived.
            """
        logger.warning(f"cancelling export task {task_id}")
        try:
            self._client.cancel_export_task(taskId=task_id)
        except ClientError as ex:
            # CloudWatch rejects a cancel for a task that has already finished
            if ex.response.get('Error', {}).get('Code') != "InvalidOperationException":
                raise
        while True:
            status = self._describe_status(task_id)
            if status in TERMINAL_STATUSES:
                self._active_task = None
                return status
            logger.info(f"waiting for export task {task_id} to cancel (status: {status})")
            self._sleep(self._config.poll_interval)


    def _describe_status(self, task_id):
        resp = self._client.describe_export_tasks(taskId=task_id)
        tasks = resp.get('exportTasks')
        if not tasks:
            raise ExportProtocolError(f"describe_export_tasks returned no tasks for {task_id}")
        return tasks[0]['status']['code']


def _export_context(group_name, date_prefix, task_id, status=None):
    context = {
        'logGroup':     group_name,
        'datePrefix':   date_prefix,
        'taskId':       task_id,
    }
    if status:
        context['status'] = status
    return {'exportTask': context}
