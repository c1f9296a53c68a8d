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
################################################################################
#
# Invoked once a day by an EventBridge schedule. Exports the previous day's
# events from every log group tagged with "ExportLogs" into the bucket named
# by S3_BUCKET_NAME, under a "YYYY-M-D/" prefix.
#
# Depends on the layer in python/ (cloudwatch_export and jsonlogging).
#
################################################################################

import boto3
import jsonlogging

from cloudwatch_export import ExportConfig, ExportDriver


# read once per container; a missing bucket fails the first invocation
config = None


def lambda_handler(event, context):
    global config
    jsonlogging.configure_logging(context)
    if config is None:
        config = ExportConfig.from_environment()
    client = boto3.client('logs')
    ExportDriver(client, config).run_sweep()
