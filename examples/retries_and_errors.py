# -*- coding: utf-8 -*-
# awslw, Lightweight Python client for AWS REST APIs,
# (C) 2025 The awslw Authors.
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

import sys

from awslw import Client, Request, Retries, ServiceError


class QueueNotFound(Exception):
    pass


client = Client.from_environment(
    "sqs",
    retries=Retries(max_attempts=3).with_initial_interval_ms(200),
    exception_factories=[
        (
            lambda response: b"NonExistentQueue" in response.content,
            lambda response: QueueNotFound(response.content.decode()),
        ),
    ],
)
client.trace_on(sys.stderr)

try:
    client.execute(Request(query_params={
        "Action": "GetQueueUrl",
        "QueueName": "missing-queue",
        "Version": "2012-11-05",
    }))
except QueueNotFound as exc:
    print("queue not found", exc)
except ServiceError as exc:
    print(exc.status_code, exc.code, exc.message)
