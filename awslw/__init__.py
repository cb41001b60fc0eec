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

"""
awslw - Lightweight client for AWS REST APIs with Signature V4 signing

    >>> from awslw import Client, Request
    >>> sqs = Client(
    ...     "sqs",
    ...     region="ap-southeast-2",
    ...     access_key="AKIDEXAMPLE",
    ...     secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
    ... )
    >>> root = sqs.response_as_xml(
    ...     Request(query_params={
    ...         "Action": "GetQueueUrl",
    ...         "QueueName": "my-queue",
    ...         "Version": "2012-11-05",
    ...     }),
    ... )
    >>> print(root.path("GetQueueUrlResult/QueueUrl").content)

:copyright: (C) 2025 The awslw Authors.
:license: Apache 2.0, see LICENSE for more details.
"""

__title__ = "awslw"
__author__ = "The awslw Authors"
__version__ = "0.3.0"
__license__ = "Apache 2.0"
__copyright__ = "Copyright 2025 The awslw Authors"

# pylint: disable=unused-import,useless-import-alias,wrong-import-position
from .client import Client as Client
from .client import Request as Request
from .error import AwsLwException as AwsLwException
from .error import ConfigurationError as ConfigurationError
from .error import ErrorKind as ErrorKind
from .error import MaxAttemptsExceededError as MaxAttemptsExceededError
from .error import ParseError as ParseError
from .error import ServiceError as ServiceError
from .http import Response as Response
from .retries import Retries as Retries
from .xml import XmlElement as XmlElement
