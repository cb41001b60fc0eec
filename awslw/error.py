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
awslw.error
~~~~~~~~~~~

This module provides the exception classes raised by the library. Every
exception carries an :class:`ErrorKind` so callers can classify a failure
as configuration, transport, service or parse error without matching on
concrete types.

:copyright: (c) 2025 by The awslw Authors.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .http import Response


class ErrorKind(Enum):
    """Kind of failure."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    SERVICE = "service"
    PARSE = "parse"


class AwsLwException(Exception):
    """Base awslw exception."""
    kind: ErrorKind


class ConfigurationError(AwsLwException, ValueError):
    """
    Raised to indicate missing or invalid client configuration, detected
    before any network call.
    """
    kind = ErrorKind.CONFIGURATION


class MaxAttemptsExceededError(AwsLwException):
    """
    Raised when every attempt of a request failed with a retryable
    transport exception. The last exception is kept as cause.
    """
    kind = ErrorKind.TRANSPORT

    def __init__(self, max_attempts: int, cause: BaseException):
        self._max_attempts = max_attempts
        self._cause = cause
        super().__init__(f"exceeded max attempts {max_attempts}; {cause!r}")

    def __reduce__(self):
        return type(self), (self._max_attempts, self._cause)

    @property
    def max_attempts(self) -> int:
        """Get maximum attempts made."""
        return self._max_attempts

    @property
    def cause(self) -> BaseException:
        """Get exception raised by the last attempt."""
        return self._cause


class ServiceError(AwsLwException):
    """
    Raised to indicate that the service returned an unsuccessful HTTP
    response. Status code, headers and raw body are kept verbatim.
    """
    kind = ErrorKind.SERVICE

    def __init__(
            self,
            response: Response,
            code: Optional[str] = None,
            message: Optional[str] = None,
    ):
        self._response = response
        self._code = code
        self._message = message
        body = response.content.decode(errors="replace")
        super().__init__(
            f"service request failed; status: {response.status_code}, "
            f"code: {code}, message: {message}, body: {body}"
        )

    def __reduce__(self):
        return type(self), (self._response, self._code, self._message)

    @property
    def response(self) -> Response:
        """Get final HTTP response."""
        return self._response

    @property
    def status_code(self) -> int:
        """Get HTTP status code."""
        return self._response.status_code

    @property
    def content(self) -> bytes:
        """Get raw response body."""
        return self._response.content

    @property
    def code(self) -> Optional[str]:
        """Get AWS error code if response body carries one."""
        return self._code

    @property
    def message(self) -> Optional[str]:
        """Get AWS error message if response body carries one."""
        return self._message


class ParseError(AwsLwException, ValueError):
    """Raised to indicate malformed XML or a missing XML element."""
    kind = ErrorKind.PARSE
