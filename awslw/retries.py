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

"""Retry policy with exponential backoff."""

from __future__ import absolute_import, annotations

import dataclasses
import math
import time as ctime
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, cast

from urllib3.exceptions import HTTPError

from .error import MaxAttemptsExceededError
from .http import Response

# 400 is in both sets as AWS sometimes reports throttling with it.
TRANSIENT_STATUS_CODES: FrozenSet[int] = frozenset(
    [400, 408, 500, 502, 503, 509],
)
THROTTLING_STATUS_CODES: FrozenSet[int] = frozenset(
    [400, 403, 429, 502, 503, 509],
)
RETRYABLE_STATUS_CODES = TRANSIENT_STATUS_CODES | THROTTLING_STATUS_CODES


def retryable_status_code(response: Response) -> bool:
    """Check whether response status is transient or throttling."""
    return response.status_code in RETRYABLE_STATUS_CODES


def retryable_exception(exc: BaseException) -> bool:
    """Check whether exception is an I/O failure."""
    return isinstance(exc, (OSError, HTTPError))


@dataclass(frozen=True)
class Retries:
    """
    Immutable retry policy. State of a call is local to :meth:`call`,
    hence one instance is shared by concurrent requests.

    Args:
        initial_interval_ms (int, default=100):
            Interval the backoff computation starts from.

        backoff_factor (float, default=2.0):
            Multiplier applied to the interval after every failed attempt.

        max_interval_ms (int, default=30000):
            Upper bound of any sleep.

        max_attempts (int, default=10):
            Maximum attempts per call; zero or negative means unbounded.

        status_code_should_retry (Callable[[Response], bool]):
            Whether a response must be retried.

        exception_should_retry (Callable[[BaseException], bool]):
            Whether a transport exception must be retried. Other
            exceptions propagate immediately.

        sleep (Callable[[float], None], default=time.sleep):
            Blocking sleep taking seconds.
    """

    initial_interval_ms: int = 100
    backoff_factor: float = 2.0
    max_interval_ms: int = 30000
    max_attempts: int = 10
    status_code_should_retry: Callable[[Response], bool] = field(
        default=retryable_status_code, compare=False,
    )
    exception_should_retry: Callable[[BaseException], bool] = field(
        default=retryable_exception, compare=False,
    )
    sleep: Callable[[float], None] = field(
        default=ctime.sleep, compare=False, repr=False,
    )

    def __post_init__(self):
        if self.initial_interval_ms < 0:
            raise ValueError("initial interval must not be negative")
        if self.max_interval_ms < 0:
            raise ValueError("max interval must not be negative")
        if self.backoff_factor < 0:
            raise ValueError("backoff factor must not be negative")

    def next_interval_ms(self, interval_ms: int) -> int:
        """Compute interval to sleep after a failed attempt."""
        # Round half up.
        return min(
            self.max_interval_ms,
            int(math.floor(interval_ms * self.backoff_factor + 0.5)),
        )

    def with_initial_interval_ms(self, value: int) -> Retries:
        """Copy of this policy with given initial interval."""
        return dataclasses.replace(self, initial_interval_ms=value)

    def with_backoff_factor(self, value: float) -> Retries:
        """Copy of this policy with given backoff factor."""
        return dataclasses.replace(self, backoff_factor=value)

    def with_max_interval_ms(self, value: int) -> Retries:
        """Copy of this policy with given maximum interval."""
        return dataclasses.replace(self, max_interval_ms=value)

    def with_max_attempts(self, value: int) -> Retries:
        """Copy of this policy with given maximum attempts."""
        return dataclasses.replace(self, max_attempts=value)

    def with_status_code_should_retry(
            self, value: Callable[[Response], bool],
    ) -> Retries:
        """Copy of this policy with given status code predicate."""
        return dataclasses.replace(self, status_code_should_retry=value)

    def with_exception_should_retry(
            self, value: Callable[[BaseException], bool],
    ) -> Retries:
        """Copy of this policy with given exception predicate."""
        return dataclasses.replace(self, exception_should_retry=value)

    def call(self, func: Callable[[], Response]) -> Response:
        """
        Call func until it returns a response not needing retry or attempts
        are exhausted. On exhaustion, the last response is returned as-is;
        a last retryable exception is raised wrapped in
        :class:`MaxAttemptsExceededError`.
        """
        interval_ms = self.initial_interval_ms
        attempt = 0
        while True:
            attempt += 1
            response: Optional[Response] = None
            error: Optional[Exception] = None
            try:
                response = func()
            except Exception as exc:  # pylint: disable=broad-except
                if not self.exception_should_retry(exc):
                    raise
                error = exc
            else:
                if not self.status_code_should_retry(response):
                    return response

            interval_ms = self.next_interval_ms(interval_ms)
            self.sleep(interval_ms / 1000)

            if 0 < self.max_attempts <= attempt:
                if error is not None:
                    raise MaxAttemptsExceededError(
                        self.max_attempts, error,
                    ) from error
                return cast(Response, response)
