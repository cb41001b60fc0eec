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

"""HTTP response and transport."""

from __future__ import absolute_import, annotations

import os
from typing import Mapping, Optional, Union

import certifi
import urllib3
from typing_extensions import Protocol
from urllib3._collections import HTTPHeaderDict
from urllib3.util import Timeout

from .helpers import AMZ_META_PREFIX

DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_READ_TIMEOUT = 300.0


class Response:
    """HTTP response of a request."""

    def __init__(
            self,
            status_code: int,
            headers: Optional[
                Mapping[str, Union[str, list[str], tuple[str, ...]]]
            ] = None,
            content: bytes = b"",
    ):
        self._status_code = status_code
        if isinstance(headers, HTTPHeaderDict):
            self._headers = headers.copy()
        else:
            self._headers = HTTPHeaderDict()
            for key, values in (headers or {}).items():
                for value in (
                        values if isinstance(values, (list, tuple))
                        else [values]
                ):
                    self._headers.add(key, value)
        self._content = content

    @property
    def status_code(self) -> int:
        """Get HTTP status code."""
        return self._status_code

    @property
    def headers(self) -> HTTPHeaderDict:
        """Get HTTP headers."""
        return self._headers

    @property
    def content(self) -> bytes:
        """Get response body."""
        return self._content

    def is_ok(self) -> bool:
        """Check whether status code is 2xx."""
        return 200 <= self._status_code < 300

    def metadata(self) -> dict[str, str]:
        """Get x-amz-meta-* headers with the prefix stripped."""
        metadata: dict[str, str] = {}
        for key in self._headers:
            if key.lower().startswith(AMZ_META_PREFIX):
                metadata.setdefault(
                    key[len(AMZ_META_PREFIX):],
                    self._headers.getlist(key)[0],
                )
        return metadata

    def __repr__(self):
        return (
            f"Response(status_code={self._status_code}, "
            f"headers={dict(self._headers)!r}, "
            f"content_length={len(self._content)})"
        )


class Transport(Protocol):  # pylint: disable=too-few-public-methods
    """typing stub for HTTP transport."""

    def __call__(
            self,
            method: str,
            url: str,
            headers: HTTPHeaderDict,
            body: Optional[bytes],
    ) -> Response:
        """
        Send request and return its response. Raises on transport level
        failure.
        """


class Urllib3Transport:  # pylint: disable=too-few-public-methods
    """Transport over urllib3.PoolManager."""

    def __init__(
            self,
            http_client: Optional[urllib3.PoolManager] = None,
            connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
            read_timeout: float = DEFAULT_READ_TIMEOUT,
            cert_check: bool = True,
    ):
        # Validate http client has correct base class.
        if http_client and not isinstance(http_client, urllib3.PoolManager):
            raise TypeError(
                "HTTP client should be urllib3.PoolManager like object, "
                f"got {type(http_client).__name__}",
            )

        # Load CA certificates from SSL_CERT_FILE file if set
        self._http = http_client or urllib3.PoolManager(
            timeout=Timeout(connect=connect_timeout, read=read_timeout),
            maxsize=10,
            cert_reqs='CERT_REQUIRED' if cert_check else 'CERT_NONE',
            ca_certs=os.environ.get('SSL_CERT_FILE') or certifi.where(),
        )

    def __del__(self):
        if hasattr(self, "_http"):  # Only required for unit test run
            self._http.clear()

    def __call__(
            self,
            method: str,
            url: str,
            headers: HTTPHeaderDict,
            body: Optional[bytes],
    ) -> Response:
        # Retries and redirects are decided by the caller.
        response = self._http.urlopen(
            method,
            url,
            body=body,
            headers=headers,
            retries=False,
            redirect=False,
            preload_content=True,
        )
        return Response(
            response.status,
            HTTPHeaderDict(response.headers),
            response.data or b"",
        )
