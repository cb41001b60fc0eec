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

# pylint: disable=too-many-arguments
# pylint: disable=too-many-instance-attributes
# pylint: disable=too-many-locals

"""
Client to call AWS REST APIs with Signature V4 signed requests.
"""

from __future__ import absolute_import, annotations

from datetime import timedelta
from typing import Callable, Iterable, Optional, TextIO, Tuple, Union
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

import urllib3
from urllib3._collections import HTTPHeaderDict

from . import time
from .credentials import (Credentials, EnvAWSProvider, Provider,
                          StaticProvider, region_from_environment)
from .error import ConfigurationError, ParseError, ServiceError
from .helpers import (_DEFAULT_USER_AGENT, UNSIGNED_PAYLOAD,
                      ZERO_SHA256_HASH, DictType, QueryType, encode_query,
                      headers_to_strings, metadata_to_headers, query_pairs,
                      quote, sha256_hash, url_replace)
from .http import (DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT, Response,
                   Transport, Urllib3Transport)
from .retries import Retries
from .signer import presign_v4, sign_v4
from .xml import XmlElement, parse

ExceptionFactory = Tuple[
    Callable[[Response], bool],
    Callable[[Response], Exception],
]

_MAX_EXPIRES = timedelta(days=7)


class Request:
    """
    Request descriptor. Target is either a path relative to the client
    endpoint or an explicit URL. Query parameters and headers are ordered
    and multi-valued; metadata is sent as ``x-amz-meta-*`` headers.

    Example::
        request = Request("PUT", path="/my-bucket/my-object", body=b"data")
        request.add_metadata("category", "something")
    """

    def __init__(
            self,
            method: str = "GET",
            path: Optional[str] = None,
            url: Optional[str] = None,
            query_params: Optional[QueryType] = None,
            headers: Optional[DictType] = None,
            metadata: Optional[DictType] = None,
            body: Optional[Union[bytes, str]] = None,
            unsigned_payload: bool = False,
    ):
        if path is not None and url is not None:
            raise ConfigurationError("only one of path or url must be given")
        self._method = method.upper()
        self._path = path
        self._url = url
        self._query_params = query_pairs(query_params)
        self._headers = HTTPHeaderDict()
        for key, values in (headers or {}).items():
            for value in (
                    values if isinstance(values, (list, tuple)) else [values]
            ):
                self._headers.add(key, value)
        self._headers.extend(metadata_to_headers(metadata))
        self._body = body.encode() if isinstance(body, str) else body
        self._unsigned_payload = unsigned_payload

    @property
    def method(self) -> str:
        """Get HTTP method."""
        return self._method

    @property
    def path(self) -> Optional[str]:
        """Get path relative to client endpoint."""
        return self._path

    @property
    def url(self) -> Optional[str]:
        """Get explicit URL."""
        return self._url

    @property
    def query_params(self) -> list[tuple[str, str]]:
        """Get copy of query parameters."""
        return list(self._query_params)

    @property
    def headers(self) -> HTTPHeaderDict:
        """Get copy of headers."""
        return self._headers.copy()

    @property
    def body(self) -> Optional[bytes]:
        """Get request body."""
        return self._body

    @property
    def unsigned_payload(self) -> bool:
        """Check whether payload is excluded from signature."""
        return self._unsigned_payload

    def add_query_param(self, key: str, value: str = "") -> Request:
        """Append query parameter."""
        self._query_params.append((key, value))
        return self

    def add_header(self, key: str, value: str) -> Request:
        """Append header value."""
        self._headers.add(key, value)
        return self

    def add_metadata(self, key: str, value: str) -> Request:
        """Append user metadata as x-amz-meta-* header."""
        self._headers.extend(metadata_to_headers({key: value}))
        return self

    def set_body(self, body: Optional[Union[bytes, str]]) -> Request:
        """Set request body; string is encoded as UTF-8."""
        self._body = body.encode() if isinstance(body, str) else body
        return self

    def __repr__(self):
        target = self._url if self._url is not None else self._path
        return f"Request(method={self._method!r}, target={target!r})"


def _find_text(element: XmlElement, name: str) -> Optional[str]:
    """Text of first child with given name."""
    children = element.children_with_name(name)
    return children[0].content if children else None


def _error_code_and_message(
        content: bytes,
) -> tuple[Optional[str], Optional[str]]:
    """Read AWS error code and message from an XML error body."""
    try:
        element = parse(content)
    except ParseError:
        # Not an XML error body; raw content is still carried by the error.
        return None, None

    # <Error>, <ErrorResponse><Error> and <Response><Errors><Error> forms.
    while element.name != "Error":
        for name in ("Error", "Errors"):
            if element.has_child(name):
                element = element.children_with_name(name)[0]
                break
        else:
            return None, None
    return _find_text(element, "Code"), _find_text(element, "Message")


class Client:
    """
    Client of one AWS service in one region. Configuration is fixed at
    construction, hence one client is safely shared by threads issuing
    independent requests.
    """
    _service_name: str
    _region: str
    _provider: Provider
    _endpoint: Optional[str]
    _retries: Retries
    _exception_factories: tuple[ExceptionFactory, ...]
    _transport: Transport
    _user_agent: str
    _trace_stream: Optional[TextIO]

    def __init__(
            self,
            service_name: str,
            region: Optional[str] = None,
            access_key: Optional[str] = None,
            secret_key: Optional[str] = None,
            session_token: Optional[str] = None,
            credentials: Optional[Provider] = None,
            endpoint: Optional[str] = None,
            connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
            read_timeout: float = DEFAULT_READ_TIMEOUT,
            retries: Optional[Retries] = None,
            exception_factories: Optional[Iterable[ExceptionFactory]] = None,
            http_client: Optional[urllib3.PoolManager] = None,
            transport: Optional[Transport] = None,
            cert_check: bool = True,
    ):
        """
        Initializes a new client object.

        Args:
            service_name (str):
                Signing name of the service, e.g. "s3" or "sqs".

            region (Optional[str], default=None):
                Region of the service, e.g. "us-east-1".

            access_key (Optional[str], default=None):
                Access key (aka user ID) of your AWS account.

            secret_key (Optional[str], default=None):
                Secret key (aka password) of your AWS account.

            session_token (Optional[str], default=None):
                Session token of temporary credentials.

            credentials (Optional[Provider], default=None):
                Credentials provider used when access key is not given.

            endpoint (Optional[str], default=None):
                Base URL; defaults to
                ``https://{service_name}.{region}.amazonaws.com``.

            connect_timeout, read_timeout (float):
                Timeouts in seconds of the default urllib3 transport.

            retries (Optional[Retries], default=None):
                Retry policy; defaults to ``Retries()``.

            exception_factories (Optional[Iterable[ExceptionFactory]]):
                Ordered (predicate, factory) pairs; the first predicate
                matching the final response raises the exception built by
                its factory.

            http_client (Optional[urllib3.PoolManager], default=None):
                Customized HTTP client for the default transport.

            transport (Optional[Transport], default=None):
                Custom transport replacing urllib3.

            cert_check (bool, default=True):
                Verify server certificate of the default transport.

        Example::
            # Create client with access and secret key.
            client = Client(
                "s3", region="us-east-1",
                access_key="ACCESS-KEY", secret_key="SECRET-KEY",
            )

            # Create client with temporary credentials from environment.
            client = Client.from_environment("sqs")
        """
        if not service_name:
            raise ConfigurationError("service name must be provided")
        if not region:
            raise ConfigurationError("region must be provided")
        if access_key:
            if secret_key is None:
                raise ConfigurationError(
                    "secret key must be provided with access key",
                )
            credentials = StaticProvider(access_key, secret_key, session_token)
        if credentials is None:
            raise ConfigurationError("credentials must be provided")

        self._service_name = service_name
        self._region = region
        self._provider = credentials
        self._endpoint = endpoint.rstrip("/") if endpoint else None
        if self._endpoint:
            url = urlsplit(self._endpoint)
            if url.scheme not in ("http", "https") or not url.netloc:
                raise ConfigurationError(f"invalid endpoint {endpoint}")
        self._retries = retries or Retries()
        self._exception_factories = tuple(exception_factories or ())
        self._transport = transport or Urllib3Transport(
            http_client=http_client,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            cert_check=cert_check,
        )
        self._user_agent = _DEFAULT_USER_AGENT
        self._trace_stream = None

    @classmethod
    def from_environment(cls, service_name: str, **kwargs) -> Client:
        """
        Create client with credentials from AWS_ACCESS_KEY_ID,
        AWS_SECRET_ACCESS_KEY and AWS_SESSION_TOKEN and region from
        AWS_REGION environment variables, as set in AWS Lambda.
        """
        kwargs.setdefault("region", region_from_environment())
        kwargs.setdefault("credentials", EnvAWSProvider())
        return cls(service_name, **kwargs)

    @property
    def service_name(self) -> str:
        """Get service name."""
        return self._service_name

    @property
    def region(self) -> str:
        """Get region."""
        return self._region

    @property
    def endpoint(self) -> str:
        """Get base URL of the service."""
        return (
            self._endpoint or
            f"https://{self._service_name}.{self._region}.amazonaws.com"
        )

    @property
    def retries(self) -> Retries:
        """Get retry policy."""
        return self._retries

    @property
    def exception_factories(self) -> tuple[ExceptionFactory, ...]:
        """Get exception classification rules."""
        return self._exception_factories

    def copy(
            self,
            service_name: Optional[str] = None,
            region: Optional[str] = None,
            endpoint: Optional[str] = None,
            retries: Optional[Retries] = None,
            exception_factories: Optional[Iterable[ExceptionFactory]] = None,
    ) -> Client:
        """
        Make a new client with given overrides. Credentials provider and
        transport are shared.
        """
        client = Client(
            service_name or self._service_name,
            region=region or self._region,
            credentials=self._provider,
            endpoint=endpoint or self._endpoint,
            retries=retries or self._retries,
            exception_factories=(
                self._exception_factories if exception_factories is None
                else exception_factories
            ),
            transport=self._transport,
        )
        client._trace_stream = self._trace_stream
        return client

    def trace_on(self, stream: TextIO):
        """
        Enable http trace.

        Args:
            stream (TextIO):
                Stream for writing HTTP call tracing.
        """
        if not stream:
            raise ValueError('Input stream for trace output is invalid.')
        # Save new output stream.
        self._trace_stream = stream

    def trace_off(self):
        """Disable HTTP trace."""
        self._trace_stream = None

    def _build_url(self, request: Request) -> SplitResult:
        """Build URL of given request."""
        if request.url is not None:
            url = urlsplit(request.url)
            if url.scheme not in ("http", "https") or not url.netloc:
                raise ConfigurationError(f"invalid URL {request.url}")
            url = url_replace(url, path=quote(unquote(url.path)))
        else:
            url = urlsplit(self.endpoint)
            path = url.path.rstrip("/") + "/" + quote(
                (request.path or "").lstrip("/"),
            )
            url = url_replace(url, path=path)

        query = encode_query(request.query_params)
        if query:
            url = url_replace(
                url, query=(url.query + "&" if url.query else "") + query,
            )
        return url

    def _trace_request(
            self,
            method: str,
            url: SplitResult,
            headers: HTTPHeaderDict,
            body: Optional[bytes],
    ):
        """Write request to trace stream."""
        if not self._trace_stream:
            return
        self._trace_stream.write("---------START-HTTP---------\n")
        query = ("?" + url.query) if url.query else ""
        self._trace_stream.write(f"{method} {url.path}{query} HTTP/1.1\n")
        self._trace_stream.write(headers_to_strings(headers, titled_key=True))
        self._trace_stream.write("\n")
        if body is not None:
            self._trace_stream.write("\n")
            self._trace_stream.write(body.decode(errors="replace"))
            self._trace_stream.write("\n")
        self._trace_stream.write("\n")

    def _trace_response(self, response: Response):
        """Write response to trace stream."""
        if not self._trace_stream:
            return
        self._trace_stream.write(f"HTTP/1.1 {response.status_code}\n")
        self._trace_stream.write(headers_to_strings(response.headers))
        self._trace_stream.write("\n")
        if response.content:
            self._trace_stream.write("\n")
            self._trace_stream.write(response.content.decode(errors="replace"))
            self._trace_stream.write("\n")
        self._trace_stream.write("----------END-HTTP----------\n")

    def _url_open(
            self,
            method: str,
            url: SplitResult,
            headers: HTTPHeaderDict,
            body: Optional[bytes],
            content_sha256: str,
            credentials: Credentials,
    ) -> Response:
        """Sign and send one attempt of a request."""
        headers = headers.copy()
        headers["Host"] = url.netloc
        headers["User-Agent"] = self._user_agent
        headers["x-amz-content-sha256"] = content_sha256
        date = time.utcnow()
        headers["x-amz-date"] = time.to_amz_date(date)
        if credentials.session_token:
            headers["X-Amz-Security-Token"] = credentials.session_token
        headers = sign_v4(
            self._service_name,
            method,
            url,
            self._region,
            headers,
            credentials,
            content_sha256,
            date,
        )

        self._trace_request(method, url, headers, body)
        try:
            response = self._transport(method, urlunsplit(url), headers, body)
        except Exception as exc:
            if self._trace_stream:
                self._trace_stream.write(f"{exc!r}\n")
                self._trace_stream.write("----------END-HTTP----------\n")
            raise
        self._trace_response(response)
        return response

    def response(self, request: Request) -> Response:
        """
        Execute request with retries and return the final response whatever
        its status code.
        """
        method = request.method
        url = self._build_url(request)
        headers = request.headers
        body = request.body
        if body is not None:
            headers["Content-Length"] = str(len(body))
            if not headers.get("Content-Type"):
                headers["Content-Type"] = "application/octet-stream"
        if request.unsigned_payload:
            content_sha256 = UNSIGNED_PAYLOAD
        elif body is None:
            content_sha256 = ZERO_SHA256_HASH
        else:
            content_sha256 = sha256_hash(body)

        # Credentials are resolved before the first network call.
        credentials = self._provider.retrieve()
        return self._retries.call(
            lambda: self._url_open(
                method, url, headers, body, content_sha256, credentials,
            ),
        )

    def execute(self, request: Request) -> Response:
        """
        Execute request with retries. The first exception factory matching
        the final response raises its exception; otherwise an unsuccessful
        response raises :class:`ServiceError`.
        """
        response = self.response(request)
        for predicate, factory in self._exception_factories:
            if predicate(response):
                raise factory(response)
        if not response.is_ok():
            code, message = _error_code_and_message(response.content)
            raise ServiceError(response, code, message)
        return response

    def response_as_bytes(self, request: Request) -> bytes:
        """
        Execute request and return response body. Status code is checked as
        in :meth:`execute`, so an unsuccessful response raises
        :class:`ServiceError`; use :meth:`response` for the raw body of any
        status.
        """
        return self.execute(request).content

    def response_as_utf8(self, request: Request) -> str:
        """
        Execute request and return response body decoded as UTF-8. An
        unsuccessful response raises as in :meth:`execute`.
        """
        return self.execute(request).content.decode("utf-8")

    def response_as_xml(self, request: Request) -> XmlElement:
        """
        Execute request and return response body parsed as XML. Raises
        ParseError if the body is not well-formed XML.
        """
        return parse(self.execute(request).content)

    def presigned_url(
            self,
            request: Request,
            expires: Union[timedelta, int] = _MAX_EXPIRES,
    ) -> str:
        """
        Get presigned URL of given request. Payload, headers and metadata
        of the request are not signed.

        Args:
            request (Request):
                Request to presign.

            expires (Union[timedelta, int], default=timedelta(days=7)):
                Expiry; integer is in seconds. Must be within 1 second to 7
                days.
        """
        if not isinstance(expires, timedelta):
            expires = timedelta(seconds=expires)
        if expires.total_seconds() < 1 or expires > _MAX_EXPIRES:
            raise ConfigurationError(
                "expires must be between 1 second to 7 days",
            )

        url = self._build_url(request)
        credentials = self._provider.retrieve()
        return urlunsplit(
            presign_v4(
                self._service_name,
                request.method,
                url,
                self._region,
                credentials,
                time.utcnow(),
                int(expires.total_seconds()),
            ),
        )
