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
awslw.signer
~~~~~~~~~~~~

This module implements all helpers for AWS Signature version '4' support.

:copyright: (c) 2025 by The awslw Authors.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

import hashlib
import hmac
import re
from datetime import datetime
from typing import Mapping, Optional, cast
from urllib.parse import SplitResult, unquote

from . import time
from .credentials import Credentials
from .error import ConfigurationError
from .helpers import UNSIGNED_PAYLOAD, queryencode, sha256_hash, url_replace

SIGN_V4_ALGORITHM = "AWS4-HMAC-SHA256"
_MULTI_SPACE_REGEX = re.compile(r"\s+")
_UNSIGNED_HEADERS = ("authorization", "user-agent")


def _hmac_hash(
        key: bytes,
        data: bytes,
        hexdigest: bool = False,
) -> bytes | str:
    """Return HMacSHA256 digest of given key and data."""

    hasher = hmac.new(key, data, hashlib.sha256)
    return hasher.hexdigest() if hexdigest else hasher.digest()


def _check_credentials(
        credentials: Optional[Credentials],
        region: str,
        service_name: str,
):
    """Validate signing inputs before any request is made."""
    if credentials is None:
        raise ConfigurationError("credentials must be provided for signing")
    if not region:
        raise ConfigurationError("region must be provided for signing")
    if not service_name:
        raise ConfigurationError("service name must be provided for signing")


def _get_scope(date: datetime, region: str, service_name: str) -> str:
    """Get scope string."""
    return f"{time.to_signer_date(date)}/{region}/{service_name}/aws4_request"


def _get_canonical_headers(
        headers: Mapping[str, str | list[str] | tuple[str]],
) -> tuple[str, str]:
    """Get canonical headers."""

    ordered_headers: dict[str, list[str]] = {}
    for key, values in headers.items():
        key = key.lower()
        if key in _UNSIGNED_HEADERS:
            continue
        values = values if isinstance(values, (list, tuple)) else [values]
        ordered_headers.setdefault(key, []).extend(
            _MULTI_SPACE_REGEX.sub(" ", str(value)).strip()
            for value in values
        )

    keys = sorted(ordered_headers)
    signed_headers = ";".join(keys)
    canonical_headers = "\n".join(
        [f"{key}:{','.join(ordered_headers[key])}" for key in keys],
    )
    return canonical_headers, signed_headers


def _get_canonical_query_string(query: str) -> str:
    """Get canonical query string."""

    pairs = []
    for param in (query or "").split("&"):
        if not param:
            continue
        key, _, value = param.partition("=")
        pairs.append(
            (queryencode(unquote(key)), queryencode(unquote(value))),
        )
    return "&".join(f"{key}={value}" for key, value in sorted(pairs))


def _get_canonical_request(
        method: str,
        url: SplitResult,
        headers: Mapping[str, str | list[str] | tuple[str]],
        content_sha256: str,
) -> tuple[str, str]:
    """Get canonical request and signed headers."""
    canonical_headers, signed_headers = _get_canonical_headers(headers)
    canonical_query_string = _get_canonical_query_string(url.query)

    # CanonicalRequest =
    #   HTTPRequestMethod + '\n' +
    #   CanonicalURI + '\n' +
    #   CanonicalQueryString + '\n' +
    #   CanonicalHeaders + '\n\n' +
    #   SignedHeaders + '\n' +
    #   HexEncode(Hash(RequestPayload))
    canonical_request = (
        f"{method.upper()}\n"
        f"{url.path or '/'}\n"
        f"{canonical_query_string}\n"
        f"{canonical_headers}\n\n"
        f"{signed_headers}\n"
        f"{content_sha256}"
    )
    return canonical_request, signed_headers


def _get_canonical_request_hash(
        method: str,
        url: SplitResult,
        headers: Mapping[str, str | list[str] | tuple[str]],
        content_sha256: str,
) -> tuple[str, str]:
    """Get canonical request hash."""
    canonical_request, signed_headers = _get_canonical_request(
        method, url, headers, content_sha256,
    )
    return sha256_hash(canonical_request), signed_headers


def _get_string_to_sign(
        date: datetime,
        scope: str,
        canonical_request_hash: str,
) -> str:
    """Get string-to-sign."""
    return (
        f"{SIGN_V4_ALGORITHM}\n{time.to_amz_date(date)}\n{scope}\n"
        f"{canonical_request_hash}"
    )


def _get_signing_key(
        secret_key: str,
        date: datetime,
        region: str,
        service_name: str,
) -> bytes:
    """Get signing key."""

    date_key = cast(
        bytes,
        _hmac_hash(
            ("AWS4" + secret_key).encode(),
            time.to_signer_date(date).encode(),
        ),
    )
    date_region_key = cast(bytes, _hmac_hash(date_key, region.encode()))
    date_region_service_key = cast(
        bytes,
        _hmac_hash(date_region_key, service_name.encode()),
    )
    return cast(
        bytes,
        _hmac_hash(date_region_service_key, b"aws4_request"),
    )


def _get_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Get signature."""

    return cast(
        str,
        _hmac_hash(signing_key, string_to_sign.encode(), hexdigest=True),
    )


def _get_authorization(
        access_key: str,
        scope: str,
        signed_headers: str,
        signature: str,
) -> str:
    """Get authorization."""
    return (
        f"{SIGN_V4_ALGORITHM} Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


def sign_v4(
        service_name: str,
        method: str,
        url: SplitResult,
        region: str,
        headers,
        credentials: Optional[Credentials],
        content_sha256: str,
        date: datetime,
):
    """
    Do signature V4 of given request for given service name.

    Headers must already carry ``Host``, ``x-amz-date`` for ``date`` and,
    when credentials have a session token, ``X-Amz-Security-Token``. Every
    header except ``Authorization`` and ``User-Agent`` is signed. The
    ``Authorization`` header is set on passed headers which are returned.
    """

    _check_credentials(credentials, region, service_name)
    credentials = cast(Credentials, credentials)
    scope = _get_scope(date, region, service_name)
    canonical_request_hash, signed_headers = _get_canonical_request_hash(
        method, url, headers, content_sha256,
    )
    string_to_sign = _get_string_to_sign(date, scope, canonical_request_hash)
    signing_key = _get_signing_key(
        credentials.secret_key, date, region, service_name,
    )
    signature = _get_signature(signing_key, string_to_sign)
    authorization = _get_authorization(
        credentials.access_key, scope, signed_headers, signature,
    )
    headers["Authorization"] = authorization
    return headers


def _get_presign_query(
        url: SplitResult,
        credentials: Credentials,
        scope: str,
        date: datetime,
        expires: int,
        signed_headers: str,
) -> str:
    """Get query string of presign request without signature."""
    x_amz_credential = queryencode(credentials.access_key + "/" + scope)
    query = url.query + "&" if url.query else ""
    query += (
        f"X-Amz-Algorithm={SIGN_V4_ALGORITHM}"
        f"&X-Amz-Credential={x_amz_credential}"
        f"&X-Amz-Date={time.to_amz_date(date)}"
        f"&X-Amz-Expires={expires}"
        f"&X-Amz-SignedHeaders={signed_headers}"
    )
    if credentials.session_token:
        query += (
            f"&X-Amz-Security-Token={queryencode(credentials.session_token)}"
        )
    return query


def presign_v4(
        service_name: str,
        method: str,
        url: SplitResult,
        region: str,
        credentials: Optional[Credentials],
        date: datetime,
        expires: int,
) -> SplitResult:
    """
    Do signature V4 of given presign request. Signature material is placed
    in the query string and the payload is not signed.
    """

    _check_credentials(credentials, region, service_name)
    credentials = cast(Credentials, credentials)
    headers = {"host": url.netloc}
    signed_headers = "host"

    scope = _get_scope(date, region, service_name)
    url = url_replace(
        url,
        query=_get_presign_query(
            url, credentials, scope, date, expires, signed_headers,
        ),
    )
    canonical_request_hash, _ = _get_canonical_request_hash(
        method, url, headers, UNSIGNED_PAYLOAD,
    )
    string_to_sign = _get_string_to_sign(date, scope, canonical_request_hash)
    signing_key = _get_signing_key(
        credentials.secret_key, date, region, service_name,
    )
    signature = _get_signature(signing_key, string_to_sign)

    return url_replace(
        url, query=url.query + "&X-Amz-Signature=" + queryencode(signature),
    )
