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

"""Helper functions."""

from __future__ import absolute_import, annotations

import hashlib
import platform
import re
import urllib.parse
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from urllib3._collections import HTTPHeaderDict

from . import __title__, __version__

_DEFAULT_USER_AGENT = (
    f"awslw ({platform.system()}; {platform.machine()}) "
    f"{__title__}/{__version__}"
)

ZERO_SHA256_HASH = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
AMZ_META_PREFIX = "x-amz-meta-"

DictType = Dict[str, Union[str, List[str], Tuple[str]]]
QueryType = Union[
    Mapping[str, Union[str, List[str], Tuple[str]]],
    Iterable[Tuple[str, str]],
]


def quote(
        resource: str | bytes,
        safe: str = "/",
        encoding: str | None = None,
        errors: str | None = None,
) -> str:
    """
    Wrapper to urllib.parse.quote() replacing back to '~' for older python
    versions.
    """
    return urllib.parse.quote(
        resource,
        safe=safe,
        encoding=encoding,
        errors=errors,
    ).replace("%7E", "~")


def queryencode(
        query: str | bytes,
        safe: str = "",
        encoding: str | None = None,
        errors: str | None = None,
) -> str:
    """Encode query parameter value."""
    return quote(query, safe, encoding, errors)


def sha256_hash(data: str | bytes | None) -> str:
    """Compute SHA-256 of data and return hash as hex encoded value."""
    data = data or b""
    hasher = hashlib.sha256()
    hasher.update(data.encode() if isinstance(data, str) else data)
    return hasher.hexdigest()


def url_replace(
        url: urllib.parse.SplitResult,
        scheme: str | None = None,
        netloc: str | None = None,
        path: str | None = None,
        query: str | None = None,
        fragment: str | None = None,
) -> urllib.parse.SplitResult:
    """Return new URL with replaced properties in given URL."""
    return urllib.parse.SplitResult(
        scheme if scheme is not None else url.scheme,
        netloc if netloc is not None else url.netloc,
        path if path is not None else url.path,
        query if query is not None else url.query,
        fragment if fragment is not None else url.fragment,
    )


def query_pairs(query_params: QueryType | None) -> list[tuple[str, str]]:
    """Flatten mapping or sequence of query parameters to ordered pairs."""
    if not query_params:
        return []
    items = (
        query_params.items() if isinstance(query_params, Mapping)
        else query_params
    )
    pairs = []
    for key, values in items:
        values = values if isinstance(values, (list, tuple)) else [values]
        pairs += [(key, "" if value is None else str(value))
                  for value in values]
    return pairs


def encode_query(pairs: Iterable[tuple[str, str]]) -> str:
    """Encode query pairs in given order."""
    return "&".join(
        f"{queryencode(key)}={queryencode(value)}" for key, value in pairs
    )


def metadata_to_headers(metadata: DictType | None) -> HTTPHeaderDict:
    """Convert user metadata to x-amz-meta-* headers."""
    headers = HTTPHeaderDict()
    for key, values in (metadata or {}).items():
        if not key.lower().startswith(AMZ_META_PREFIX):
            key = AMZ_META_PREFIX + key
        for value in values if isinstance(values, (list, tuple)) else [values]:
            headers.add(key, value)
    return headers


def headers_to_strings(
        headers: Mapping[str, str | list[str] | tuple[str]],
        titled_key: bool = False,
) -> str:
    """Convert HTTP headers to multi-line string."""
    values = []
    for key, value in headers.items():
        for item in value if isinstance(value, (list, tuple)) else [value]:
            if titled_key:
                item = re.sub(
                    r"Credential=([^/]+)",
                    "Credential=*REDACTED*",
                    re.sub(
                        r"Signature=([0-9a-f]+)",
                        "Signature=*REDACTED*",
                        item,
                    ),
                )
                if key.lower() == "x-amz-security-token":
                    item = "*REDACTED*"
            values.append(f"{key.title() if titled_key else key}: {item}")
    return "\n".join(values)
