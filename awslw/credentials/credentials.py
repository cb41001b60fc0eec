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

"""Credential definitions to access AWS services."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..error import ConfigurationError


@dataclass(frozen=True)
class Credentials:
    """
    Represents credentials access key, secret key and session token.
    """

    access_key: str
    secret_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.access_key:
            raise ConfigurationError("Access key must not be empty")

        if not self.secret_key:
            raise ConfigurationError("Secret key must not be empty")
