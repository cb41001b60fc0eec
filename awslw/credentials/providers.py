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

"""Credential providers."""

from __future__ import annotations

import os
from abc import ABCMeta, abstractmethod
from typing import Optional, cast

from ..error import ConfigurationError
from .credentials import Credentials


def region_from_environment() -> Optional[str]:
    """Return region from AWS environment variables."""
    return (
        os.environ.get("AWS_REGION") or
        os.environ.get("AWS_DEFAULT_REGION") or
        None
    )


class Provider(metaclass=ABCMeta):  # pylint: disable=too-few-public-methods
    """Credential retriever."""

    @abstractmethod
    def retrieve(self) -> Credentials:
        """Retrieve credentials."""


class ChainedProvider(Provider):
    """Chained credential provider."""

    def __init__(self, providers: list[Provider]):
        self._providers = providers

    def retrieve(self) -> Credentials:
        """Retrieve credentials from first provider that succeeds."""
        for provider in self._providers:
            try:
                return provider.retrieve()
            except ConfigurationError:
                # Ignore this error and iterate other providers.
                pass

        raise ConfigurationError("All providers fail to fetch credentials")


class EnvAWSProvider(Provider):
    """Credential provider from AWS environment variables."""

    def retrieve(self) -> Credentials:
        """Retrieve credentials."""
        return Credentials(
            access_key=(
                cast(
                    str,
                    os.environ.get("AWS_ACCESS_KEY_ID") or
                    os.environ.get("AWS_ACCESS_KEY"),
                )
            ),
            secret_key=(
                cast(
                    str,
                    os.environ.get("AWS_SECRET_ACCESS_KEY") or
                    os.environ.get("AWS_SECRET_KEY"),
                )
            ),
            session_token=os.environ.get("AWS_SESSION_TOKEN") or None,
        )


class StaticProvider(Provider):
    """Fixed credential provider."""

    def __init__(
            self,
            access_key: str,
            secret_key: str,
            session_token: str | None = None,
    ):
        self._credentials = Credentials(access_key, secret_key, session_token)

    def retrieve(self) -> Credentials:
        """Return passed credentials."""
        return self._credentials
