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

import os
from unittest import TestCase, mock

from awslw.credentials import (ChainedProvider, Credentials, EnvAWSProvider,
                               StaticProvider, region_from_environment)
from awslw.error import ConfigurationError


class CredentialsTest(TestCase):
    def test_empty_keys(self):
        self.assertRaises(ConfigurationError, Credentials, "", "secret")
        self.assertRaises(ConfigurationError, Credentials, "access", "")
        self.assertRaises(ValueError, Credentials, None, None)

    def test_secret_not_in_repr(self):
        creds = Credentials("access", "secret", "token")
        self.assertNotIn("secret", repr(creds))
        self.assertNotIn("token", repr(creds))
        self.assertIn("access", repr(creds))


class StaticProviderTest(TestCase):
    def test_static_credentials(self):
        provider = StaticProvider("UXHW", "SECRET", "TOKEN")
        creds = provider.retrieve()
        self.assertEqual(creds.access_key, "UXHW")
        self.assertEqual(creds.secret_key, "SECRET")
        self.assertEqual(creds.session_token, "TOKEN")


class EnvAWSProviderTest(TestCase):
    @mock.patch.dict(os.environ, {
        "AWS_ACCESS_KEY_ID": "access",
        "AWS_SECRET_ACCESS_KEY": "secret",
        "AWS_SESSION_TOKEN": "token",
    }, clear=True)
    def test_env_aws_retrieve(self):
        creds = EnvAWSProvider().retrieve()
        self.assertEqual(creds.access_key, "access")
        self.assertEqual(creds.secret_key, "secret")
        self.assertEqual(creds.session_token, "token")

    @mock.patch.dict(os.environ, {
        "AWS_ACCESS_KEY": "access",
        "AWS_SECRET_KEY": "secret",
    }, clear=True)
    def test_env_aws_retrieve_fallback_no_token(self):
        creds = EnvAWSProvider().retrieve()
        self.assertEqual(creds.access_key, "access")
        self.assertEqual(creds.secret_key, "secret")
        self.assertIsNone(creds.session_token)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_env_aws_missing(self):
        self.assertRaises(ConfigurationError, EnvAWSProvider().retrieve)

    @mock.patch.dict(os.environ, {"AWS_DEFAULT_REGION": "eu-west-1"},
                     clear=True)
    def test_region_fallback(self):
        self.assertEqual(region_from_environment(), "eu-west-1")
        with mock.patch.dict(os.environ, {"AWS_REGION": "us-west-2"}):
            self.assertEqual(region_from_environment(), "us-west-2")

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_region_missing(self):
        self.assertIsNone(region_from_environment())


class ChainedProviderTest(TestCase):
    @mock.patch.dict(os.environ, {}, clear=True)
    def test_chain_retrieve(self):
        provider = ChainedProvider([
            EnvAWSProvider(),
            StaticProvider("access", "secret"),
        ])
        self.assertEqual(provider.retrieve().access_key, "access")

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_chain_all_fail(self):
        provider = ChainedProvider([EnvAWSProvider()])
        self.assertRaises(ConfigurationError, provider.retrieve)
