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

import io
import os
from datetime import datetime, timedelta, timezone
from unittest import TestCase, mock
from urllib.parse import parse_qs, urlsplit

from awslw import Client, Request
from awslw.credentials import StaticProvider
from awslw.error import (ConfigurationError, ErrorKind,
                         MaxAttemptsExceededError, ParseError, ServiceError)
from awslw.http import Response
from awslw.retries import Retries
from awslw.signer import _get_canonical_request

empty_hash = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
dt = datetime(2015, 6, 20, 1, 2, 3, 0, timezone.utc)
ACCESS_KEY = "AKIDEXAMPLE"
SECRET_KEY = "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY"


def _client(service_name="s3", region="us-east-1", responses=None, **kwargs):
    transport = mock.Mock(
        side_effect=responses or [Response(200, content=b"ok")],
    )
    kwargs.setdefault("retries", Retries(sleep=mock.Mock()))
    client = Client(
        service_name,
        region=region,
        access_key=ACCESS_KEY,
        secret_key=kwargs.pop("secret_key", SECRET_KEY),
        session_token=kwargs.pop("session_token", None),
        transport=transport,
        **kwargs,
    )
    return client, transport


class SignedRequestTest(TestCase):
    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_get_bucket_key(self, _):
        client, transport = _client()
        response = client.execute(Request("GET", path="/bucket/key"))
        self.assertEqual(response.content, b"ok")

        method, url, headers, body = transport.call_args[0]
        self.assertEqual(method, "GET")
        self.assertEqual(url, "https://s3.us-east-1.amazonaws.com/bucket/key")
        self.assertIsNone(body)
        self.assertEqual(headers["Host"], "s3.us-east-1.amazonaws.com")
        self.assertEqual(headers["x-amz-date"], "20150620T010203Z")
        self.assertEqual(headers["x-amz-content-sha256"], empty_hash)
        self.assertNotIn("Content-Length", headers)

        canonical_request, _ = _get_canonical_request(
            "GET", urlsplit(url), headers, empty_hash,
        )
        self.assertEqual(
            canonical_request,
            'GET\n'
            '/bucket/key\n'
            '\n'
            'host:s3.us-east-1.amazonaws.com\n'
            'x-amz-content-sha256:' + empty_hash + '\n'
            'x-amz-date:20150620T010203Z\n'
            '\n'
            'host;x-amz-content-sha256;x-amz-date\n'
            + empty_hash,
        )
        self.assertEqual(
            headers["Authorization"],
            'AWS4-HMAC-SHA256 Credential='
            'AKIDEXAMPLE/20150620/us-east-1/s3/aws4_request, '
            'SignedHeaders=host;x-amz-content-sha256;x-amz-date, '
            'Signature='
            'ee8588ac87deef2abbb532b0a8cd8ddd99596943f1888e9d6470720e338ecce9',
        )

    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_session_token(self, _):
        client, transport = _client(session_token="SESSIONTOKEN")
        client.execute(Request(path="bucket/key"))
        headers = transport.call_args[0][2]
        self.assertEqual(headers["X-Amz-Security-Token"], "SESSIONTOKEN")
        self.assertEqual(
            headers["Authorization"],
            'AWS4-HMAC-SHA256 Credential='
            'AKIDEXAMPLE/20150620/us-east-1/s3/aws4_request, '
            'SignedHeaders=host;x-amz-content-sha256;x-amz-date;'
            'x-amz-security-token, '
            'Signature='
            'b0d6375389210ea603dd76bbc3bce52659af109ddf2a95255f04f226be232be1',
        )

    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_query_parameters(self, _):
        client, transport = _client("sqs", "ap-southeast-2")
        client.execute(Request(query_params={
            "Action": "GetQueueUrl",
            "QueueName": "my queue",
            "Version": "2012-11-05",
        }))
        _, url, headers, _ = transport.call_args[0]
        self.assertEqual(
            url,
            "https://sqs.ap-southeast-2.amazonaws.com/"
            "?Action=GetQueueUrl&QueueName=my%20queue&Version=2012-11-05",
        )
        self.assertEqual(
            headers["Authorization"],
            'AWS4-HMAC-SHA256 Credential='
            'AKIDEXAMPLE/20150620/ap-southeast-2/sqs/aws4_request, '
            'SignedHeaders=host;x-amz-content-sha256;x-amz-date, '
            'Signature='
            '48dfc607bbc8de6cdf103e969b533cfd03b6fbd6eb643a1a24f97f9e859dba39',
        )

    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_body_metadata_and_headers(self, _):
        client, transport = _client()
        request = Request(
            "put", path="/bucket/my key~", body="hello",
            headers={"Cache-Control": "no-cache"},
            metadata={"category": "something"},
        )
        request.add_metadata("x-amz-meta-owner", "me")
        client.execute(request)
        method, url, headers, body = transport.call_args[0]
        self.assertEqual(method, "PUT")
        self.assertEqual(
            url, "https://s3.us-east-1.amazonaws.com/bucket/my%20key~",
        )
        self.assertEqual(body, b"hello")
        self.assertEqual(headers["Content-Length"], "5")
        self.assertEqual(headers["Content-Type"], "application/octet-stream")
        self.assertEqual(headers["Cache-Control"], "no-cache")
        self.assertEqual(headers["x-amz-meta-category"], "something")
        self.assertEqual(headers["x-amz-meta-owner"], "me")
        self.assertEqual(
            headers["x-amz-content-sha256"],
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824",
        )
        self.assertIn(
            "SignedHeaders=cache-control;content-length;content-type;host;"
            "x-amz-content-sha256;x-amz-date;x-amz-meta-category;"
            "x-amz-meta-owner,",
            headers["Authorization"],
        )

    def test_unsigned_payload(self):
        client, transport = _client()
        client.execute(Request("PUT", path="/b/k", body=b"x",
                               unsigned_payload=True))
        headers = transport.call_args[0][2]
        self.assertEqual(headers["x-amz-content-sha256"], "UNSIGNED-PAYLOAD")

    def test_explicit_url(self):
        client, transport = _client()
        client.execute(
            Request(url="https://example.com/base/path?a=1")
            .add_query_param("b", "x/y"),
        )
        _, url, headers, _ = transport.call_args[0]
        self.assertEqual(url, "https://example.com/base/path?a=1&b=x%2Fy")
        self.assertEqual(headers["Host"], "example.com")

    def test_explicit_url_path_encoded(self):
        client, transport = _client()
        client.execute(Request(url="https://example.com/my key/a%20b~"))
        _, url, headers, _ = transport.call_args[0]
        self.assertEqual(url, "https://example.com/my%20key/a%20b~")
        canonical_request, _ = _get_canonical_request(
            "GET", urlsplit(url), headers, empty_hash,
        )
        self.assertTrue(
            canonical_request.startswith("GET\n/my%20key/a%20b~\n"),
        )

    def test_custom_endpoint(self):
        client, transport = _client(endpoint="http://localhost:9000/")
        client.execute(Request(path="/bucket"))
        self.assertEqual(
            transport.call_args[0][1], "http://localhost:9000/bucket",
        )

    def test_user_agent_not_signed(self):
        client, transport = _client()
        client.execute(Request(path="/"))
        headers = transport.call_args[0][2]
        self.assertIn("awslw", headers["User-Agent"])
        self.assertNotIn("user-agent", headers["Authorization"])


class RetryTest(TestCase):
    def test_resigned_on_every_attempt(self):
        client, transport = _client(
            responses=[Response(503), Response(500), Response(200)],
        )
        dates = [dt, dt + timedelta(seconds=1), dt + timedelta(seconds=2)]
        with mock.patch("awslw.time.utcnow", side_effect=dates):
            client.execute(Request(path="/bucket/key"))
        self.assertEqual(transport.call_count, 3)
        calls = [call[0][2] for call in transport.call_args_list]
        self.assertEqual(
            [headers["x-amz-date"] for headers in calls],
            ["20150620T010203Z", "20150620T010204Z", "20150620T010205Z"],
        )
        self.assertEqual(
            len({headers["Authorization"] for headers in calls}), 3,
        )

    def test_status_exhaustion_returns_response(self):
        client, transport = _client(
            responses=[Response(503, content=b"busy")] * 3,
            retries=Retries(max_attempts=3, sleep=mock.Mock()),
        )
        response = client.response(Request(path="/"))
        self.assertEqual(transport.call_count, 3)
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.content, b"busy")

    def test_transport_exhaustion_raises(self):
        errors = [ConnectionResetError("reset")] * 2
        client, transport = _client(
            responses=errors,
            retries=Retries(max_attempts=2, sleep=mock.Mock()),
        )
        with self.assertRaises(MaxAttemptsExceededError) as context:
            client.execute(Request(path="/"))
        self.assertEqual(transport.call_count, 2)
        self.assertIs(context.exception.cause, errors[-1])
        self.assertEqual(context.exception.kind, ErrorKind.TRANSPORT)


class ErrorTest(TestCase):
    def test_generic_service_error(self):
        body = (
            b"<?xml version='1.0' encoding='UTF-8'?>"
            b"<Error><Code>NoSuchKey</Code>"
            b"<Message>The resource you requested does not exist</Message>"
            b"<Resource>/bucket/key</Resource></Error>"
        )
        client, _ = _client(responses=[Response(404, content=body)])
        with self.assertRaises(ServiceError) as context:
            client.execute(Request(path="/bucket/key"))
        error = context.exception
        self.assertEqual(error.kind, ErrorKind.SERVICE)
        self.assertEqual(error.status_code, 404)
        self.assertEqual(error.content, body)
        self.assertEqual(error.code, "NoSuchKey")
        self.assertEqual(
            error.message, "The resource you requested does not exist",
        )

    def test_query_api_error_response(self):
        body = (
            b"<ErrorResponse><Error><Type>Sender</Type>"
            b"<Code>AWS.SimpleQueueService.NonExistentQueue</Code>"
            b"<Message>The specified queue does not exist.</Message>"
            b"</Error><RequestId>42</RequestId></ErrorResponse>"
        )
        client, _ = _client("sqs", responses=[Response(404, content=body)])
        with self.assertRaises(ServiceError) as context:
            client.execute(Request(query_params={"Action": "GetQueueUrl"}))
        self.assertEqual(
            context.exception.code, "AWS.SimpleQueueService.NonExistentQueue",
        )

    def test_non_xml_error_body_kept(self):
        client, _ = _client(responses=[Response(404, content=b"not found")])
        with self.assertRaises(ServiceError) as context:
            client.execute(Request(path="/"))
        self.assertIsNone(context.exception.code)
        self.assertEqual(context.exception.content, b"not found")
        self.assertIn("not found", str(context.exception))

    def test_exception_factories_first_match_wins(self):
        class NotFound(Exception):
            pass

        class Missing(Exception):
            pass

        factories = [
            (lambda r: r.status_code == 404, lambda r: NotFound(r.content)),
            (lambda r: r.status_code >= 400, lambda r: Missing(r.content)),
        ]
        client, _ = _client(
            responses=[Response(404, content=b"x"), Response(409)],
            exception_factories=factories,
        )
        self.assertRaises(NotFound, client.execute, Request(path="/"))
        self.assertRaises(Missing, client.execute, Request(path="/"))

    def test_response_does_not_raise(self):
        client, _ = _client(responses=[Response(404, content=b"x")])
        response = client.response(Request(path="/"))
        self.assertEqual(response.status_code, 404)

    def test_missing_credentials_before_network(self):
        transport = mock.Mock()
        with mock.patch.dict(os.environ, {"AWS_REGION": "us-east-1"},
                             clear=True):
            client = Client.from_environment("s3", transport=transport)
            self.assertRaises(
                ConfigurationError, client.execute, Request(path="/"),
            )
        transport.assert_not_called()


class ResponseDecodingTest(TestCase):
    def test_response_as_xml(self):
        client, _ = _client("sqs", responses=[Response(200, content=(
            b"<GetQueueUrlResponse><GetQueueUrlResult>"
            b"<QueueUrl>https://sqs.us-east-1.amazonaws.com/1/q</QueueUrl>"
            b"</GetQueueUrlResult></GetQueueUrlResponse>"
        ))])
        root = client.response_as_xml(Request())
        self.assertEqual(
            root.path("GetQueueUrlResult/QueueUrl").content,
            "https://sqs.us-east-1.amazonaws.com/1/q",
        )

    def test_response_as_xml_malformed(self):
        client, transport = _client(
            responses=[Response(200, content=b"<A><B></A>")],
        )
        self.assertRaises(ParseError, client.response_as_xml, Request())
        self.assertEqual(transport.call_count, 1)

    def test_decodings_raise_on_unsuccessful_status(self):
        client, _ = _client(responses=[
            Response(404, content=b"missing"),
            Response(503, content=b"busy"),
        ], retries=Retries(max_attempts=1, sleep=mock.Mock()))
        self.assertRaises(ServiceError, client.response_as_bytes, Request())
        self.assertRaises(ServiceError, client.response_as_utf8, Request())

    def test_response_as_utf8_and_bytes(self):
        client, _ = _client(responses=[
            Response(200, content="汉字".encode()),
            Response(200, content=b"\x00\x01"),
        ])
        self.assertEqual(client.response_as_utf8(Request()), "汉字")
        self.assertEqual(client.response_as_bytes(Request()), b"\x00\x01")


class PresignedUrlTest(TestCase):
    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_presigned_url(self, _):
        client = Client(
            "s3", region="us-east-1", access_key="minio",
            secret_key="minio123", endpoint="http://localhost:9000",
            transport=mock.Mock(),
        )
        url = client.presigned_url(
            Request(path="/bucket-name/objectName",
                    query_params={"versionId": "uuid"}),
            expires=timedelta(days=7),
        )
        self.assertEqual(
            url,
            'http://localhost:9000/bucket-name/objectName?versionId=uuid'
            '&X-Amz-Algorithm=AWS4-HMAC-SHA256'
            '&X-Amz-Credential=minio%2F20150620%2Fus-east-1%2Fs3%2F'
            'aws4_request'
            '&X-Amz-Date=20150620T010203Z&X-Amz-Expires=604800'
            '&X-Amz-SignedHeaders=host'
            '&X-Amz-Signature='
            '3ce13e2ca929fafa20581a05730e4e9435f2a5e20ec7c5a082d175692fb0a663',
        )

    def test_expires_in_seconds(self):
        client, transport = _client(session_token="TOKEN")
        url = client.presigned_url(Request(path="/b/k"), expires=60)
        query = parse_qs(urlsplit(url).query)
        self.assertEqual(query["X-Amz-Expires"], ["60"])
        self.assertEqual(query["X-Amz-Security-Token"], ["TOKEN"])
        transport.assert_not_called()

    def test_invalid_expires(self):
        client, _ = _client()
        for expires in [0, timedelta(days=7, seconds=1)]:
            with self.subTest(expires=expires):
                self.assertRaises(
                    ConfigurationError, client.presigned_url,
                    Request(path="/b/k"), expires,
                )


class ConfigurationTest(TestCase):
    def test_missing_values(self):
        transport = mock.Mock()
        self.assertRaises(ConfigurationError, Client, "", region="us-east-1",
                          access_key="a", secret_key="b", transport=transport)
        self.assertRaises(ConfigurationError, Client, "s3",
                          access_key="a", secret_key="b", transport=transport)
        self.assertRaises(ConfigurationError, Client, "s3",
                          region="us-east-1", access_key="a",
                          transport=transport)
        self.assertRaises(ConfigurationError, Client, "s3",
                          region="us-east-1", transport=transport)
        self.assertRaises(ConfigurationError, Client, "s3",
                          region="us-east-1", access_key="a", secret_key="b",
                          endpoint="localhost:9000", transport=transport)

    def test_path_and_url_exclusive(self):
        self.assertRaises(
            ConfigurationError, Request, path="/a", url="https://b/",
        )

    def test_invalid_url(self):
        client, _ = _client()
        self.assertRaises(
            ConfigurationError, client.execute, Request(url="/relative"),
        )

    @mock.patch.dict(os.environ, {
        "AWS_ACCESS_KEY_ID": "access",
        "AWS_SECRET_ACCESS_KEY": "secret",
        "AWS_SESSION_TOKEN": "token",
        "AWS_REGION": "eu-west-1",
    }, clear=True)
    @mock.patch("awslw.time.utcnow", return_value=dt)
    def test_from_environment(self, _):
        transport = mock.Mock(return_value=Response(200))
        client = Client.from_environment("lambda", transport=transport)
        self.assertEqual(client.region, "eu-west-1")
        self.assertEqual(
            client.endpoint, "https://lambda.eu-west-1.amazonaws.com",
        )
        client.execute(Request(path="/2015-03-31/functions"))
        headers = transport.call_args[0][2]
        self.assertEqual(headers["X-Amz-Security-Token"], "token")
        self.assertIn(
            "Credential=access/20150620/eu-west-1/lambda/aws4_request",
            headers["Authorization"],
        )

    def test_copy(self):
        factories = [(lambda r: False, lambda r: Exception())]
        client, transport = _client(
            "sqs", exception_factories=factories,
            responses=[Response(200), Response(200)],
        )
        copy = client.copy(service_name="sns")
        self.assertIsNot(copy, client)
        self.assertEqual(copy.service_name, "sns")
        self.assertEqual(copy.region, client.region)
        self.assertIs(copy.retries, client.retries)
        self.assertEqual(copy.exception_factories, client.exception_factories)
        self.assertEqual(copy.endpoint, "https://sns.us-east-1.amazonaws.com")
        self.assertEqual(client.service_name, "sqs")

        copy.execute(Request())
        self.assertIn("/sns/aws4_request", transport.call_args[0][2][
            "Authorization"])

        copy = client.copy(exception_factories=[])
        self.assertEqual(copy.exception_factories, ())

    def test_static_provider(self):
        client = Client(
            "s3", region="us-east-1",
            credentials=StaticProvider("access", "secret"),
            transport=mock.Mock(),
        )
        self.assertEqual(client.service_name, "s3")


class TraceTest(TestCase):
    def test_trace_redacts_credentials(self):
        client, _ = _client(
            session_token="SESSIONTOKEN",
            responses=[
                Response(200, {"x-amz-request-id": "1"}, b"<A/>"),
                Response(200),
            ],
        )
        stream = io.StringIO()
        client.trace_on(stream)
        client.execute(Request("PUT", path="/b/k", body=b"payload"))
        trace = stream.getvalue()
        self.assertTrue(trace.startswith("---------START-HTTP---------\n"))
        self.assertIn("PUT /b/k HTTP/1.1\n", trace)
        self.assertIn("Credential=*REDACTED*", trace)
        self.assertIn("Signature=*REDACTED*", trace)
        self.assertIn("X-Amz-Security-Token: *REDACTED*", trace)
        self.assertNotIn("SESSIONTOKEN", trace)
        self.assertNotIn(ACCESS_KEY, trace)
        self.assertNotIn(SECRET_KEY, trace)
        self.assertIn("payload", trace)
        self.assertIn("HTTP/1.1 200\n", trace)
        self.assertIn("<A/>", trace)
        self.assertTrue(trace.endswith("----------END-HTTP----------\n"))

        stream = io.StringIO()
        client.trace_on(stream)
        client.trace_off()
        client.response(Request())
        self.assertEqual(stream.getvalue(), "")

    def test_trace_transport_error(self):
        client, _ = _client(
            responses=[ValueError("boom")],
        )
        stream = io.StringIO()
        client.trace_on(stream)
        self.assertRaises(ValueError, client.execute, Request())
        self.assertIn("ValueError('boom')", stream.getvalue())

    def test_invalid_stream(self):
        client, _ = _client()
        self.assertRaises(ValueError, client.trace_on, None)
