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

from awslw import Client, Request

client = Client(
    "s3",
    region="us-east-1",
    access_key="Q3AM3UQ867SPQQA43P2F",
    secret_key="zuf+tfteSlswRu7BJ86wekitnifILbZam1KYY3TG",
)

# Upload data with content-type and user metadata.
request = Request(
    "PUT",
    path="/my-bucket/my-object",
    headers={"Content-Type": "text/plain"},
    metadata={"category": "reports"},
    body=b"hello",
)
client.execute(request)

# Read user metadata back.
response = client.execute(Request("HEAD", path="/my-bucket/my-object"))
print(response.metadata())
