import json

import pytest

from v20.infrastructure.context import Context
from v20.infrastructure.transport import RawResponse

ACCOUNT_ID = "101-004-1234567-001"


class FakeStream:
    def __init__(self, status, chunks, reason="OK", content_type="application/octet-stream", body=""):
        self.status = status
        self.reason = reason
        self.content_type = content_type
        self.chunks = chunks
        self.body = body
        self.closed = False

    def iter_chunks(self):
        for chunk in self.chunks:
            yield chunk

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True


class FakeTransport:
    """Records every call and answers from a queue instead of the network."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.streams = []

    def reply(self, status, body=None, content_type="application/json", reason="OK"):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        self.responses.append(RawResponse(status, reason, content_type, body or ""))

    def reply_stream(self, status, chunks=(), **kwargs):
        self.streams.append(FakeStream(status, list(chunks), **kwargs))

    def request(self, method, url, headers, body=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body})
        return self.responses.pop(0)

    def stream(self, method, url, headers, body=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body})
        return self.streams.pop(0)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def ctx(transport):
    return Context(
        "api.example.com",
        application="tests",
        token="secret-token",
        stream_hostname="stream.example.com",
        transport=transport,
    )


@pytest.fixture
def account_id():
    return ACCOUNT_ID
