"""Shared fixtures for tool tests.

Tools are built without the plugin runtime: credentials come from a stand-in
runtime and messages are captured as ``(kind, payload)`` tuples. HTTP traffic is
served by a ``FakeWeaviate`` router behind ``httpx.MockTransport``.
"""

import json
from types import SimpleNamespace

import httpx
import pytest

import utils.helpers as helpers
from utils.client import WeaviateClient

CREDENTIALS = {"url": "http://weaviate:8080", "api_key": "secret"}


class FakeWeaviate:
    """Routes requests by method and path to canned responses; unknown routes are 404."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method, path, status=200, body=None):
        self.routes[(method, path)] = (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, None))
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)

    def graphql_query(self) -> str:
        return self.last_json()["query"]


@pytest.fixture
def weaviate(monkeypatch):
    """Serve every client created by the tools from one FakeWeaviate."""
    server = FakeWeaviate()

    def factory(credentials):
        return WeaviateClient(credentials, transport=httpx.MockTransport(server))

    monkeypatch.setattr(helpers, "WeaviateClient", factory)
    return server


def build_tool(tool_cls, credentials=None):
    tool = tool_cls.__new__(tool_cls)
    tool.runtime = SimpleNamespace(credentials=dict(CREDENTIALS if credentials is None else credentials))
    tool.create_json_message = lambda data: ("json", data)
    tool.create_text_message = lambda text: ("text", text)
    return tool


def invoke(tool_cls, parameters, credentials=None):
    """Run a tool and return its single message."""
    messages = list(build_tool(tool_cls, credentials)._invoke(parameters))
    assert len(messages) == 1
    return messages[0]
