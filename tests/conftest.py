"""Shared fixtures: a fake Flex API served through httpx.MockTransport."""

import csv
import io
import itertools
import json
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from rich.console import Console

from flex_pinot.client.flex_client import FlexClient
from flex_pinot.config import FlexInstanceConfig, ImportOptions, RunConfig
from flex_pinot.reporting.console import ImportReporter

HEADERS = [
    "Type",
    "Ref",
    "Link to",
    "Protocol",
    "Bucket",
    "Hostname",
    "Path",
    "Key",
    "Secret",
    "Shard",
    "Description",
    "PollingInterval",
    "HousekeepingPeriod",
    "WorkflowID",
    "WorkflowOwner",
    "InboxMetadata",
    "Tags",
]


class FakeFlex:
    """Records requests and answers them from registered routes.

    Routes are ``(method, path regex, responder)``; the most recently added
    matching route wins. Unmatched requests get a 404.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: list[tuple[str, re.Pattern, Callable[[httpx.Request], httpx.Response]]] = []
        self._ids = itertools.count(101)

        self.add("GET", r"/api/accounts", json={"accounts": [{"id": 7}]})
        self.add("GET", r"/api/resources;name=.*", json={"totalCount": 0})
        self.add("POST", r"/api/resources", responder=self._create)
        self.add("PUT", r"/api/resources/[^/]+/configuration", json={})
        self.add("POST", r"/api/resources/[^/]+/tags", json={})
        self.add("POST", r"/api/resources/[^/]+/actions", json={})

    def _create(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(201, json={"id": next(self._ids), "name": body["name"]})

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
        responder: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        if responder is None:

            def responder(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text)
                return httpx.Response(status, json=json if json is not None else {})

        self.routes.append((method, re.compile(path), responder))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.decode()
        for method, pattern, responder in reversed(self.routes):
            if method == request.method and pattern.fullmatch(path):
                return responder(request)
        return httpx.Response(404, json={"message": "Not found"})

    def calls(self, method: str | None = None, path: str | None = None) -> list[httpx.Request]:
        """Requests filtered by method and exact raw path."""
        return [
            r
            for r in self.requests
            if (method is None or r.method == method)
            and (path is None or r.url.raw_path.decode() == path)
        ]

    def mutating_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in {"POST", "PUT", "PATCH", "DELETE"}]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def fake_flex() -> FakeFlex:
    return FakeFlex()


@pytest.fixture
def flex_config() -> FlexInstanceConfig:
    return FlexInstanceConfig(url="https://flex.test/", username="admin", password="s3cret")


@pytest.fixture
def client(fake_flex, flex_config) -> FlexClient:
    flex_client = FlexClient(flex_config, transport=httpx.MockTransport(fake_flex.handler))
    yield flex_client
    flex_client.close()


@pytest.fixture
def make_config(flex_config) -> Callable[..., RunConfig]:
    def _make(**options: bool) -> RunConfig:
        return RunConfig(flex=flex_config, options=ImportOptions(**options))

    return _make


@pytest.fixture
def reporter() -> ImportReporter:
    return ImportReporter(Console(file=io.StringIO(), width=200, highlight=False))


def output_of(reporter: ImportReporter) -> str:
    return reporter.console.file.getvalue()


@pytest.fixture
def write_csv(tmp_path) -> Callable[..., Path]:
    """Write rows (dicts keyed by header) to a CSV file and return its path."""

    def _write(rows: list[dict[str, str]], headers: list[str] | None = None) -> Path:
        headers = headers or HEADERS
        path = tmp_path / "resources.csv"
        with open(path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for row in rows:
                writer.writerow([row.get(h, "") for h in headers])
        return path

    return _write


STORAGE_S1 = {
    "Type": "storage",
    "Ref": "S1",
    "Protocol": "s3",
    "Bucket": "media-bucket",
    "Hostname": "s3.eu-west-1.amazonaws.com",
    "Path": "/ingest",
    "Key": "AKIA123",
    "Secret": "topsecret",
    "Shard": "Yes",
}

INBOX_I1 = {"Type": "inbox", "Ref": "I1", "Link to": "S1"}
