"""Shared fixtures: an in-memory Flocker control service."""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest

from flockervol.config import ProvisionConfig
from flockervol.control.client import ConnectionParams, ControlServiceClient

BASE = "/v1"


class FakeControlService:
    """Minimal control service speaking the dataset API over MockTransport.

    Created datasets become live after `converge_after` state lookups
    (0 = live on the first lookup, None = never).
    """

    def __init__(self) -> None:
        self.configurations: list[dict[str, Any]] = []
        self.states: list[dict[str, Any]] = []
        self.create_status = 201
        self.next_dataset_id = "new-dataset-id"
        self.converge_after: int | None = 0
        self.requests: list[httpx.Request] = []
        self._pending: dict[str, int | None] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, method: str, path: str) -> int:
        return sum(
            1
            for r in self.requests
            if r.method == method and r.url.path == f"{BASE}/{path}"
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == f"{BASE}/configuration/datasets":
            if request.method == "GET":
                return httpx.Response(200, json=self.configurations)
            return self._create(request)

        if path == f"{BASE}/state/datasets":
            self._converge()
            return httpx.Response(200, json=self.states)

        if path == f"{BASE}/version":
            return httpx.Response(200, json={"flocker": "1.15.0"})

        return httpx.Response(404, json={"description": "Not found"})

    def _create(self, request: httpx.Request) -> httpx.Response:
        if self.create_status >= 300:
            return httpx.Response(
                self.create_status, json={"description": "The dataset already exists."}
            )
        body = json.loads(request.content)
        record = {**body, "dataset_id": self.next_dataset_id}
        self.configurations.append(record)
        self._pending[self.next_dataset_id] = self.converge_after
        return httpx.Response(self.create_status, json=record)

    def _converge(self) -> None:
        for dataset_id, remaining in list(self._pending.items()):
            if remaining is None:
                continue
            if remaining == 0:
                self.states.append(
                    {"dataset_id": dataset_id, "path": f"/flocker/{dataset_id}"}
                )
                del self._pending[dataset_id]
            else:
                self._pending[dataset_id] = remaining - 1


@pytest.fixture
def fake_service() -> FakeControlService:
    return FakeControlService()


@pytest.fixture
def connection_params() -> ConnectionParams:
    return ConnectionParams(host="control-service", port=4523, scheme="http")


@pytest.fixture
async def client(
    connection_params: ConnectionParams, fake_service: FakeControlService
) -> AsyncIterator[ControlServiceClient]:
    """ControlServiceClient talking to the fake service."""
    client = ControlServiceClient(connection_params, transport=fake_service.transport)
    yield client
    await client.close()


@pytest.fixture
def fast_config() -> ProvisionConfig:
    """Millisecond-scale wait so timing tests stay quick."""
    return ProvisionConfig(wait_timeout=0.2, poll_interval=0.01)
