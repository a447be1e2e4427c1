from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from career_search.core.config import Settings
from career_search.main import create_application
from career_search.services.orchestrator import SearchOrchestrator
from tests.fakes import (
    SERP_PAYLOAD,
    FakeCompletionClient,
    make_orchestrator,
    make_settings,
)

ClientFactory = Callable[..., TestClient]


@pytest.fixture
def http_calls() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def build_client(
    http_calls: list[dict[str, Any]],
) -> Iterator[ClientFactory]:
    clients: list[TestClient] = []

    def factory(
        *,
        settings: Settings | None = None,
        serp_replies: list[Any] | None = None,
        completion_client: FakeCompletionClient | None = None,
        orchestrator: SearchOrchestrator | None = None,
    ) -> TestClient:
        active = settings or make_settings()
        if orchestrator is None:
            orchestrator = make_orchestrator(
                active,
                serp_replies=list(serp_replies or []),
                http_calls=http_calls,
                completion_client=completion_client,
            )
        app = create_application(active, orchestrator=orchestrator)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    try:
        yield factory
    finally:
        for client in clients:
            client.__exit__(None, None, None)


@pytest.fixture(name="client")
def client_fixture(
    build_client: ClientFactory, completion_client: FakeCompletionClient
) -> TestClient:
    return build_client(
        serp_replies=[SERP_PAYLOAD], completion_client=completion_client
    )
