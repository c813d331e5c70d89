from typing import Callable

import httpx
import pytest

from ai_paralegal_sdk._auth import ENV_API_KEY, ENV_BASE_URL
from ai_paralegal_sdk._client import ENV_HTTP_DEBUG
from ai_paralegal_sdk.client import AiParalegalClient

BASE_URL = "https://paralegal.test"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Unit tests never read connection settings from the developer's shell or .env.
    monkeypatch.delenv(ENV_API_KEY, raising=False)
    monkeypatch.delenv(ENV_BASE_URL, raising=False)
    monkeypatch.delenv(ENV_HTTP_DEBUG, raising=False)


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(requests_seen):
    """
    Build an AiParalegalClient whose sync and async transports are served by
    `handler`. Every request is recorded in `requests_seen`.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response], api_key: str | None = "sk-test") -> AiParalegalClient:
        def recording(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return handler(request)

        client = AiParalegalClient(base_url=BASE_URL, api_key=api_key)
        transport = httpx.MockTransport(recording)
        client.http._client = httpx.Client(transport=transport)
        client.http._aclient = httpx.AsyncClient(transport=transport)
        return client

    return _make
