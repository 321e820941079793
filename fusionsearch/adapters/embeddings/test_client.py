"""
Tests for the embeddings API client.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from fusionsearch.config import (
    ErrorCode,
    InvalidResponseShapeError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimited,
    ProviderServerError,
    ProviderTimeout,
)

from .client import EmbeddingAPIClient
from .models import EmbeddingAPIConfig, EmbeddingAPIResponse


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> EmbeddingAPIClient:
    config = EmbeddingAPIConfig(api_key="sk-test", dimension=3, base_url="https://example.test/v1")
    return EmbeddingAPIClient(config, transport=httpx.MockTransport(handler))


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "data": [{"embedding": [0.1, 0.2, 0.3], "index": 0}],
            "model": "text-embedding-3-small",
            "usage": {"prompt_tokens": 4, "total_tokens": 4},
        },
    )


# --- Model Tests ---


def test_config_defaults() -> None:
    """Test EmbeddingAPIConfig default values."""
    config = EmbeddingAPIConfig()
    assert config.model == "text-embedding-3-small"
    assert config.dimension == 1536
    assert config.max_input_tokens == 8191


def test_config_is_frozen() -> None:
    """Test EmbeddingAPIConfig is immutable."""
    config = EmbeddingAPIConfig()
    with pytest.raises(Exception):
        config.model = "other"  # type: ignore


def test_configured_flag() -> None:
    """Test configured reflects the API key."""
    assert EmbeddingAPIClient(EmbeddingAPIConfig(api_key="  ")).configured is False
    assert EmbeddingAPIClient(EmbeddingAPIConfig(api_key="sk-x")).configured is True


# --- Request/Response Tests ---


async def test_create_embedding_sends_model_and_dimension() -> None:
    """Test the request payload and auth header."""
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _ok(request)

    client = _client(handler)
    response = await client.create_embedding("hello world")
    await client.close()

    assert isinstance(response, EmbeddingAPIResponse)
    assert response.vector == [0.1, 0.2, 0.3]
    assert response.total_tokens == 4
    assert seen["url"] == "https://example.test/v1/embeddings"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "text-embedding-3-small",
        "input": "hello world",
        "dimensions": 3,
    }


@pytest.mark.parametrize(
    ("status", "error_type"),
    [
        (401, ProviderAuthError),
        (403, ProviderAuthError),
        (429, ProviderRateLimited),
        (500, ProviderServerError),
        (503, ProviderServerError),
    ],
)
async def test_status_classification(status: int, error_type: type[ProviderError]) -> None:
    """Test HTTP statuses map onto the provider error taxonomy."""
    client = _client(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(error_type) as excinfo:
        await client.create_embedding("hello")
    assert excinfo.value.details["status"] == status


async def test_unexpected_status_is_generic_provider_error() -> None:
    """Test other 4xx statuses raise the base provider error."""
    client = _client(lambda request: httpx.Response(400, json={"error": "bad"}))

    with pytest.raises(ProviderError) as excinfo:
        await client.create_embedding("hello")
    assert excinfo.value.code == ErrorCode.PROVIDER_FAILED


async def test_timeout_classification() -> None:
    """Test transport timeouts become ProviderTimeout."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ProviderTimeout):
        await _client(handler).create_embedding("hello")


async def test_connection_failure_classification() -> None:
    """Test transport failures become ProviderServerError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderServerError):
        await _client(handler).create_embedding("hello")


@pytest.mark.parametrize(
    "body",
    [
        {"data": []},
        {"data": [{"embedding": "not a vector"}]},
        {"data": [{"embedding": [0.1, None, 0.3]}]},
        {"unexpected": True},
    ],
)
async def test_malformed_body(body: dict) -> None:
    """Test malformed bodies raise InvalidResponseShapeError."""
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(InvalidResponseShapeError):
        await client.create_embedding("hello")


async def test_non_json_body() -> None:
    """Test a non-JSON 200 response is a shape error."""
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(InvalidResponseShapeError):
        await client.create_embedding("hello")


def test_transient_flags() -> None:
    """Test which provider errors are retried."""
    assert ProviderRateLimited("x").transient is True
    assert ProviderTimeout("x").transient is True
    assert ProviderServerError("x").transient is True
    assert ProviderAuthError("x").transient is False
    assert InvalidResponseShapeError("x").transient is False
