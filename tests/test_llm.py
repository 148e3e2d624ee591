from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
from openai import APIConnectionError, APIStatusError

from startup_companion.config import load_settings
from startup_companion.errors import ConfigurationError, MalformedResponseError, UpstreamError
from startup_companion.llm import APP_TITLE, CompletionClient, PromptSpec

SPEC = PromptSpec(system_prompt="  You are a guide.  ", user_prompt="Business Information:", max_tokens=3000)
REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def _client_with(create: AsyncMock) -> CompletionClient:
    client = CompletionClient(load_settings({"OPENROUTER_API_KEY": "or-key"}))
    fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    client._client_cache = ("or-key", fake)
    return client


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.mark.asyncio
async def test_missing_api_key_is_a_configuration_error() -> None:
    client = CompletionClient(load_settings({}))

    with pytest.raises(ConfigurationError, match="API_KEY_NOT_CONFIGURED"):
        await client.complete(SPEC)


@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages() -> None:
    create = AsyncMock(return_value=_completion("# Guide"))
    client = _client_with(create)

    text = await client.complete(SPEC)

    assert text == "# Guide"
    kwargs = create.await_args.kwargs
    assert kwargs["messages"] == [
        {"role": "system", "content": "You are a guide."},
        {"role": "user", "content": "Business Information:"},
    ]
    assert kwargs["max_tokens"] == 3000
    assert kwargs["temperature"] == 0.7


@pytest.mark.asyncio
async def test_non_success_status_becomes_upstream_error() -> None:
    response = httpx.Response(429, request=REQUEST)
    create = AsyncMock(side_effect=APIStatusError("rate limited", response=response, body=None))
    client = _client_with(create)

    with pytest.raises(UpstreamError) as excinfo:
        await client.complete(SPEC)

    assert excinfo.value.status == 429
    assert str(excinfo.value) == "API_ERROR: 429"


@pytest.mark.asyncio
async def test_connection_failure_has_no_status() -> None:
    create = AsyncMock(side_effect=APIConnectionError(request=REQUEST))
    client = _client_with(create)

    with pytest.raises(UpstreamError) as excinfo:
        await client.complete(SPEC)

    assert excinfo.value.status is None


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [SimpleNamespace(choices=[]), _completion(None), _completion("")])
async def test_missing_content_is_malformed(response) -> None:
    client = _client_with(AsyncMock(return_value=response))

    with pytest.raises(MalformedResponseError):
        await client.complete(SPEC)


def test_client_is_built_once_per_key() -> None:
    client = CompletionClient(load_settings({"OPENROUTER_API_KEY": "or-key"}))

    first = client._get_client()

    assert client._get_client() is first
    assert first.default_headers["X-Title"] == APP_TITLE
    assert str(first.base_url).startswith("https://openrouter.ai/api/v1")
