"""Tests for the provider request client."""

from __future__ import annotations

import logging

import httpx
import pytest

from conftest import RecordingHandler, completion
from prompt2sql.llm import (
    PROVIDERS,
    AuthenticationFailedError,
    EmptyCompletionError,
    InvalidCredentialFormatError,
    MissingCredentialError,
    ModelNotFoundError,
    PaymentRequiredError,
    ProviderRequestClient,
    RequestConfig,
    TransportFailureError,
    UnknownProviderError,
    build_chat_request,
    load_request_config,
    strip_code_fences,
)
from prompt2sql.prompts import SYSTEM_PROMPT, build_sql_generation_prompt
from prompt2sql.store import get_credential, save_credential, select_provider

_SCHEMA = "CREATE TABLE employees (id int, salary int);"
_PROMPT = "all employees earning over 1000"


@pytest.mark.asyncio
async def test_generate_end_to_end_with_deepseek(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(
        body=completion("```sql\nSELECT * FROM employees WHERE salary > 1000;\n```")
    )

    async with mock_http(handler) as http:
        sql = await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert sql == "SELECT * FROM employees WHERE salary > 1000;"
    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.deepseek.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-abc123"
    assert request.headers["Content-Type"] == "application/json"

    body = handler.last_body
    assert body["model"] == "deepseek-chat"
    assert body["temperature"] == 0.1
    assert body["max_tokens"] == 500
    system, user = body["messages"]
    assert system == {"role": "system", "content": SYSTEM_PROMPT}
    assert user["role"] == "user"
    assert _SCHEMA in user["content"]
    assert _PROMPT in user["content"]


@pytest.mark.asyncio
@pytest.mark.parametrize("provider_id", sorted(PROVIDERS))
async def test_missing_credential_fails_before_network(store, mock_http, provider_id) -> None:
    select_provider(store, provider_id)
    handler = RecordingHandler(body=completion("SELECT 1;"))

    async with mock_http(handler) as http:
        client = ProviderRequestClient(store, http_client=http)
        with pytest.raises(MissingCredentialError) as excinfo:
            await client.generate(_PROMPT, _SCHEMA)

    assert handler.requests == []
    assert excinfo.value.provider_id == provider_id
    assert PROVIDERS[provider_id].display_name in str(excinfo.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        RecordingHandler(401, body={"error": {"message": "Invalid key"}}),
        RecordingHandler(401, text="<html>denied</html>"),
        RecordingHandler(401),
        RecordingHandler(401, body=["unexpected"]),
    ],
)
async def test_http_401_is_authentication_failure_for_any_body(store, mock_http, handler) -> None:
    save_credential(store, "deepseek", "sk-abc123")

    async with mock_http(handler) as http:
        with pytest.raises(AuthenticationFailedError) as excinfo:
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert excinfo.value.status_code == 401
    assert "DeepSeek API key is valid" in str(excinfo.value)


@pytest.mark.asyncio
async def test_http_404_names_the_model(store, mock_http) -> None:
    save_credential(store, "openrouter", "sk-or-v1-abc")
    select_provider(store, "openrouter")
    handler = RecordingHandler(404, body={"error": {"message": "No such model"}})

    async with mock_http(handler) as http:
        with pytest.raises(ModelNotFoundError, match="openai/gpt-4-turbo"):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)


@pytest.mark.asyncio
async def test_http_402_is_payment_required(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(402, body={"error": {"message": "Insufficient Balance"}})

    async with mock_http(handler) as http:
        with pytest.raises(PaymentRequiredError, match="credits"):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)


@pytest.mark.asyncio
async def test_other_status_uses_provider_error_message(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(429, body={"error": {"message": "Rate limit reached"}})

    async with mock_http(handler) as http:
        with pytest.raises(UnknownProviderError) as excinfo:
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert str(excinfo.value) == "Rate limit reached"
    assert excinfo.value.status_code == 429


@pytest.mark.asyncio
async def test_other_status_without_error_payload_gets_generic_message(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(503, text="upstream unavailable")

    async with mock_http(handler) as http:
        with pytest.raises(UnknownProviderError, match=r"DeepSeek \(HTTP 503\)"):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"id": "cmpl-1"},
        {"choices": None},
        completion(None),
        completion("   "),
        completion("```sql\n```"),
    ],
)
async def test_success_without_usable_content_is_empty_completion(store, mock_http, body) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(body=body)

    async with mock_http(handler) as http:
        with pytest.raises(EmptyCompletionError, match="No response received from DeepSeek"):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)


@pytest.mark.asyncio
async def test_success_with_non_json_body_is_empty_completion(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(200, text="not json")

    async with mock_http(handler) as http:
        with pytest.raises(EmptyCompletionError):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)


@pytest.mark.asyncio
async def test_transport_error_is_transport_failure(store) -> None:
    save_credential(store, "deepseek", "sk-abc123")

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
        with pytest.raises(TransportFailureError, match="Could not reach DeepSeek") as excinfo:
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_switching_provider_uses_new_endpoint_model_and_key(store, mock_http) -> None:
    save_credential(store, "deepseek", "sk-deepseek")
    save_credential(store, "openrouter", "sk-or-router")
    handler = RecordingHandler(body=completion("SELECT 1;"))

    async with mock_http(handler) as http:
        client = ProviderRequestClient(store, http_client=http)
        await client.generate(_PROMPT, _SCHEMA)
        select_provider(store, "openrouter")
        await client.generate(_PROMPT, _SCHEMA)

    first, second = handler.requests
    assert str(first.url) == PROVIDERS["deepseek"].endpoint_url
    assert first.headers["Authorization"] == "Bearer sk-deepseek"
    assert str(second.url) == PROVIDERS["openrouter"].endpoint_url
    assert second.headers["Authorization"] == "Bearer sk-or-router"
    assert handler.last_body["model"] == "openai/gpt-4-turbo"


@pytest.mark.asyncio
async def test_malformed_key_is_still_sent_with_warning(store, mock_http, caplog) -> None:
    caplog.set_level(logging.WARNING)
    save_credential(store, "deepseek", "not-a-deepseek-key")
    handler = RecordingHandler(body=completion("SELECT 1;"))

    async with mock_http(handler) as http:
        sql = await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert sql == "SELECT 1;"
    assert handler.requests[0].headers["Authorization"] == "Bearer not-a-deepseek-key"
    assert any("format appears invalid" in record.message for record in caplog.records)


@pytest.mark.asyncio
async def test_non_ascii_key_is_saved_with_warning_but_never_sent(store, mock_http) -> None:
    warning = save_credential(store, "deepseek", "sk-abc…")
    handler = RecordingHandler(body=completion("SELECT 1;"))

    assert warning is not None and "non-ASCII" in warning
    assert get_credential(store, "deepseek") == "sk-abc…"

    async with mock_http(handler) as http:
        with pytest.raises(InvalidCredentialFormatError, match="non-ASCII") as excinfo:
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    assert excinfo.value.provider_id == "deepseek"
    assert handler.requests == []


def test_build_chat_request_rejects_non_ascii_key() -> None:
    config = RequestConfig(provider=PROVIDERS["openai"], api_key="sk-été")
    bundle = build_sql_generation_prompt("count users", "")

    with pytest.raises(InvalidCredentialFormatError, match="OpenAI"):
        build_chat_request(config, bundle)


@pytest.mark.asyncio
async def test_request_logs_carry_provider_context(store, mock_http, caplog) -> None:
    caplog.set_level(logging.INFO, logger="prompt2sql.llm.client")
    save_credential(store, "openrouter", "sk-or-v1-abc")
    select_provider(store, "openrouter")
    handler = RecordingHandler(status_code=401, body={"error": {"message": "bad key"}})

    async with mock_http(handler) as http:
        with pytest.raises(AuthenticationFailedError):
            await ProviderRequestClient(store, http_client=http).generate(_PROMPT, _SCHEMA)

    records = [record for record in caplog.records if record.name == "prompt2sql.llm.client"]
    assert {record.provider for record in records} == {"openrouter"}
    sent = next(record for record in records if record.getMessage().startswith("Sending"))
    assert sent.endpoint == "https://openrouter.ai/api/v1/chat/completions"
    assert "sk-or-v1-abc" not in sent.getMessage()
    failed = next(record for record in records if record.levelno == logging.ERROR)
    assert failed.status_code == 401


@pytest.mark.asyncio
async def test_generate_opens_its_own_client_when_none_is_injected(store, monkeypatch) -> None:
    save_credential(store, "deepseek", "sk-abc123")
    handler = RecordingHandler(body=completion("SELECT 2;"))
    original = httpx.AsyncClient

    def patched(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return original(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched)

    assert await ProviderRequestClient(store).generate(_PROMPT, _SCHEMA) == "SELECT 2;"
    assert len(handler.requests) == 1


def test_load_request_config_falls_back_to_default_provider(store) -> None:
    store.set("active_api_provider", "no-such-provider")
    store.set("deepseek_api_key", "sk-abc123")

    config = load_request_config(store)

    assert config.provider.id == "deepseek"
    assert config.api_key == "sk-abc123"


def test_build_chat_request_is_pure() -> None:
    config = RequestConfig(provider=PROVIDERS["openai"], api_key="sk-openai")
    bundle = build_sql_generation_prompt("count users", "CREATE TABLE users (id int);")

    first = build_chat_request(config, bundle)
    second = build_chat_request(config, bundle)

    assert first.content == second.content
    assert str(first.url) == "https://api.openai.com/v1/chat/completions"
    assert first.headers["Authorization"] == "Bearer sk-openai"


def test_build_chat_request_requires_key() -> None:
    config = RequestConfig(provider=PROVIDERS["deepseek"], api_key=None)
    bundle = build_sql_generation_prompt("count users", "")

    with pytest.raises(MissingCredentialError):
        build_chat_request(config, bundle)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("```sql\nSELECT 1;\n```", "SELECT 1;"),
        ("```\nSELECT 1;\n```", "SELECT 1;"),
        ("  ```SQL\n  SELECT 1;\n```  \n", "SELECT 1;"),
        ("```SELECT 1;```", "SELECT 1;"),
        ("```sql SELECT 1;```", "SELECT 1;"),
        ("```SQL\tSELECT 1;\n```", "SELECT 1;"),
        ("```sqlite3\nSELECT 1;\n```", "SELECT 1;"),
        ("```select 1;```", "select 1;"),
        ("SELECT 1;", "SELECT 1;"),
        ("\n\nSELECT a\nFROM t;\n", "SELECT a\nFROM t;"),
    ],
)
def test_strip_code_fences(raw: str, expected: str) -> None:
    assert strip_code_fences(raw) == expected
