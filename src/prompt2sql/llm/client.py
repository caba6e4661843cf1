"""Request client that turns a prompt and schema into SQL via the active provider."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from prompt2sql.llm.errors import (
    AuthenticationFailedError,
    EmptyCompletionError,
    InvalidCredentialFormatError,
    MissingCredentialError,
    ModelNotFoundError,
    PaymentRequiredError,
    ProviderError,
    TransportFailureError,
    UnknownProviderError,
)
from prompt2sql.llm.providers import (
    ACTIVE_PROVIDER_KEY,
    MAX_TOKENS,
    TEMPERATURE,
    ProviderConfig,
    check_credential_format,
    ensure_transmittable,
    resolve_provider,
)
from prompt2sql.logging import redact_secret
from prompt2sql.models.generation import ChatCompletionResponse, ProviderErrorResponse
from prompt2sql.prompts.sql_generation import PromptBundle, build_sql_generation_prompt

if TYPE_CHECKING:
    from prompt2sql.store.credentials import CredentialStore

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[ \t]*[A-Za-z0-9_+-]*[ \t]*(?:\r?\n|$)")
_FENCE = "```"
_INLINE_SQL_TAG = re.compile(r"^sql(?=\s)", re.IGNORECASE)


@dataclass(frozen=True)
class RequestConfig:
    """Provider and credential to use for one generation call."""

    provider: ProviderConfig
    api_key: str | None


def load_request_config(store: CredentialStore) -> RequestConfig:
    """Read the active provider and its API key from ``store``."""
    provider = resolve_provider(store.get(ACTIVE_PROVIDER_KEY))
    return RequestConfig(provider=provider, api_key=store.get(provider.credential_key))


def strip_code_fences(text: str) -> str:
    """Remove surrounding triple-backtick fences and whitespace."""
    cleaned = text.strip()
    match = _FENCE_OPEN.match(cleaned)
    if match:
        cleaned = cleaned[match.end():]
    elif cleaned.startswith(_FENCE):
        cleaned = _INLINE_SQL_TAG.sub("", cleaned[len(_FENCE):], count=1)
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


def build_chat_request(config: RequestConfig, prompt: PromptBundle) -> httpx.Request:
    """Build the chat-completions POST for ``config.provider``."""
    if not config.api_key:
        raise MissingCredentialError(
            f"API key not found. Please save your {config.provider.display_name} "
            "API key first.",
            provider_id=config.provider.id,
        )
    ensure_transmittable(config.provider, config.api_key)

    body = {
        "model": config.provider.model,
        "messages": [
            {"role": "system", "content": prompt.system_prompt},
            {"role": "user", "content": prompt.user_prompt},
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
    }
    return httpx.Request(
        "POST",
        config.provider.endpoint_url,
        content=json.dumps(body).encode("utf-8"),
        headers={
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        },
    )


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_for_status(provider: ProviderConfig, response: httpx.Response) -> ProviderError:
    name = provider.display_name
    status = response.status_code

    if status == 401:
        return AuthenticationFailedError(
            f"Authentication failed. Please check that your {name} API key is valid.",
            provider_id=provider.id,
            status_code=status,
        )
    if status == 404:
        return ModelNotFoundError(
            f"Model '{provider.model}' not found. Please verify the model name or "
            f"check your {name} account for available models.",
            provider_id=provider.id,
            status_code=status,
        )
    if status == 402:
        return PaymentRequiredError(
            f"Payment required. Your {name} account may need credits or has "
            "exceeded token limits.",
            provider_id=provider.id,
            status_code=status,
        )

    detail: str | None = None
    payload = _json_or_none(response)
    if isinstance(payload, dict):
        try:
            detail = ProviderErrorResponse.model_validate(payload).message
        except ValidationError:
            detail = None
    return UnknownProviderError(
        detail or f"Failed to generate SQL using {name} (HTTP {status}).",
        provider_id=provider.id,
        status_code=status,
    )


def extract_sql(provider: ProviderConfig, response: httpx.Response) -> str:
    """Turn a provider response into cleaned SQL or raise a typed failure."""
    if not response.is_success:
        raise _error_for_status(provider, response)

    empty = EmptyCompletionError(
        f"No response received from {provider.display_name}. Please try again.",
        provider_id=provider.id,
        status_code=response.status_code,
    )

    payload = _json_or_none(response)
    if not isinstance(payload, dict):
        raise empty
    try:
        completion = ChatCompletionResponse.model_validate(payload)
    except ValidationError as exc:
        raise empty from exc

    content = completion.first_content()
    if content is None:
        raise empty
    sql = strip_code_fences(content)
    if not sql:
        raise empty
    return sql


class ProviderRequestClient:
    """Generate SQL with whichever provider is active in a credential store.

    When ``http_client`` is given it is reused across calls and left open;
    otherwise each call opens and closes its own client.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._http_client = http_client

    async def generate(self, prompt: str, schema: str) -> str:
        """Generate SQL for ``prompt`` against ``schema`` using the active provider."""
        config = load_request_config(self._store)
        return await self.generate_with_config(prompt, schema, config)

    async def generate_with_config(
        self, prompt: str, schema: str, config: RequestConfig
    ) -> str:
        provider = config.provider
        bundle = build_sql_generation_prompt(prompt, schema)
        request = build_chat_request(config, bundle)

        try:
            check_credential_format(provider, config.api_key or "")
        except InvalidCredentialFormatError as exc:
            logger.warning("%s", exc, extra={"provider": provider.id})

        logger.info(
            "Sending request to %s at %s with API key %s",
            provider.display_name,
            provider.endpoint_url,
            redact_secret(config.api_key or ""),
            extra={"provider": provider.id, "endpoint": provider.endpoint_url},
        )
        response = await self._send(provider, request)
        logger.info(
            "%s API response status: %s",
            provider.display_name,
            response.status_code,
            extra={"provider": provider.id, "status_code": response.status_code},
        )

        try:
            return extract_sql(provider, response)
        except ProviderError as exc:
            logger.error(
                "%s API error: %s",
                provider.display_name,
                exc,
                extra={"provider": provider.id, "status_code": exc.status_code},
            )
            raise

    async def _send(self, provider: ProviderConfig, request: httpx.Request) -> httpx.Response:
        try:
            if self._http_client is not None:
                return await self._http_client.send(request)
            async with httpx.AsyncClient() as client:
                return await client.send(request)
        except httpx.TransportError as exc:
            logger.error(
                "Request to %s failed: %s",
                provider.display_name,
                exc,
                extra={"provider": provider.id, "endpoint": provider.endpoint_url},
            )
            raise TransportFailureError(
                f"Could not reach {provider.display_name}: {exc}",
                provider_id=provider.id,
            ) from exc
