"""Static table of supported chat-completion providers."""

from __future__ import annotations

from dataclasses import dataclass

from prompt2sql.llm.errors import InvalidCredentialFormatError

DEFAULT_PROVIDER_ID = "deepseek"
ACTIVE_PROVIDER_KEY = "active_api_provider"

TEMPERATURE = 0.1
MAX_TOKENS = 500


class UnsupportedProviderError(ValueError):
    """Raised when a provider identifier is not in the provider table."""


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoint, model and key format for one provider."""

    id: str
    display_name: str
    endpoint_url: str
    model: str
    key_prefix: str | None = None

    @property
    def credential_key(self) -> str:
        return f"{self.id}_api_key"


PROVIDERS: dict[str, ProviderConfig] = {
    provider.id: provider
    for provider in (
        ProviderConfig(
            id="deepseek",
            display_name="DeepSeek",
            endpoint_url="https://api.deepseek.com/v1/chat/completions",
            model="deepseek-chat",
            key_prefix="sk-",
        ),
        ProviderConfig(
            id="openrouter",
            display_name="OpenRouter",
            endpoint_url="https://openrouter.ai/api/v1/chat/completions",
            model="openai/gpt-4-turbo",
            key_prefix="sk-or-",
        ),
        ProviderConfig(
            id="openai",
            display_name="OpenAI",
            endpoint_url="https://api.openai.com/v1/chat/completions",
            model="gpt-4-turbo",
            key_prefix="sk-",
        ),
    )
}


def get_provider(provider_id: str) -> ProviderConfig:
    """Look up a provider, rejecting unknown identifiers."""
    normalized = provider_id.strip().lower()
    try:
        return PROVIDERS[normalized]
    except KeyError as exc:
        raise UnsupportedProviderError(
            f"Unsupported provider {provider_id!r}. "
            f"Choose one of: {', '.join(sorted(PROVIDERS))}."
        ) from exc


def resolve_provider(provider_id: str | None) -> ProviderConfig:
    """Resolve a stored selection, falling back to the default provider."""
    if provider_id:
        provider = PROVIDERS.get(provider_id.strip().lower())
        if provider is not None:
            return provider
    return PROVIDERS[DEFAULT_PROVIDER_ID]


def ensure_transmittable(provider: ProviderConfig, secret: str) -> None:
    """Raise InvalidCredentialFormatError when ``secret`` cannot go in an HTTP header."""
    if secret.isascii():
        return
    raise InvalidCredentialFormatError(
        f"The {provider.display_name} API key contains non-ASCII characters "
        "and cannot be sent. Please copy the key again from your provider "
        "dashboard.",
        provider_id=provider.id,
    )


def check_credential_format(provider: ProviderConfig, secret: str) -> None:
    """Raise InvalidCredentialFormatError when ``secret`` looks malformed."""
    ensure_transmittable(provider, secret)
    if provider.key_prefix is None or secret.startswith(provider.key_prefix):
        return
    raise InvalidCredentialFormatError(
        f"The API key format appears invalid. {provider.display_name} API keys "
        f"typically start with '{provider.key_prefix}'.",
        provider_id=provider.id,
    )
