"""Persistent key-value store for provider API keys and the active provider."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from prompt2sql.llm.errors import InvalidCredentialFormatError
from prompt2sql.llm.providers import (
    ACTIVE_PROVIDER_KEY,
    ProviderConfig,
    check_credential_format,
    get_provider,
    resolve_provider,
)

STORE_FORMAT_VERSION = "1.0"

logger = logging.getLogger(__name__)


class CredentialStoreError(RuntimeError):
    """Raised when credential store operations fail."""


class CredentialStore(Protocol):
    """Named string storage consumed by the request client."""

    def get(self, name: str) -> str | None:
        """Return the stored value for ``name``, or None when absent."""

    def set(self, name: str, value: str) -> None:
        """Store ``value`` under ``name``, replacing any previous value."""


class MemoryCredentialStore:
    """In-process store backed by a dict."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


class JsonFileCredentialStore:
    """Store persisted as a versioned JSON document on local disk.

    The file is read on every ``get`` so that separate processes observe each
    other's writes. A missing file behaves like an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CredentialStoreError(
                f"Credential store file is not valid JSON: {exc}"
            ) from exc
        except OSError as exc:
            raise CredentialStoreError(
                f"Failed to read credential store file: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise CredentialStoreError(
                "Credential store payload root must be a JSON object."
            )

        version = payload.get("store_format_version")
        if version != STORE_FORMAT_VERSION:
            raise CredentialStoreError(
                "Unsupported credential store format version: "
                f"{version!r}. Expected {STORE_FORMAT_VERSION!r}."
            )

        values = payload.get("values", {})
        if not isinstance(values, dict) or not all(
            isinstance(key, str) and isinstance(item, str)
            for key, item in values.items()
        ):
            raise CredentialStoreError(
                "Credential store 'values' must map strings to strings."
            )
        return values

    def get(self, name: str) -> str | None:
        return self._load().get(name)

    def set(self, name: str, value: str) -> None:
        values = self._load()
        values[name] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CredentialStoreError(
                f"Failed to create credential store directory: {exc}"
            ) from exc

        document = {"store_format_version": STORE_FORMAT_VERSION, "values": values}
        try:
            self.path.write_text(
                json.dumps(document, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise CredentialStoreError(
                f"Failed to write credential store file: {exc}"
            ) from exc


def save_credential(store: CredentialStore, provider_id: str, secret: str) -> str | None:
    """Save an API key for a provider.

    The key is stored even when it fails the provider's prefix check; the
    warning text is returned so the caller can show it. Returns None when the
    key looks well-formed.
    """
    provider = get_provider(provider_id)
    normalized = secret.strip()
    if not normalized:
        raise CredentialStoreError("Please enter a valid API key.")

    warning: str | None = None
    try:
        check_credential_format(provider, normalized)
    except InvalidCredentialFormatError as exc:
        warning = str(exc)
        logger.warning(
            "Saving %s API key with unexpected format",
            provider.display_name,
            extra={"provider": provider.id},
        )

    store.set(provider.credential_key, normalized)
    logger.info("Saved %s API key", provider.display_name)
    return warning


def get_credential(store: CredentialStore, provider_id: str) -> str | None:
    """Return the stored API key for a provider, if any."""
    return store.get(get_provider(provider_id).credential_key)


def select_provider(store: CredentialStore, provider_id: str) -> ProviderConfig:
    """Persist the active provider selection."""
    provider = get_provider(provider_id)
    store.set(ACTIVE_PROVIDER_KEY, provider.id)
    logger.info("Active provider set to %s", provider.id)
    return provider


def active_provider(store: CredentialStore) -> ProviderConfig:
    """Resolve the active provider, falling back to the default."""
    return resolve_provider(store.get(ACTIVE_PROVIDER_KEY))
