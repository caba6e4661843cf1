"""Local credential storage."""

from prompt2sql.store.credentials import (
    STORE_FORMAT_VERSION,
    CredentialStore,
    CredentialStoreError,
    JsonFileCredentialStore,
    MemoryCredentialStore,
    active_provider,
    get_credential,
    save_credential,
    select_provider,
)

__all__ = [
    "STORE_FORMAT_VERSION",
    "CredentialStore",
    "CredentialStoreError",
    "JsonFileCredentialStore",
    "MemoryCredentialStore",
    "active_provider",
    "get_credential",
    "save_credential",
    "select_provider",
]
