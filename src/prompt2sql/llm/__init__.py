"""Provider table, request client and typed failures."""

from prompt2sql.llm.client import (
    ProviderRequestClient,
    RequestConfig,
    build_chat_request,
    extract_sql,
    load_request_config,
    strip_code_fences,
)
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
    DEFAULT_PROVIDER_ID,
    PROVIDERS,
    ProviderConfig,
    UnsupportedProviderError,
    get_provider,
    resolve_provider,
)

__all__ = [
    "DEFAULT_PROVIDER_ID",
    "PROVIDERS",
    "AuthenticationFailedError",
    "EmptyCompletionError",
    "InvalidCredentialFormatError",
    "MissingCredentialError",
    "ModelNotFoundError",
    "PaymentRequiredError",
    "ProviderConfig",
    "ProviderError",
    "ProviderRequestClient",
    "RequestConfig",
    "TransportFailureError",
    "UnknownProviderError",
    "UnsupportedProviderError",
    "build_chat_request",
    "extract_sql",
    "get_provider",
    "load_request_config",
    "resolve_provider",
    "strip_code_fences",
]
