"""Typed failures raised while talking to a completion provider."""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base class for provider request failures."""

    def __init__(
        self,
        message: str,
        *,
        provider_id: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider_id = provider_id
        self.status_code = status_code


class MissingCredentialError(ProviderError):
    """No API key is stored for the active provider."""


class InvalidCredentialFormatError(ProviderError):
    """Stored API key does not match the provider's expected prefix."""


class AuthenticationFailedError(ProviderError):
    """Provider rejected the API key (HTTP 401)."""


class ModelNotFoundError(ProviderError):
    """Provider does not know the configured model (HTTP 404)."""


class PaymentRequiredError(ProviderError):
    """Provider account is out of credits or over quota (HTTP 402)."""


class EmptyCompletionError(ProviderError):
    """Provider answered successfully but returned no usable completion."""


class TransportFailureError(ProviderError):
    """The request never produced an HTTP response."""


class UnknownProviderError(ProviderError):
    """Any other non-success response from the provider."""
