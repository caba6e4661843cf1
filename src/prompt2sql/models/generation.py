"""Typed chat-completion payloads exchanged with providers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "assistant"
    content: str | None = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ChatMessage | None = None


class ChatCompletionResponse(BaseModel):
    """Subset of the chat-completions success body that SQL extraction needs."""

    model_config = ConfigDict(extra="ignore")

    choices: list[ChatChoice] | None = None

    def first_content(self) -> str | None:
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content


class ProviderErrorDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class ProviderErrorResponse(BaseModel):
    """Failure body of the form ``{"error": {"message": ...}}``."""

    model_config = ConfigDict(extra="ignore")

    error: ProviderErrorDetail | None = None

    @property
    def message(self) -> str | None:
        if self.error is None or not self.error.message:
            return None
        return self.error.message
