"""Prompt builder for NL-to-SQL generation requests."""

from __future__ import annotations

from dataclasses import dataclass


class PromptBuildError(RuntimeError):
    """Raised when a SQL generation prompt cannot be built."""


@dataclass(frozen=True)
class PromptBundle:
    """Inspectable prompt pair sent to the completion provider."""

    question: str
    schema_text: str
    system_prompt: str
    user_prompt: str


SYSTEM_PROMPT = (
    "You are an expert SQL developer. Your task is to convert a natural "
    "language query into valid SQL based on the provided database schema. "
    "Only return the SQL query without any explanations or markdown code fences."
)


def build_sql_generation_prompt(question: str, schema_text: str) -> PromptBundle:
    """Interpolate the schema and question verbatim into the user message."""
    if not question.strip():
        raise PromptBuildError("Question cannot be empty.")

    user_prompt = (
        f"Database Schema:\n{schema_text}\n\n"
        f"Natural Language Query: {question}\n\n"
        "Generate a SQL query for this request."
    )

    return PromptBundle(
        question=question,
        schema_text=schema_text,
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
    )
