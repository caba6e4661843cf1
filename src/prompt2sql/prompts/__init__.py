"""Prompt builders for prompt2sql."""

from prompt2sql.prompts.sql_generation import (
    SYSTEM_PROMPT,
    PromptBuildError,
    PromptBundle,
    build_sql_generation_prompt,
)

__all__ = [
    "SYSTEM_PROMPT",
    "PromptBuildError",
    "PromptBundle",
    "build_sql_generation_prompt",
]
