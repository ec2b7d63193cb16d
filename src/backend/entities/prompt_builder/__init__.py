"""Prompt Builder package for rendering schema-aware prompts."""

from .builder import (
    PromptPair,
    build_follow_up_prompt,
    build_narration_prompt,
    build_prompts,
    describe_schema,
)

__all__ = [
    "PromptPair",
    "build_follow_up_prompt",
    "build_narration_prompt",
    "build_prompts",
    "describe_schema",
]
