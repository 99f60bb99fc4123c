"""Prompt templates for card generation."""

from .templates import PromptTemplate, load_prompt, get_builtin_prompts, get_prompt

__all__ = ["PromptTemplate", "load_prompt", "get_builtin_prompts", "get_prompt"]
