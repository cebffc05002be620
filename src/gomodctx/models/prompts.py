from __future__ import annotations

from enum import StrEnum


class PromptChoice(StrEnum):
    UPDATE = "Update"
    LATER = "Later"
    NEVER = "Don't show again"


PROMPT_CHOICES: tuple[str, ...] = tuple(choice.value for choice in PromptChoice)
