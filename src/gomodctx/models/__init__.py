from __future__ import annotations

from gomodctx.models.prompts import PROMPT_CHOICES, PromptChoice
from gomodctx.models.resolution import Resolution, ResolutionOutcome
from gomodctx.models.toolchain import ProcessResult, ToolchainVersion

__all__ = [
    # toolchain
    "ToolchainVersion",
    "ProcessResult",
    # resolution
    "Resolution",
    "ResolutionOutcome",
    # prompts
    "PromptChoice",
    "PROMPT_CHOICES",
]
