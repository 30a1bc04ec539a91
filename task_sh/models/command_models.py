from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Shell(str, Enum):
    BASH = "bash"
    ZSH = "zsh"


class Classification(str, Enum):
    SAFE = "safe"
    RISKY = "risky"
    BLOCKED = "blocked"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Classification.SAFE: 0,
    Classification.RISKY: 1,
    Classification.BLOCKED: 2,
}


class GenerationRequest(BaseModel):
    """A single prompt for the generation backend."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Trimmed natural-language task")
    shell: Shell
    system_prompt: str
    user_prompt: str

    def to_messages(self) -> List[dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]


class ParsedCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(..., min_length=1)
    explanation: Optional[str] = None
    alternatives: List[str] = Field(default_factory=list)

    @property
    def is_guidance_only(self) -> bool:
        return self.command.lstrip().startswith("#")


class NoCommand(BaseModel):
    """Parse failure: the reply had no usable ``Command:`` line."""

    model_config = ConfigDict(frozen=True)

    reason: str = "no_command_found"
    raw_reply: str = ""


ParseResult = Union[ParsedCommand, NoCommand]


class SafetyVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    classification: Classification
    matched_rule: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return self.classification is Classification.BLOCKED

    @property
    def is_risky(self) -> bool:
        return self.classification is Classification.RISKY


class AlternativeCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str
    verdict: SafetyVerdict


class Outcome(BaseModel):
    """Final result of one generation run, handed to the presenter."""

    model_config = ConfigDict(frozen=True)

    verdict: SafetyVerdict
    shell: Shell
    # Never populated for blocked verdicts
    command: Optional[str] = None
    explanation: Optional[str] = None
    alternatives: List[AlternativeCommand] = Field(default_factory=list)
    raw_reply: Optional[str] = None
    # The command is a "#" comment telling the user what to do instead
    guidance_only: bool = False

    @property
    def refused(self) -> bool:
        return self.verdict.is_blocked
