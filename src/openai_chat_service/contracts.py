from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class FailurePolicy(str, Enum):
    # FAIL_OPEN: return the degraded result; FAIL_CLOSED: re-raise.
    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


@dataclass(frozen=True)
class SamplingConfig:
    max_tokens: int
    temperature: float
    top_p: float
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


@dataclass(frozen=True)
class OperationProfile:
    name: str
    system_prompt: str
    send_system_prompt: bool
    sampling: SamplingConfig
    failure_policy: FailurePolicy


@dataclass(frozen=True)
class CompletionRequest:
    messages: tuple[dict[str, str], ...]
    sampling: SamplingConfig
    user: str


@dataclass(frozen=True)
class RemoteCompletion:
    choices: list[dict[str, str]]
    prompt_tokens: int
    completion_tokens: int


@dataclass(frozen=True)
class CompletionResult:
    text: str
    prompt_tokens: int
    completion_tokens: int
    degraded: bool = field(default=False, compare=False)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class CompletionTransport(Protocol):
    """The single remote call the service depends on."""

    async def invoke(self, model_name: str, request: CompletionRequest) -> RemoteCompletion:
        ...

    async def close(self) -> None:
        ...
