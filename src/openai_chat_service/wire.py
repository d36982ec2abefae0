from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .contracts import CompletionRequest, RemoteCompletion
from .errors import ConfigurationError, UpstreamProtocolError


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionsRequest(BaseModel):
    messages: list[ChatMessage]
    max_tokens: int
    temperature: float
    top_p: float
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    user: str | None = None

    @field_validator("messages")
    @classmethod
    def _validate_messages(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        if not v or v[-1].role != "user":
            raise ValueError("the last message must be a user message.")
        return v

    @field_validator("temperature")
    @classmethod
    def _validate_temperature(cls, v: float) -> float:
        if not (0.0 <= v <= 2.0):
            raise ValueError("temperature must be between 0 and 2.")
        return v

    @field_validator("top_p")
    @classmethod
    def _validate_top_p(cls, v: float) -> float:
        if not (0.0 < v <= 1.0):
            raise ValueError("top_p must be > 0 and <= 1.")
        return v

    @field_validator("max_tokens")
    @classmethod
    def _validate_max_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_tokens must be > 0.")
        return v

    @field_validator("presence_penalty", "frequency_penalty")
    @classmethod
    def _validate_penalties(cls, v: float) -> float:
        if not (-2.0 <= v <= 2.0):
            raise ValueError("penalty must be between -2 and 2.")
        return v


class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "assistant"
    content: str | None = None


class ResponseChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ResponseMessage
    finish_reason: str | None = None


class ResponseUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = Field(ge=0)
    completion_tokens: int = Field(ge=0)
    total_tokens: int | None = None


class ChatCompletionsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    model: str | None = None
    choices: list[ResponseChoice]
    usage: ResponseUsage


def make_request_body(request: CompletionRequest) -> dict[str, Any]:
    try:
        body = ChatCompletionsRequest(
            messages=[ChatMessage(role=m["role"], content=m["content"]) for m in request.messages],
            max_tokens=request.sampling.max_tokens,
            temperature=request.sampling.temperature,
            top_p=request.sampling.top_p,
            frequency_penalty=request.sampling.frequency_penalty,
            presence_penalty=request.sampling.presence_penalty,
            user=request.user,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid completion request: {e.errors()[0]['msg']}") from e
    return body.model_dump(exclude_none=True)


def parse_response(data: Any) -> RemoteCompletion:
    try:
        resp = ChatCompletionsResponse.model_validate(data)
    except ValidationError as e:
        raise UpstreamProtocolError("Unexpected upstream response shape.") from e

    if not resp.choices:
        raise UpstreamProtocolError("Missing choices in upstream response.")

    return RemoteCompletion(
        choices=[{"role": c.message.role, "text": c.message.content or ""} for c in resp.choices],
        prompt_tokens=resp.usage.prompt_tokens,
        completion_tokens=resp.usage.completion_tokens,
    )
