from __future__ import annotations

import time
from typing import Any

import structlog

from .config import OpenAiServiceConfig
from .contracts import (
    CompletionRequest,
    CompletionResult,
    CompletionTransport,
    FailurePolicy,
    OperationProfile,
    SamplingConfig,
)
from .errors import ConfigurationError
from .logging import configure_logging
from .metrics import maybe_start_metrics, request_latency_seconds, requests_total, tokens_total
from .prompts import CHAT_SYSTEM_PROMPT, FALLBACK_RESPONSE, SUMMARIZE_PROMPT
from .session import DEFAULT_API_VERSION, AzureOpenAISession

log = structlog.get_logger()

CHAT_SAMPLING = SamplingConfig(max_tokens=4000, temperature=0.3, top_p=0.5)
SUMMARIZE_SAMPLING = SamplingConfig(max_tokens=200, temperature=0.0, top_p=1.0)


def _require(name: str, value: str | None) -> str:
    if not value:
        raise ConfigurationError(f"{name} must be a non-empty string.")
    return value


def build_request(profile: OperationProfile, session_id: str, user_prompt: str) -> CompletionRequest:
    """Assemble the outgoing request for one operation; the user message is always last."""
    system_message = {"role": "system", "content": profile.system_prompt}
    user_message = {"role": "user", "content": user_prompt}
    if profile.send_system_prompt:
        messages: tuple[dict[str, str], ...] = (system_message, user_message)
    else:
        messages = (user_message,)
    return CompletionRequest(messages=messages, sampling=profile.sampling, user=session_id)


class OpenAiService:
    """
    Access to an Azure OpenAI chat deployment.

    Two operations with opposite failure policies:
      - `get_chat_completion` never raises; outages yield a fixed apology text.
      - `summarize` lets every `RemoteServiceError` reach the caller.
    """

    def __init__(
        self,
        endpoint: str | None,
        key: str | None,
        model_name: str | None,
        *,
        transport: CompletionTransport | None = None,
        api_version: str = DEFAULT_API_VERSION,
        timeout_seconds: float = 60,
        chat_system_prompt: str = CHAT_SYSTEM_PROMPT,
        summarize_prompt: str = SUMMARIZE_PROMPT,
    ):
        self._model_name = _require("model_name", model_name)
        self._endpoint = _require("endpoint", endpoint)
        key = _require("key", key)

        self._transport: CompletionTransport = transport or AzureOpenAISession(
            self._endpoint,
            key,
            api_version=api_version,
            timeout_seconds=timeout_seconds,
        )

        # The chat system prompt is built but not sent upstream.
        self._chat = OperationProfile(
            name="chat_completion",
            system_prompt=chat_system_prompt,
            send_system_prompt=False,
            sampling=CHAT_SAMPLING,
            failure_policy=FailurePolicy.FAIL_OPEN,
        )
        self._summarize = OperationProfile(
            name="summarize",
            system_prompt=summarize_prompt,
            send_system_prompt=True,
            sampling=SUMMARIZE_SAMPLING,
            failure_policy=FailurePolicy.FAIL_CLOSED,
        )

    @classmethod
    def from_config(cls, cfg: OpenAiServiceConfig, *, transport: CompletionTransport | None = None) -> "OpenAiService":
        return cls(
            cfg.endpoint,
            cfg.key,
            cfg.model_name,
            transport=transport,
            api_version=cfg.api_version,
            timeout_seconds=cfg.upstream_timeout_seconds,
            chat_system_prompt=cfg.chat_system_prompt,
            summarize_prompt=cfg.summarize_prompt,
        )

    def __repr__(self) -> str:
        return f"OpenAiService(endpoint={self._endpoint!r}, model_name={self._model_name!r})"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def chat_profile(self) -> OperationProfile:
        return self._chat

    @property
    def summarize_profile(self) -> OperationProfile:
        return self._summarize

    async def aclose(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "OpenAiService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _run(self, profile: OperationProfile, session_id: str, user_prompt: str) -> CompletionResult:
        operation = profile.name
        start = time.monotonic()
        try:
            request = build_request(profile, session_id, user_prompt)
            completion = await self._transport.invoke(self._model_name, request)
            result = CompletionResult(
                text=completion.choices[0]["text"],
                prompt_tokens=completion.prompt_tokens,
                completion_tokens=completion.completion_tokens,
            )
        except Exception as e:
            request_latency_seconds.labels(operation=operation).observe(time.monotonic() - start)
            if profile.failure_policy is FailurePolicy.FAIL_CLOSED:
                requests_total.labels(operation=operation, status="error").inc()
                log.exception("openai_operation_failed", operation=operation, session_id=session_id, error=str(e))
                raise
            requests_total.labels(operation=operation, status="degraded").inc()
            log.exception("openai_operation_degraded", operation=operation, session_id=session_id, error=str(e))
            return CompletionResult(text=FALLBACK_RESPONSE, prompt_tokens=0, completion_tokens=0, degraded=True)

        latency = time.monotonic() - start
        request_latency_seconds.labels(operation=operation).observe(latency)
        requests_total.labels(operation=operation, status="success").inc()
        tokens_total.labels(operation=operation, kind="prompt").inc(result.prompt_tokens)
        tokens_total.labels(operation=operation, kind="completion").inc(result.completion_tokens)
        log.info(
            "openai_operation_ok",
            operation=operation,
            session_id=session_id,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
            latency_seconds=round(latency, 3),
        )
        return result

    async def get_chat_completion(self, session_id: str, user_prompt: str) -> CompletionResult:
        """Send a user prompt and return the answer with its token usage. Never raises."""
        return await self._run(self._chat, session_id, user_prompt)

    async def summarize(self, session_id: str, user_prompt: str) -> str:
        """Condense a conversation into a one or two word label. Upstream errors propagate."""
        result = await self._run(self._summarize, session_id, user_prompt)
        return result.text


def create_service(
    cfg: OpenAiServiceConfig | None = None,
    *,
    transport: CompletionTransport | None = None,
) -> OpenAiService:
    cfg = cfg or OpenAiServiceConfig()
    configure_logging(level=cfg.log_level, fmt=cfg.log_format, secrets=cfg.secrets())
    service = OpenAiService.from_config(cfg, transport=transport)
    maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
    return service
