from __future__ import annotations

import httpx
import structlog

from .contracts import CompletionRequest, RemoteCompletion
from .errors import (
    AuthenticationError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
    UpstreamProtocolError,
)
from .wire import make_request_body, parse_response

log = structlog.get_logger()

DEFAULT_API_VERSION = "2024-02-01"


def _error_code(resp: httpx.Response) -> str | None:
    # Only the code: error messages can echo prompt content.
    try:
        data = resp.json()
    except ValueError:
        return None
    error = data.get("error") if isinstance(data, dict) else None
    code = error.get("code") if isinstance(error, dict) else None
    return str(code) if code is not None else None


class AzureOpenAISession:
    """
    Session wrapper for an Azure OpenAI chat-completions deployment.

    One `invoke` is one HTTP round trip: no retries, no backoff. Every
    failure surfaces as a `RemoteServiceError` subclass.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        client: httpx.AsyncClient | None = None,
        api_version: str = DEFAULT_API_VERSION,
        timeout_seconds: float = 60,
    ):
        self._endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._api_version = api_version
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    def __repr__(self) -> str:
        return f"AzureOpenAISession(endpoint={self._endpoint!r}, api_version={self._api_version!r})"

    async def close(self) -> None:
        await self._client.aclose()

    def _url(self, model_name: str) -> str:
        return f"{self._endpoint}/openai/deployments/{model_name}/chat/completions"

    async def invoke(self, model_name: str, request: CompletionRequest) -> RemoteCompletion:
        payload = make_request_body(request)

        try:
            resp = await self._client.post(
                self._url(model_name),
                params={"api-version": self._api_version},
                headers={"api-key": self._api_key},
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError("Upstream request timed out.") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Upstream request failed: {e.__class__.__name__}.") from e

        if resp.status_code in (401, 403):
            raise AuthenticationError("Upstream rejected credentials (check AZURE_OPENAI_KEY).")

        if resp.status_code == 429:
            retry_after = resp.headers.get("retry-after")
            retry_seconds = int(retry_after) if retry_after and retry_after.isdigit() else None
            raise RateLimitError(retry_after_seconds=retry_seconds)

        if resp.status_code >= 400:
            log.warning(
                "openai_upstream_error",
                status_code=resp.status_code,
                error_code=_error_code(resp),
                body_bytes=len(resp.content),
            )
            raise UpstreamProtocolError(f"Upstream error {resp.status_code}.")

        try:
            data = resp.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here.
            raise UpstreamProtocolError("Failed to decode upstream JSON.") from e

        completion = parse_response(data)
        log.debug(
            "openai_invoke_ok",
            model=model_name,
            prompt_chars=sum(len(m["content"]) for m in request.messages),
            prompt_tokens=completion.prompt_tokens,
            completion_tokens=completion.completion_tokens,
        )
        return completion
