import pytest

from openai_chat_service.contracts import CompletionRequest, RemoteCompletion


class FakeTransport:
    """Records every request and answers with a canned completion or raises."""

    def __init__(self, text: str = "ok", prompt_tokens: int = 0, completion_tokens: int = 0, error: BaseException | None = None):
        self.text = text
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.error = error
        self.calls: list[tuple[str, CompletionRequest]] = []
        self.closed = False

    async def invoke(self, model_name: str, request: CompletionRequest) -> RemoteCompletion:
        self.calls.append((model_name, request))
        if self.error is not None:
            raise self.error
        return RemoteCompletion(
            choices=[{"role": "assistant", "text": self.text}],
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport():
    return FakeTransport()
