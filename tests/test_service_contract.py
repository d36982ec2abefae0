import httpx
import pytest

from openai_chat_service import OpenAiService, OpenAiServiceConfig
from openai_chat_service.errors import ConfigurationError
from openai_chat_service.session import AzureOpenAISession

ENDPOINT = "https://example.openai.azure.com/"


@pytest.mark.parametrize(
    "endpoint,key,model_name",
    [
        ("", "k", "gpt-4"),
        (ENDPOINT, "", "gpt-4"),
        (ENDPOINT, "k", ""),
        (None, "k", "gpt-4"),
        (ENDPOINT, None, "gpt-4"),
        (ENDPOINT, "k", None),
        (None, None, None),
    ],
)
def test_construction_rejects_missing_settings(endpoint, key, model_name):
    with pytest.raises(ConfigurationError):
        OpenAiService(endpoint, key, model_name)


def test_construction_validates_before_allocating_transport(monkeypatch):
    created = []

    def _fail(*args, **kwargs):
        created.append(args)
        raise AssertionError("transport must not be allocated")

    monkeypatch.setattr("openai_chat_service.service.AzureOpenAISession", _fail)
    with pytest.raises(ConfigurationError):
        OpenAiService(ENDPOINT, "", "gpt-4")
    assert created == []


@pytest.mark.asyncio
async def test_construction_performs_no_network_call():
    calls = {"n": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(500)

    session = AzureOpenAISession(ENDPOINT, "k", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    service = OpenAiService(ENDPOINT, "k", "gpt-4", transport=session)
    await service.aclose()
    assert calls["n"] == 0


@pytest.mark.asyncio
async def test_default_transport_is_azure_session():
    service = OpenAiService(ENDPOINT, "k", "gpt-4")
    try:
        assert isinstance(service._transport, AzureOpenAISession)
        assert service.endpoint == ENDPOINT
        assert service.model_name == "gpt-4"
    finally:
        await service.aclose()


@pytest.mark.asyncio
async def test_handle_is_reusable_across_calls(fake_transport):
    service = OpenAiService(ENDPOINT, "k", "gpt-4", transport=fake_transport)
    first = await service.get_chat_completion("s1", "one")
    second = await service.get_chat_completion("s2", "two")
    label = await service.summarize("s1", "three")
    assert first.text == second.text == label == "ok"
    assert [model for model, _ in fake_transport.calls] == ["gpt-4", "gpt-4", "gpt-4"]


@pytest.mark.asyncio
async def test_async_context_manager_closes_transport(fake_transport):
    async with OpenAiService(ENDPOINT, "k", "gpt-4", transport=fake_transport) as service:
        await service.get_chat_completion("s1", "hi")
    assert fake_transport.closed


def test_repr_does_not_leak_key(fake_transport):
    service = OpenAiService(ENDPOINT, "super-secret-key", "gpt-4", transport=fake_transport)
    assert "super-secret-key" not in repr(service)


def test_from_config_uses_prompts_and_deployment(fake_transport):
    cfg = OpenAiServiceConfig(
        endpoint=ENDPOINT,
        key="k",
        model_name="gpt-35-turbo",
        chat_system_prompt="be brief",
        summarize_prompt="label it",
    )
    service = OpenAiService.from_config(cfg, transport=fake_transport)
    assert service.model_name == "gpt-35-turbo"
    assert service.chat_profile.system_prompt == "be brief"
    assert service.summarize_profile.system_prompt == "label it"


def test_from_config_without_credentials_raises():
    cfg = OpenAiServiceConfig(endpoint=ENDPOINT, key=None, model_name="gpt-4")
    with pytest.raises(ConfigurationError):
        OpenAiService.from_config(cfg)


@pytest.mark.asyncio
async def test_construction_accepts_any_non_empty_strings():
    service = OpenAiService(ENDPOINT, " ", " ")
    try:
        assert service.model_name == " "
    finally:
        await service.aclose()
