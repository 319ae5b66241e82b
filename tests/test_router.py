import pytest

from app.core.errors import UnsupportedModelError
from app.llm.entity.chat import ChatTurn, NormalizedChatRequest, ProviderFamily, SamplingConfig
from app.llm.service.router_service import ModelRouter, family_for_model

from conftest import fake_providers


@pytest.mark.parametrize(
    "model_id, family",
    [
        ("gpt-4o-mini", ProviderFamily.OPENAI),
        ("claude-3-5-sonnet-20241022", ProviderFamily.ANTHROPIC),
        ("gemini-1.5-flash", ProviderFamily.GEMINI),
        ("gemma-2-9b-it", ProviderFamily.GEMINI),
        ("mistral-large-latest", ProviderFamily.MISTRAL),
        ("command-r-plus", ProviderFamily.COHERE),
    ],
)
@pytest.mark.asyncio
async def test_each_prefix_dispatches_to_exactly_its_adapter(model_id, family):
    providers = fake_providers()
    router = ModelRouter(providers)

    response = await router.route(NormalizedChatRequest(model_id=model_id, user_message="hi"))

    assert response.model_id == model_id
    assert response.text == f"ok from {model_id}"
    for fam, provider in providers.items():
        assert len(provider.calls) == (1 if fam is family else 0)


@pytest.mark.asyncio
async def test_unknown_prefix_raises_and_calls_no_adapter():
    providers = fake_providers()
    router = ModelRouter(providers)

    with pytest.raises(UnsupportedModelError) as exc_info:
        await router.route(NormalizedChatRequest(model_id="llama-3-70b", user_message="hi"))

    assert exc_info.value.message == "Unsupported model: llama-3-70b"
    assert all(not p.calls for p in providers.values())


@pytest.mark.asyncio
async def test_history_and_sampling_are_passed_through():
    providers = fake_providers()
    router = ModelRouter(providers)
    history = [ChatTurn(role="user", content="a"), ChatTurn(role="assistant", content="b")]
    sampling = SamplingConfig(temperature=0.2, max_tokens=64)

    await router.route(NormalizedChatRequest(
        model_id="mistral-small", user_message="c", history=history, sampling=sampling
    ))

    call = providers[ProviderFamily.MISTRAL].calls[0]
    assert [t.content for t in call["history"]] == ["a", "b"]
    assert call["sampling"].temperature == 0.2
    assert call["sampling"].max_tokens == 64


def test_prefix_must_be_at_start():
    assert family_for_model("my-gpt-4") is None
    assert family_for_model("GPT-4") is None


def test_sampling_defaults_replace_zero_and_missing():
    assert SamplingConfig.from_client(None, None) == SamplingConfig(temperature=0.7, max_tokens=2048)
    assert SamplingConfig.from_client(0, 0) == SamplingConfig(temperature=0.7, max_tokens=2048)
    assert SamplingConfig.from_client(0.3, 100) == SamplingConfig(temperature=0.3, max_tokens=100)
