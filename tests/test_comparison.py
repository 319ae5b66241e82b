import time

import pytest

from app.core.errors import UpstreamError, ValidationError
from app.llm.entity.chat import ProviderFamily
from app.llm.service.comparison_service import ComparisonOrchestrator
from app.llm.service.normalizer import EMPTY_RESPONSE_ERROR, chat_response
from app.llm.service.router_service import ModelRouter

from conftest import FakeProvider, InMemoryComparisonRepository, fake_providers


@pytest.mark.asyncio
async def test_single_model_is_rejected_before_any_call():
    providers = fake_providers()
    orchestrator = ComparisonOrchestrator(ModelRouter(providers), max_concurrency=0)

    with pytest.raises(ValidationError) as exc_info:
        await orchestrator.compare("hello", ["gpt-4o-mini"])

    assert exc_info.value.status_code == 400
    assert all(not p.calls for p in providers.values())


@pytest.mark.asyncio
async def test_failing_branch_only_fills_its_own_slot_and_calls_overlap():
    delay = 0.2
    providers = fake_providers(
        openai=FakeProvider(ProviderFamily.OPENAI, delay=delay),
        anthropic=FakeProvider(ProviderFamily.ANTHROPIC, delay=delay, error=UpstreamError("Invalid x-api-key")),
        mistral=FakeProvider(ProviderFamily.MISTRAL, delay=delay),
    )
    orchestrator = ComparisonOrchestrator(ModelRouter(providers), max_concurrency=0)
    models = ["gpt-4o-mini", "claude-3-5-sonnet-20241022", "mistral-large-latest"]

    start = time.perf_counter()
    run = await orchestrator.compare("hello", models)
    elapsed = time.perf_counter() - start

    assert [r.model_id for r in run.results] == models
    first, second, third = run.results
    assert first.text == "ok from gpt-4o-mini" and first.error == ""
    assert second.text == "" and second.error == "Invalid x-api-key"
    assert third.text == "ok from mistral-large-latest" and third.error == ""
    assert all(r.latency_ms >= 0 for r in run.results)
    assert elapsed < delay * len(models)


@pytest.mark.asyncio
async def test_unsupported_model_in_a_comparison_becomes_an_error_entry():
    orchestrator = ComparisonOrchestrator(ModelRouter(fake_providers()), max_concurrency=0)

    run = await orchestrator.compare("hello", ["gpt-4o-mini", "llama-3"])

    assert run.results[0].ok
    assert run.results[1].error == "Unsupported model: llama-3"


@pytest.mark.asyncio
async def test_run_is_audited_with_user():
    repo = InMemoryComparisonRepository()
    orchestrator = ComparisonOrchestrator(ModelRouter(fake_providers()), repo, max_concurrency=0)

    await orchestrator.compare("hello", ["gpt-4o-mini", "command-r"], user_id="u1")

    assert len(repo.runs) == 1
    assert repo.runs[0].user_id == "u1"
    assert repo.runs[0].model_ids == ["gpt-4o-mini", "command-r"]
    history = await orchestrator.history("u1")
    assert len(history) == 1


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_the_comparison():
    repo = InMemoryComparisonRepository(fail=True)
    orchestrator = ComparisonOrchestrator(ModelRouter(fake_providers()), repo, max_concurrency=0)

    run = await orchestrator.compare("hello", ["gpt-4o-mini", "command-r"])

    assert len(run.results) == 2
    assert all(r.ok for r in run.results)


@pytest.mark.asyncio
async def test_concurrency_cap_still_returns_every_result_in_order():
    providers = fake_providers(
        openai=FakeProvider(ProviderFamily.OPENAI, delay=0.05),
        gemini=FakeProvider(ProviderFamily.GEMINI, delay=0.01),
    )
    orchestrator = ComparisonOrchestrator(ModelRouter(providers), max_concurrency=1)
    models = ["gpt-4o-mini", "gemini-1.5-flash", "gemma-2-9b-it"]

    run = await orchestrator.compare("hello", models)

    assert [r.model_id for r in run.results] == models
    assert all(r.ok for r in run.results)


class SilentProvider(FakeProvider):
    """Vendor that answers successfully with no content."""

    async def invoke(self, model_id, user_message, history=None, sampling=None):
        await super().invoke(model_id, user_message, history, sampling)
        return chat_response("", model_id)


@pytest.mark.asyncio
async def test_empty_reply_is_recorded_as_an_error():
    providers = fake_providers(cohere=SilentProvider(ProviderFamily.COHERE))
    orchestrator = ComparisonOrchestrator(ModelRouter(providers), max_concurrency=0)

    run = await orchestrator.compare("hello", ["gpt-4o-mini", "command-r-plus"])

    first, second = run.results
    assert first.text == "ok from gpt-4o-mini" and first.error == ""
    assert second.text == ""
    assert second.error == EMPTY_RESPONSE_ERROR
    assert all(bool(r.text) != bool(r.error) for r in run.results)
