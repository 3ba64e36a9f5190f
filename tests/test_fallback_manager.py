import pytest

from conftest import ScriptedProvider, chat_body, failed, ok
from content_ai.exceptions import (
    AllModelsExhaustedError,
    ConfigurationError,
    FatalProviderError,
    OutputValidationError,
)
from content_ai.features import TitleFeature
from content_ai.models.ai import TitleRequest
from content_ai.orchestration import FallbackManager, OrchestrationStatus, ProviderRegistry
from content_ai.providers.base_provider import AttemptOutcome, OutcomeKind, PromptRequest

REQUEST = PromptRequest(feature="test", prompt="Say something", max_tokens=50)
GOOD_TITLE = "A Practical Guide to Reliable Async Python Services"
POST = "Async Python services fail in interesting ways. " * 3


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 402, 403])
@pytest.mark.parametrize("fatal_index", [0, 1, 2])
async def test_fatal_status_stops_orchestration(make_manager, status, fatal_index):
    models = ["model-a", "model-b", "model-c"]
    script = {m: failed(m, OutcomeKind.RETRYABLE, 500) for m in models}
    script[models[fatal_index]] = failed(models[fatal_index], OutcomeKind.FATAL, status, "nope")
    manager = make_manager(script)

    result = await manager.execute_with_fallback(REQUEST)

    assert result.status == OrchestrationStatus.FATAL
    assert manager.provider.calls == models[: fatal_index + 1]
    assert isinstance(result.last_failure, FatalProviderError)
    with pytest.raises(FatalProviderError) as exc_info:
        result.raise_for_failure()
    assert exc_info.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", [OutcomeKind.RETRYABLE, OutcomeKind.TIMED_OUT, OutcomeKind.RATE_LIMITED])
async def test_every_model_attempted_before_exhaustion(make_manager, kind):
    status = 429 if kind == OutcomeKind.RATE_LIMITED else None
    script = {m: failed(m, kind, status) for m in ["model-a", "model-b", "model-c"]}
    manager = make_manager(script)

    result = await manager.execute_with_fallback(REQUEST)

    assert result.status == OrchestrationStatus.EXHAUSTED
    assert result.retryable is True
    assert manager.provider.calls == ["model-a", "model-b", "model-c"]
    assert len(result.attempts) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("success_index", [0, 1, 2])
async def test_stops_on_first_success(make_manager, success_index):
    models = ["model-a", "model-b", "model-c"]
    script = {m: failed(m, OutcomeKind.RETRYABLE, 503) for m in models}
    script[models[success_index]] = ok(models[success_index], "hello there")
    manager = make_manager(script)

    result = await manager.execute_with_fallback(REQUEST)

    assert result.succeeded
    assert result.model_used == models[success_index]
    assert result.raw_text == "hello there"
    assert manager.provider.calls == models[: success_index + 1]


@pytest.mark.asyncio
async def test_rate_limit_then_server_error_then_success(make_manager, sleep):
    manager = make_manager({
        "model-a": failed("model-a", OutcomeKind.RATE_LIMITED, 429, "Rate limited"),
        "model-b": failed("model-b", OutcomeKind.RETRYABLE, 500, "Internal error"),
        "model-c": ok("model-c", "final answer"),
    })

    result = await manager.execute_with_fallback(REQUEST)

    assert result.succeeded
    assert result.model_used == "model-c"
    # one pause, after model-a only
    sleep.assert_awaited_once_with(2.0)


@pytest.mark.asyncio
async def test_no_backoff_after_last_rate_limited_model(make_manager, sleep):
    script = {m: failed(m, OutcomeKind.RATE_LIMITED, 429) for m in ["model-a", "model-b", "model-c"]}
    manager = make_manager(script)

    await manager.execute_with_fallback(REQUEST)

    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_exhausted_after_rate_limits_uses_generic_message(make_manager):
    script = {m: failed(m, OutcomeKind.RATE_LIMITED, 429, "slow down") for m in ["model-a", "model-b", "model-c"]}
    result = await make_manager(script).execute_with_fallback(REQUEST)

    with pytest.raises(AllModelsExhaustedError) as exc_info:
        result.raise_for_failure()
    assert "rate-limited" in exc_info.value.message
    assert exc_info.value.status_code == 429
    assert exc_info.value.to_dict()["retryable"] is True


@pytest.mark.asyncio
async def test_exhausted_surfaces_last_failure_message_and_status(make_manager):
    result = await make_manager({
        "model-a": failed("model-a", OutcomeKind.RATE_LIMITED, 429),
        "model-b": failed("model-b", OutcomeKind.RETRYABLE, 500),
        "model-c": failed("model-c", OutcomeKind.RETRYABLE, 502, "Bad gateway. The upstream provider is experiencing issues."),
    }).execute_with_fallback(REQUEST)

    with pytest.raises(AllModelsExhaustedError) as exc_info:
        result.raise_for_failure()
    assert exc_info.value.message.startswith("Bad gateway")
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_exhausted_without_status_defaults_to_503(make_manager):
    script = {m: failed(m, OutcomeKind.TIMED_OUT, None, "Request timeout after 30s") for m in ["model-a", "model-b", "model-c"]}
    result = await make_manager(script).execute_with_fallback(REQUEST)

    with pytest.raises(AllModelsExhaustedError) as exc_info:
        result.raise_for_failure()
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Request timeout after 30s"


@pytest.mark.asyncio
async def test_unusable_content_advances_without_delay(make_manager, sleep):
    manager = make_manager({
        "model-a": AttemptOutcome.success("model-a", {"choices": []}),
        "model-b": AttemptOutcome.success("model-b", chat_body(content="   ")),
        "model-c": ok("model-c", "usable"),
    })

    result = await manager.execute_with_fallback(REQUEST)

    assert result.model_used == "model-c"
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_generate_returns_rendered_feature_result(registry, backoff):
    provider = ScriptedProvider({"model-a": ok("model-a", f"Title: **{GOOD_TITLE}**")})
    manager = FallbackManager(registry, provider, backoff)

    response, model = await manager.generate(TitleFeature(), TitleRequest(content=POST))

    assert model == "model-a"
    assert response.title == GOOD_TITLE
    assert provider.requests[0].feature == "title"
    assert provider.requests[0].max_tokens == 100
    assert provider.requests[0].app_title == "Blog Title Generator"


@pytest.mark.asyncio
async def test_generate_does_not_retry_rejected_output(registry, backoff):
    provider = ScriptedProvider({
        "model-a": ok("model-a", "Too short"),
        "model-b": ok("model-b", GOOD_TITLE),
    })
    manager = FallbackManager(registry, provider, backoff)

    with pytest.raises(OutputValidationError):
        await manager.generate(TitleFeature(), TitleRequest(content=POST))
    assert provider.calls == ["model-a"]


@pytest.mark.asyncio
async def test_repeated_model_is_attempted_once(backoff, sleep):
    provider = ScriptedProvider({
        "model-a": failed("model-a", OutcomeKind.RATE_LIMITED, 429),
        "model-b": failed("model-b", OutcomeKind.RATE_LIMITED, 429),
    })
    manager = FallbackManager(ProviderRegistry(["model-a", "model-b", "model-a"]), provider, backoff)

    result = await manager.execute_with_fallback(REQUEST)

    assert result.status == OrchestrationStatus.EXHAUSTED
    assert provider.calls == ["model-a", "model-b"]
    # model-b is last once duplicates are dropped
    sleep.assert_awaited_once_with(2.0)


@pytest.mark.asyncio
async def test_exhausted_status_is_never_a_success_code(make_manager):
    # a 2xx whose body could not be used must not leak its status to the caller
    script = {m: failed(m, OutcomeKind.RETRYABLE, 200, "Invalid JSON in model response") for m in ["model-a", "model-b", "model-c"]}
    result = await make_manager(script).execute_with_fallback(REQUEST)

    with pytest.raises(AllModelsExhaustedError) as exc_info:
        result.raise_for_failure()
    assert exc_info.value.status_code == 503


def test_registry_is_immutable_and_ordered():
    registry = ProviderRegistry(["x", " y ", "", "z", "x"])
    assert list(registry) == ["x", "y", "z"]
    assert (registry.last, len(registry)) == ("z", 3)
    assert registry.is_last("z")
    assert not registry.is_last("x")
    with pytest.raises(AttributeError):
        registry._models = ("other",)


def test_empty_registry_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        ProviderRegistry([])
