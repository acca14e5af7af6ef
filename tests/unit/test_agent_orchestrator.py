import asyncio
import json

import httpx
import pytest

from core.config.settings import OrchestrationSettings
from core.schemas.collaboration import CollaborationTask
from core.utils.exceptions import InvalidTask, NoEnabledAgents
from tests.helpers import agent_request_text, chat_completion, metric_value, request_json


def by_model(answers):
    """Handler answering each request according to the agent's model name"""
    async def handler(request: httpx.Request) -> httpx.Response:
        answer = answers[request_json(request)["model"]]
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return await answer(request)
        return httpx.Response(200, json=chat_completion(answer))
    return handler


def task_for(agents, **overrides):
    values = {"symbol": "BTC", "question": "Where is BTC heading this week?", "agents": agents}
    values.update(overrides)
    return CollaborationTask(**values)


@pytest.mark.asyncio
async def test_one_network_failure_does_not_affect_siblings(make_orchestrator, make_agent):
    agents = [
        make_agent("technical_analyst", model="m1"),
        make_agent("news_researcher", model="m2"),
        make_agent("sentiment_analyst", model="m3"),
    ]
    orchestrator = make_orchestrator(by_model({
        "m1": "Breakout likely, 80% confidence",
        "m2": httpx.ConnectError("connection reset"),
        "m3": "Sentiment is positive",
    }))

    report = await orchestrator.run(task_for(agents))

    responses = report.agent_responses
    assert len(responses) == 3
    assert [r.agent_id for r in responses] == ["technical_analyst", "news_researcher", "sentiment_analyst"]
    assert [r.success for r in responses] == [True, False, True]
    assert "connection reset" in responses[1].error
    assert responses[1].content == f"news_researcher analysis failed: {responses[1].error}"
    assert responses[0].confidence == 80
    assert report.stats.total_agents == 3
    assert report.stats.successful_agents + report.stats.failed_agents == 3


@pytest.mark.asyncio
async def test_order_follows_input_not_completion(make_orchestrator, make_agent):
    async def slow(request):
        await asyncio.sleep(0.05)
        return httpx.Response(200, json=chat_completion("slow answer"))

    agents = [make_agent("first", model="slow"), make_agent("second", model="fast")]
    report = await make_orchestrator(by_model({"slow": slow, "fast": "fast answer"})).run(task_for(agents))

    assert [r.content for r in report.agent_responses] == ["slow answer", "fast answer"]


@pytest.mark.asyncio
async def test_slow_agent_times_out(make_orchestrator, make_agent, test_settings):
    settings = test_settings.model_copy(update={
        "orchestration": OrchestrationSettings(agent_timeout_seconds=0.1),
    })

    async def hang(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=chat_completion("too late"))

    agents = [make_agent("technical_analyst", model="hang"), make_agent("news_researcher", model="ok")]
    orchestrator = make_orchestrator(by_model({"hang": hang, "ok": "on time"}), settings=settings)

    report = await orchestrator.run(task_for(agents))

    timed_out, on_time = report.agent_responses
    assert timed_out.success is False
    assert "timed out after 0.1s" in timed_out.error
    assert on_time.success is True
    assert report.stats.elapsed_ms < 5000


@pytest.mark.asyncio
async def test_http_error_becomes_failure_record(make_orchestrator, make_agent):
    async def unauthorized(request):
        return httpx.Response(401, json={"error": "invalid key"})

    report = await make_orchestrator(by_model({"m": unauthorized})).run(task_for([make_agent(model="m")]))

    response = report.agent_responses[0]
    assert response.success is False
    assert "401" in response.error
    assert "No analysis available" in report.report_text


@pytest.mark.asyncio
async def test_disabled_and_keyless_agents_are_skipped(make_orchestrator, make_agent):
    agents = [
        make_agent("coordinator", model="m", enabled=False),
        make_agent("technical_analyst", model="m", api_key="   "),
        make_agent("chart_analyst", model="m"),
    ]

    report = await make_orchestrator(by_model({"m": "fine"})).run(task_for(agents))

    assert [r.agent_id for r in report.agent_responses] == ["chart_analyst"]
    assert report.stats.total_agents == 1


@pytest.mark.asyncio
async def test_unsupported_provider_and_rate_limit_denial(make_orchestrator, make_agent, rate_limiter):
    for _ in range(50):
        assert rate_limiter.try_acquire("claude")
    agents = [
        make_agent("technical_analyst", provider="mistral", model="m"),
        make_agent("news_researcher", provider="claude", model="m"),
        make_agent("chart_analyst", provider="openai", model="m"),
    ]

    report = await make_orchestrator(by_model({"m": "fine"})).run(task_for(agents))

    unsupported, limited, fine = report.agent_responses
    assert unsupported.success is False and "Unsupported provider" in unsupported.error
    assert limited.success is False and "Rate limit exceeded" in limited.error
    assert fine.success is True


@pytest.mark.asyncio
async def test_role_prompt_is_sent(make_orchestrator, make_agent):
    seen = []

    async def capture(request):
        seen.append(agent_request_text(request))
        return httpx.Response(200, json=chat_completion("ok"))

    agents = [make_agent("technical_analyst", model="m")]
    await make_orchestrator(by_model({"m": capture})).run(task_for(agents, symbol="eth"))

    assert "technical analyst" in seen[0]
    assert "ETH" in seen[0]
    assert "Where is BTC heading this week?" in seen[0]


@pytest.mark.asyncio
async def test_market_snapshot_added_to_context(make_orchestrator, make_agent, make_market_data_client):
    bodies = []

    async def capture(request):
        bodies.append(request_json(request))
        return httpx.Response(200, json=chat_completion("ok"))

    orchestrator = make_orchestrator(by_model({"m": capture}), market_data_client=make_market_data_client())
    await orchestrator.run(task_for([make_agent(model="m")], data_context={"note": "weekly"}))

    user_message = bodies[0]["messages"][1]["content"]
    context = json.loads(user_message.split("Data: ", 1)[1])
    assert context["note"] == "weekly"
    assert context["marketData"][0]["symbol"] == "BTC"
    assert context["marketData"][0]["price"] > 0


@pytest.mark.asyncio
async def test_supplied_market_data_is_kept(make_orchestrator, make_agent, make_market_data_client):
    bodies = []

    async def capture(request):
        bodies.append(request_json(request))
        return httpx.Response(200, json=chat_completion("ok"))

    orchestrator = make_orchestrator(by_model({"m": capture}), market_data_client=make_market_data_client())
    await orchestrator.run(task_for([make_agent(model="m")], data_context={"marketData": "caller supplied"}))

    assert '"marketData": "caller supplied"' in bodies[0]["messages"][1]["content"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides,field", [
    ({"symbol": "   "}, "symbol"),
    ({"symbol": ""}, "symbol"),
    ({"question": ""}, "question"),
    ({"question": " \n "}, "question"),
])
async def test_invalid_task_rejected_before_dispatch(make_orchestrator, make_agent, metrics, overrides, field):
    def never(request):
        raise AssertionError("no agent should be called")

    with pytest.raises(InvalidTask) as exc_info:
        await make_orchestrator(never).run(task_for([make_agent()], **overrides))

    assert exc_info.value.field == field
    assert metric_value(metrics, "collaboration_runs_total", {"outcome": "invalid_task"}) == 1


@pytest.mark.asyncio
async def test_no_enabled_agents(make_orchestrator, make_agent, metrics):
    agents = [make_agent(enabled=False), make_agent(api_key="")]

    with pytest.raises(NoEnabledAgents):
        await make_orchestrator(by_model({})).run(task_for(agents))
    with pytest.raises(NoEnabledAgents):
        await make_orchestrator(by_model({})).run(task_for([]))

    assert metric_value(metrics, "collaboration_runs_total", {"outcome": "no_agents"}) == 2


@pytest.mark.asyncio
async def test_too_many_agents_rejected(make_orchestrator, make_agent, test_settings):
    settings = test_settings.model_copy(update={"orchestration": OrchestrationSettings(max_agents=2)})
    agents = [make_agent(f"agent_{i}") for i in range(3)]

    with pytest.raises(InvalidTask) as exc_info:
        await make_orchestrator(by_model({}), settings=settings).run(task_for(agents))
    assert exc_info.value.field == "agents"


@pytest.mark.asyncio
async def test_metrics_recorded_per_agent_and_run(make_orchestrator, make_agent, metrics):
    agents = [make_agent("a", model="ok"), make_agent("b", model="bad")]
    orchestrator = make_orchestrator(by_model({"ok": "fine", "bad": httpx.ReadTimeout("slow")}))

    await orchestrator.run(task_for(agents))

    assert metric_value(metrics, "agent_calls_total", {"provider": "openai", "outcome": "success"}) == 1
    assert metric_value(metrics, "agent_calls_total", {"provider": "openai", "outcome": "failure"}) == 1
    assert metric_value(metrics, "collaboration_runs_total", {"outcome": "complete"}) == 1
