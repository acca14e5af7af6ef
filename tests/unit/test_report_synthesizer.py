from datetime import datetime, timezone

from core.schemas.collaboration import AgentResponse, CollaborationTask
from services.collaboration.report import DISCLAIMER, ReportSynthesizer

TASK = CollaborationTask(symbol="btc", question="Is now a good entry point?")
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def ok(agent_id, content="Looks constructive.", confidence=80.0, provider="openai"):
    return AgentResponse(agent_id=agent_id, provider=provider, content=content,
                         success=True, confidence=confidence)


def failed(agent_id, error="timeout", provider="claude"):
    return AgentResponse(agent_id=agent_id, provider=provider, content=f"{agent_id} analysis failed: {error}",
                         success=False, error=error)


def test_zero_successes_make_no_claim(test_settings):
    report = ReportSynthesizer(test_settings).synthesize(
        [failed("technical_analyst"), failed("news_researcher", "HTTP 500")], TASK, 12.5, now=NOW
    )

    assert report.report_text
    assert "No analysis available" in report.report_text
    assert "Aggregate" not in report.report_text
    assert report.aggregate_confidence is None
    assert report.stats.total_agents == 2
    assert report.stats.successful_agents == 0
    assert report.stats.failed_agents == 2
    assert "HTTP 500" in report.report_text
    assert report.report_text.endswith(DISCLAIMER)


def test_aggregate_section_requires_minimum_successes(test_settings):
    responses = [ok("technical_analyst"), ok("news_researcher"), failed("sentiment_analyst")]

    report = ReportSynthesizer(test_settings).synthesize(responses, TASK, 10.0, now=NOW)

    assert "## Analysis" in report.report_text
    assert "Aggregate Assessment" not in report.report_text
    assert report.aggregate_confidence is None


def test_aggregate_confidence_and_stars(test_settings):
    responses = [
        ok("coordinator"), ok("technical_analyst"), ok("news_researcher"),
        failed("sentiment_analyst"),
    ]

    report = ReportSynthesizer(test_settings).synthesize(responses, TASK, 10.0, now=NOW)

    assert report.aggregate_confidence == 75
    assert "**Signal strength**: ★★★\n" in report.report_text
    assert "**Aggregate confidence**: 75%" in report.report_text


def test_stars_capped_at_five(test_settings):
    responses = [ok(f"agent_{i}") for i in range(7)]
    report = ReportSynthesizer(test_settings).synthesize(responses, TASK, 1.0, now=NOW)
    assert "★★★★★\n" in report.report_text
    assert "★★★★★★" not in report.report_text
    assert report.aggregate_confidence == 100


def test_sections_grouped_by_role_in_first_appearance_order(test_settings):
    responses = [
        ok("news_researcher", "First news take"),
        ok("technical_analyst", "RSI is neutral", confidence=72),
        ok("news_researcher", "Second news take"),
    ]

    text = ReportSynthesizer(test_settings).synthesize(responses, TASK, 1.0, now=NOW).report_text

    assert text.count("### News Researcher") == 1
    assert text.index("### News Researcher") < text.index("### Technical Analyst")
    assert text.index("First news take") < text.index("Second news take") < text.index("### Technical Analyst")
    assert "_Confidence: 72%_" in text


def test_header_carries_symbol_question_and_counts(test_settings):
    text = ReportSynthesizer(test_settings).synthesize([ok("my_custom_role")], TASK, 1.0, now=NOW).report_text

    assert text.startswith("# AI Collaboration Report - BTC")
    assert "**Generated**: 2024-05-01 12:00:00 UTC" in text
    assert "**Question**: Is now a good entry point?" in text
    assert "**Agents**: 1 (succeeded: 1, failed: 0)" in text
    assert "### my_custom_role" in text


def test_responses_kept_in_input_order(test_settings):
    responses = [ok("a"), failed("b"), ok("c")]
    report = ReportSynthesizer(test_settings).synthesize(responses, TASK, 3.0, now=NOW)
    assert [r.agent_id for r in report.agent_responses] == ["a", "b", "c"]
    assert report.stats.elapsed_ms == 3.0
