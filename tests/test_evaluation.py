"""Tests for answer-quality evaluation."""

from uuid import uuid4

import pytest

from project_brain.core.errors import ProviderError
from project_brain.domain.models import Answer, AnswerMetadata, Citation
from project_brain.services.evaluation import EvalCase, evaluate_answer, run_evaluation


def answer(text: str, uris: list[str]) -> Answer:
    return Answer(
        answer=text,
        citations=[Citation(id=uuid4(), title="t", uri=u, similarity=0.9, source="notes") for u in uris],
        metadata=AnswerMetadata(model="m"),
    )


class TestEvaluateAnswer:
    def test_full_score(self):
        case = EvalCase(name="launch", question="q", expected_keywords=["Oct 22"], min_citations=1)
        result = evaluate_answer(case, answer("The launch is on oct 22.", ["note://launch"]))

        assert result.passed
        assert result.score == pytest.approx(100)
        assert result.issues == []

    def test_empty_answer_scores_zero(self):
        result = evaluate_answer(EvalCase(name="x", question="q"), answer("", []))
        assert not result.passed
        assert result.score == 0

    def test_missing_keywords_partial_credit(self):
        case = EvalCase(name="x", question="q", expected_keywords=["launch", "gallery"], min_citations=0)
        result = evaluate_answer(case, answer("We launch soon", []))

        assert result.score == pytest.approx(20 + 30 + 15 + 20)
        assert result.issues == ["Missing keywords: gallery"]
        assert not result.passed

    def test_too_few_citations(self):
        case = EvalCase(name="x", question="q", min_citations=2)
        result = evaluate_answer(case, answer("text", ["a"]))
        assert not result.passed
        assert "Expected 2 citations, got 1" in result.issues

    def test_citation_without_uri(self):
        result = evaluate_answer(EvalCase(name="x", question="q"), answer("text", [""]))
        assert result.score == pytest.approx(80)
        assert not result.passed


class TestRunEvaluation:
    async def test_summary(self, orchestrator, write_gateway):
        await write_gateway.write(
            {"type": "chunk", "project": "p1", "source": "notes", "uri": "u1", "content": "Launch Oct 22"}
        )
        cases = [
            EvalCase(name="launch", question="When is the launch?", project="p1", expected_keywords=["Oct 22"]),
            EvalCase(name="empty", question="Anything?", project="nowhere"),
        ]
        summary = await run_evaluation(orchestrator, cases)

        assert summary.total == 2
        assert summary.passed == 1
        assert summary.results[0].latency_ms is not None

    async def test_errors_recorded_per_case(self, orchestrator, language_model):
        language_model.error = ProviderError("model unavailable")
        summary = await run_evaluation(orchestrator, [EvalCase(name="x", question="q")])

        assert summary.passed == 0
        assert summary.results[0].issues == ["model unavailable"]
        assert summary.average_score == 0
