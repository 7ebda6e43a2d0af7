"""Answer-quality evaluation.

Scores an ``Answer`` against a test case: 20 points for a non-empty answer,
30 for enough citations, up to 30 for expected keywords and 20 when every
citation carries a uri. A case passes at 70 points with no issues.
"""

import time
from collections.abc import Sequence

from pydantic import BaseModel, Field

from project_brain.core.errors import ApplicationError
from project_brain.core.logging import get_logger
from project_brain.domain.models import Answer
from project_brain.services.orchestrator import AnswerOrchestrator

logger = get_logger(__name__)

PASS_THRESHOLD = 70.0


class EvalCase(BaseModel):
    name: str
    question: str
    project: str | None = None
    expected_keywords: list[str] = Field(default_factory=list)
    min_citations: int = 1


class EvalResult(BaseModel):
    test: str
    passed: bool = True
    issues: list[str] = Field(default_factory=list)
    score: float = 0.0
    max_score: float = 100.0
    latency_ms: int | None = None


class EvalSummary(BaseModel):
    results: list[EvalResult]
    passed: int
    total: int
    average_score: float


def evaluate_answer(case: EvalCase, answer: Answer) -> EvalResult:
    result = EvalResult(test=case.name)
    text = answer.answer.lower()

    if not answer.answer:
        result.passed = False
        result.issues.append("No answer generated")
        return result
    result.score += 20

    if len(answer.citations) < case.min_citations:
        result.passed = False
        result.issues.append(f"Expected {case.min_citations} citations, got {len(answer.citations)}")
    else:
        result.score += 30

    missing = [k for k in case.expected_keywords if k.lower() not in text]
    if case.expected_keywords:
        found = len(case.expected_keywords) - len(missing)
        result.score += found / len(case.expected_keywords) * 30
    else:
        result.score += 30
    if missing:
        result.issues.append(f"Missing keywords: {', '.join(missing)}")

    invalid = [c for c in answer.citations if not c.uri]
    if invalid:
        result.issues.append(f"{len(invalid)} citations missing URIs")
    else:
        result.score += 20

    result.passed = result.score >= PASS_THRESHOLD and not result.issues
    return result


async def run_evaluation(orchestrator: AnswerOrchestrator, cases: Sequence[EvalCase]) -> EvalSummary:
    """Ask every case and score the answers.

    A case whose ``ask`` raises scores zero with the error as its issue.
    """
    results: list[EvalResult] = []
    for case in cases:
        logger.info(f"📝 Test: {case.name}", question=case.question)
        started = time.perf_counter()
        try:
            answer = await orchestrator.ask(case.question, project=case.project)
        except ApplicationError as e:
            logger.warning(f"❌ {case.name} errored: {e.message}")
            results.append(EvalResult(test=case.name, passed=False, issues=[e.message]))
            continue

        result = evaluate_answer(case, answer)
        result.latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"{'✅ PASSED' if result.passed else '❌ FAILED'} {case.name}",
            score=round(result.score, 1),
            latency_ms=result.latency_ms,
            citations=len(answer.citations),
            issues=result.issues,
        )
        results.append(result)

    total = len(results)
    return EvalSummary(
        results=results,
        passed=sum(1 for r in results if r.passed),
        total=total,
        average_score=sum(r.score for r in results) / total if total else 0.0,
    )
