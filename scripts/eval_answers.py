#!/usr/bin/env python3
"""Answer-quality eval harness.

Asks each test case against the live memory and scores keyword coverage,
citation counts and latency. Cases come from a JSON file of
``{name, question, project, expected_keywords, min_citations}`` objects.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from project_brain.api.dependencies import connect_services
from project_brain.core.config import settings
from project_brain.core.errors import ApplicationError
from project_brain.core.logging import get_logger, setup_logging
from project_brain.services.evaluation import EvalCase, run_evaluation

setup_logging()
logger = get_logger(__name__)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate Project Brain answers")
    parser.add_argument("cases_file", type=Path, help="JSON file with eval cases")
    parser.add_argument("--output", type=Path, help="Write the full results as JSON")
    args = parser.parse_args()

    if not args.cases_file.exists():
        logger.error(f"Cases file not found: {args.cases_file}")
        return 1

    cases = [EvalCase.model_validate(c) for c in json.loads(args.cases_file.read_text(encoding="utf-8"))]
    logger.info(f"🧪 Running {len(cases)} eval cases")

    try:
        async with connect_services(settings) as container:
            summary = await run_evaluation(container.orchestrator, cases)
    except ApplicationError as e:
        logger.error(f"Eval failed: {e.message}")
        return 1

    logger.info("=" * 50)
    logger.info(f"Passed: {summary.passed}/{summary.total}")
    logger.info(f"Average score: {summary.average_score:.1f}/100")

    if args.output:
        args.output.write_text(summary.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Results written to {args.output}")

    return 0 if summary.passed == summary.total else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
