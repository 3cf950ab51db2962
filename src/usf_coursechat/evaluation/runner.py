"""
Runner Module - Evaluation execution harness.
=============================================

Runs a suite through a chat session:
1. Ask each question (resetting the dialogue first when the suite says so)
2. Score the answer with the judge model
3. Compare the score with the case's minimum
4. Collect results into a report
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from usf_coursechat.evaluation.cases import EvaluationSuite, JudgeCase
from usf_coursechat.evaluation.judge import judge_similarity
from usf_coursechat.rag.chat_base import ChatModel
from usf_coursechat.rag.dialogue import ChatSession
from usf_coursechat.shared.errors import EvaluationError
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Result Classes
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class CaseResult:
    """Result for a single case."""

    suite: str
    name: str
    question: str
    want: str
    min_score: int
    answer: str = ""
    score: int = 0
    tokens: int = 0
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.score >= self.min_score


@dataclass
class EvaluationReport:
    """Complete evaluation result."""

    timestamp: str
    duration_seconds: float = 0.0
    results: list[CaseResult] = field(default_factory=list)

    @property
    def num_cases(self) -> int:
        return len(self.results)

    @property
    def num_passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def pass_rate(self) -> float:
        if not self.results:
            return 0.0
        return self.num_passed / self.num_cases

    @property
    def all_passed(self) -> bool:
        return self.num_passed == self.num_cases

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "metadata": {
                "timestamp": self.timestamp,
                "num_cases": self.num_cases,
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "pass_rate": round(self.pass_rate, 3),
            "results": [
                {
                    "suite": r.suite,
                    "name": r.name,
                    "question": r.question,
                    "answer": r.answer,
                    "score": r.score,
                    "min_score": r.min_score,
                    "passed": r.passed,
                    "error": r.error,
                }
                for r in self.results
            ],
        }

    def summary(self) -> str:
        """Generate summary report."""
        lines = [
            "=" * 50,
            "EVALUATION REPORT",
            "=" * 50,
            f"Timestamp: {self.timestamp}",
            f"Cases: {self.num_cases}",
            f"Passed: {self.num_passed}",
            f"Pass rate: {self.pass_rate:.1%}",
            f"Duration: {self.duration_seconds:.1f}s",
            "=" * 50,
        ]
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Evaluation Runner
# ─────────────────────────────────────────────────────────────────────────────


class EvaluationRunner:
    """
    Runs judged question suites against a chat session.

    Example:
        >>> runner = EvaluationRunner(session, judge_model=session.chat_model)
        >>> report = runner.run([LAB07])
        >>> print(report.summary())
    """

    def __init__(self, session: ChatSession, judge_model: Optional[ChatModel] = None):
        """
        Initialize evaluation runner.

        Args:
            session: Chat session that answers the questions
            judge_model: Model that scores answers (defaults to the session's)
        """
        self.session = session
        self.judge_model = judge_model or session.chat_model

    def run(
        self,
        suites: list[EvaluationSuite],
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> EvaluationReport:
        """
        Run every case of every suite, in order.

        Args:
            suites: Suites to run
            progress_callback: Optional callback(current, total, case_name)

        Raises:
            ModelCallError: If a chat or judge call fails
        """
        start = time.time()
        report = EvaluationReport(timestamp=datetime.now().isoformat())
        total = sum(len(suite) for suite in suites)
        current = 0

        for suite in suites:
            logger.info(f"Running suite {suite.name} ({len(suite)} cases)")
            self.session.reset()

            for case in suite.cases:
                if suite.reset_between_cases:
                    self.session.reset()

                report.results.append(self._run_case(suite.name, case))
                current += 1
                if progress_callback:
                    progress_callback(current, total, case.name)

        report.duration_seconds = time.time() - start
        logger.info(f"Evaluation complete: {report.num_passed}/{report.num_cases} passed")
        return report

    def _run_case(self, suite_name: str, case: JudgeCase) -> CaseResult:
        result = CaseResult(
            suite=suite_name,
            name=case.name,
            question=case.question,
            want=case.want,
            min_score=case.min_score,
        )

        answer = self.session.ask(case.question)
        result.answer = answer.answer
        result.tokens = answer.total_tokens

        try:
            result.score = judge_similarity(self.judge_model, case.want, answer.answer)
        except EvaluationError as e:
            result.error = str(e)
            logger.warning(f"[{case.name}] {e}")
            return result

        logger.info(f"[{case.name}] judge similarity score = {result.score}")
        if not result.passed:
            logger.warning(
                f"{case.name} failed: similarity {result.score} < {case.min_score}"
            )
        return result
