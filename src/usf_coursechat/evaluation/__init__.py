"""
Evaluation Module - LLM-as-judge evaluation harness.
====================================================

Asks built-in course questions through a chat session and scores each
answer against an expected answer with a 1-3 similarity judge.

Components:
- judge: Similarity scoring via a single-shot completion
- cases: Built-in lab07 and project06 suites
- runner: Evaluation execution and reporting

Example:
    >>> from usf_coursechat.evaluation import EvaluationRunner, get_suites
    >>> report = EvaluationRunner(session).run(get_suites("all"))
    >>> print(f"Pass rate: {report.pass_rate:.1%}")
"""

from usf_coursechat.evaluation.judge import judge_similarity, parse_judge_score
from usf_coursechat.evaluation.cases import (
    LAB07,
    PROJECT06,
    SUITES,
    EvaluationSuite,
    JudgeCase,
    get_suites,
)
from usf_coursechat.evaluation.runner import (
    CaseResult,
    EvaluationReport,
    EvaluationRunner,
)

__all__ = [
    # Judge
    "judge_similarity",
    "parse_judge_score",
    # Cases
    "LAB07",
    "PROJECT06",
    "SUITES",
    "EvaluationSuite",
    "JudgeCase",
    "get_suites",
    # Runner
    "CaseResult",
    "EvaluationReport",
    "EvaluationRunner",
]
