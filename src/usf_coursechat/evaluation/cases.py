"""
Cases Module - Built-in evaluation question sets.
=================================================

Two suites of course questions with expected answers:

- lab07: single-turn questions asked in one shared dialogue
- project06: includes a follow-up question; the dialogue is reset before
  every case
"""

from dataclasses import dataclass, field

from usf_coursechat.shared.errors import EvaluationError

DEFAULT_MIN_SCORE = 2


@dataclass(frozen=True)
class JudgeCase:
    """One question with its expected answer."""

    name: str
    question: str
    want: str
    min_score: int = DEFAULT_MIN_SCORE


@dataclass(frozen=True)
class EvaluationSuite:
    """A named, ordered list of cases."""

    name: str
    cases: tuple[JudgeCase, ...] = field(default_factory=tuple)
    reset_between_cases: bool = False

    def __len__(self) -> int:
        return len(self.cases)


LAB07 = EvaluationSuite(
    name="lab07",
    cases=(
        JudgeCase(
            name="TestPhil",
            question="What courses is Phil Peterson teaching in Fall 2024?",
            want="Software Development",
        ),
        JudgeCase(
            name="TestPHIL",
            question="Which philosophy courses are offered this semester?",
            want="PHIL 110 (Great Philosophical Questions), and PHIL 240 (Ethics).",
        ),
        JudgeCase(
            name="TestBio",
            question="Where does Bioinformatics meet?",
            want="Bioinformatics meets in LM 365 (include meeting days/times when available).",
        ),
        JudgeCase(
            name="TestGuitar",
            question="Can I learn guitar this semester?",
            want=(
                "Answer whether a Guitar course is offered this semester and include "
                "course subject/number/title if available."
            ),
        ),
        JudgeCase(
            name="TestMultiple",
            question="I would like to take a Rhetoric course from Phil Choong. What can I take?",
            want="RHET 103 Public Speaking (include section/CRN if available).",
        ),
    ),
)

PROJECT06 = EvaluationSuite(
    name="project06",
    reset_between_cases=True,
    cases=(
        JudgeCase(
            name="TestCS272",
            question="Who is teaching CS 272?",
            want="Philip Peterson teaches CS 272.",
        ),
        JudgeCase(
            name="TestEmail",
            question="What's his email address?",
            want="Philip Peterson's email address is phpeterson@usfca.edu",
        ),
        JudgeCase(
            name="TestPhilGreg",
            question="What are Phil Peterson and Greg Benson teaching?",
            want=(
                "Phil Peterson teaches Software Development (CS 272) and Greg Benson "
                "teaches Operating Systems (CS 315)."
            ),
        ),
        JudgeCase(
            name="TestHR148",
            question="Which courses is Phil Peterson teaching in HR 148?",
            want="Phil Peterson teaches Software Development (CS 272) in HR 148.",
        ),
        JudgeCase(
            name="TestKHall",
            question=(
                "Which department's courses are most frequently scheduled in "
                "Kalmanovitz (KA) Hall?"
            ),
            want="Provide the department(s) with the most courses in Kalmanovitz Hall.",
        ),
    ),
)

SUITES = {suite.name: suite for suite in (LAB07, PROJECT06)}


def get_suites(name: str) -> list[EvaluationSuite]:
    """
    Look up suites by name.

    Args:
        name: "lab07", "project06" or "all"

    Raises:
        EvaluationError: If the name is unknown
    """
    key = name.lower().strip()
    if key == "all":
        return list(SUITES.values())
    if key not in SUITES:
        raise EvaluationError(
            f"Unknown suite: {name}. Available: {', '.join(SUITES)}, all"
        )
    return [SUITES[key]]
