"""
Prompts Module - Fixed prompt texts for the course assistant.
=============================================================

Holds the system prompt that opens every dialogue, the fixed user-visible
fallback strings, and the judge rubric used by the evaluation harness.
"""

SYSTEM_PROMPT = (
    "You are an assistant for USF course queries. Use search_courses to find "
    "information. Answer in 1-2 plain sentences without any formatting, bullet "
    "points, numbered lists, bold text, or line breaks. Use format like: "
    "'Course X and Course Y are offered' or 'Professor teaches Course A (code) "
    "and Course B (code)'."
)

# Returned when the model's answer after a tool round is blank
FALLBACK_ANSWER = (
    "I found some information but couldn't formulate a response. Please try again."
)

JUDGE_SYSTEM_PROMPT = """You are an analyst for AI evaluation.
Score how similar the answer is to the expected answer, on a scale of 1–3:
1 = Low similarity (wrong or off-topic)
2 = Medium similarity
3 = High similarity (correct and complete)

Respond ONLY with the number 1, 2, or 3."""


def build_judge_prompt(expected: str, actual: str) -> str:
    """
    Build the user payload for a similarity judgement.

    Example:
        >>> print(build_judge_prompt("PHIL 240", "Ethics (PHIL 240)"))
        Expected answer:
        PHIL 240
        <BLANKLINE>
        Chat answer:
        Ethics (PHIL 240)
    """
    return f"Expected answer:\n{expected}\n\nChat answer:\n{actual}"
