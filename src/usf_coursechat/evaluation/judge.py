"""
Judge Module - LLM-as-judge answer similarity.
==============================================

Scores how close a chat answer is to an expected answer on a 1-3 scale:

    1 = Low similarity (wrong or off-topic)
    2 = Medium similarity
    3 = High similarity (correct and complete)
"""

from usf_coursechat.rag.chat_base import ChatModel
from usf_coursechat.rag.prompts import JUDGE_SYSTEM_PROMPT, build_judge_prompt
from usf_coursechat.shared.errors import EvaluationError
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)

VALID_SCORES = {"1": 1, "2": 2, "3": 3}


def parse_judge_score(text: str) -> int:
    """
    Parse the judge's reply into a score.

    Raises:
        EvaluationError: If the reply is not exactly 1, 2 or 3
    """
    score = VALID_SCORES.get(text.strip())
    if score is None:
        raise EvaluationError(f"Invalid judge output: {text!r}")
    return score


def judge_similarity(chat_model: ChatModel, want: str, got: str) -> int:
    """
    Ask the model to score answer similarity.

    Args:
        chat_model: Model used as the judge
        want: Expected answer
        got: Answer produced by the chat session

    Returns:
        Similarity score in {1, 2, 3}

    Raises:
        ModelCallError: If the judge call fails
        EvaluationError: If the judge reply is not a valid score
    """
    result = chat_model.complete_once(JUDGE_SYSTEM_PROMPT, build_judge_prompt(want, got))
    score = parse_judge_score(result.text)
    logger.debug(f"Judge score {score} ({result.total_tokens} tokens)")
    return score
