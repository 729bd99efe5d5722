"""
Answer feedback for behavioral questions.

Feedback degrades instead of failing: when the LLM is unavailable, errors, or
replies with something unusable, callers get DEFAULT_FEEDBACK so a mock
interview can always continue.
"""
import logging
import math
from typing import Any, Optional

from app.core.exceptions import UpstreamError
from app.llm.provider import LLMProvider
from app.schemas.question import AnswerFeedback
from app.services.ai_service import request_json

logger = logging.getLogger(__name__)

FEEDBACK_SYSTEM_PROMPT = (
    "You are an expert interview coach who provides constructive feedback on "
    "behavioral interview answers. Always respond with valid JSON format."
)

DEGRADED_FEEDBACK_TEXT = (
    "Thank you for your answer. Due to a technical issue, detailed feedback is "
    "not available right now. Please try again later."
)

DEFAULT_FEEDBACK_TEXT = "Good answer!"
DEFAULT_SCORE = 7


def default_feedback() -> AnswerFeedback:
    """Feedback returned when the upstream call cannot produce a real one."""
    return AnswerFeedback(feedback=DEGRADED_FEEDBACK_TEXT, score=0, strengths=[], improvements=[])


def build_feedback_prompt(question: str, answer: str, job_context: Optional[str] = None) -> str:
    context_block = f"JOB CONTEXT: {job_context}\n\n" if job_context else ""
    return f"""Analyze the following behavioral interview answer and give feedback tailored to what the candidate actually said.

INTERVIEW QUESTION:
{question.strip()}

CANDIDATE'S ANSWER:
{answer.strip()}

{context_block}Evaluate the answer on:
1. Structure (STAR method: Situation, Task, Action, Result)
2. Specificity and detail: does it include concrete examples?
3. Relevance: does it address what was asked?
4. Professional communication: clarity and concision
5. Skills and competencies demonstrated

Reference specific details from the answer. Do not give generic feedback.

Return valid JSON with exactly this format:
{{
  "feedback": "3-5 sentences referencing the candidate's answer",
  "score": <number between 1-10>,
  "strengths": ["specific strength", "..."],
  "improvements": ["specific improvement", "..."]
}}"""


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


def _as_score(value: Any) -> int:
    if value is None:
        return DEFAULT_SCORE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    if not math.isfinite(score):
        return DEFAULT_SCORE
    score = round(score)
    return max(0, min(10, score))


def generate_answer_feedback(
    llm: Optional[LLMProvider],
    question: str,
    answer: str,
    job_context: Optional[str] = "Mock interview session",
) -> AnswerFeedback:
    """
    Grade a behavioral answer.

    Never raises for upstream problems; returns default_feedback() instead.
    Missing fields in an otherwise valid reply take the usual defaults.
    """
    try:
        result = request_json(
            llm,
            feature="answer_feedback",
            system_prompt=FEEDBACK_SYSTEM_PROMPT,
            prompt=build_feedback_prompt(question, answer, job_context),
            temperature=0.5,
            max_tokens=1000,
        )
    except UpstreamError as e:
        logger.warning(f"Using default feedback: {e.message}")
        return default_feedback()

    if not isinstance(result, dict):
        logger.warning(f"Using default feedback: expected a JSON object, got {type(result).__name__}")
        return default_feedback()

    feedback = AnswerFeedback(
        feedback=str(result.get("feedback") or DEFAULT_FEEDBACK_TEXT),
        score=_as_score(result.get("score")),
        strengths=_as_str_list(result.get("strengths")),
        improvements=_as_str_list(result.get("improvements")),
    )
    logger.info(
        f"Feedback generated: score={feedback.score}, strengths={len(feedback.strengths)}, "
        f"improvements={len(feedback.improvements)}"
    )
    return feedback
