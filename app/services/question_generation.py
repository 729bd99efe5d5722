"""
Question generation for a job: behavioral prompts from the LLM, technical
problems from LeetCode search guided by LLM-suggested topics.
"""
import logging
import math
import re
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import QUESTIONS_PER_TOPIC
from app.core.exceptions import UpstreamError
from app.db.models.job_application import JobApplication
from app.db.models.question import Question, QuestionDifficulty, QuestionType
from app.llm.provider import LLMProvider
from app.llm.router import get_model_for_feature
from app.schemas.question import QuestionCreate
from app.db.session import commit_or_raise
from app.services import question_store
from app.services.ai_service import request_json, sanitize_text
from app.services.leetcode_client import LeetCodeClient

logger = logging.getLogger(__name__)

LEETCODE_TOPICS = [
    "arrays", "strings", "linked list", "trees", "graphs", "sliding window", "heap",
    "dynamic programming", "backtracking", "greedy", "math", "bit manipulation",
    "two pointers", "stack", "queue", "recursion", "binary search", "hash table",
]

FALLBACK_TECHNICAL_PROBLEMS = [
    ("Two Sum", "easy", "two-sum"),
    ("Valid Parentheses", "easy", "valid-parentheses"),
    ("Merge Two Sorted Lists", "easy", "merge-two-sorted-lists"),
    ("Binary Tree Inorder Traversal", "medium", "binary-tree-inorder-traversal"),
    ("Maximum Subarray", "medium", "maximum-subarray"),
    ("Longest Substring Without Repeating Characters", "medium", "longest-substring-without-repeating-characters"),
    ("Add Two Numbers", "medium", "add-two-numbers"),
    ("Median of Two Sorted Arrays", "hard", "median-of-two-sorted-arrays"),
    ("Longest Palindromic Substring", "medium", "longest-palindromic-substring"),
]

BEHAVIORAL_SYSTEM_PROMPT = "You are an expert HR interviewer. Always return valid JSON."
TOPICS_SYSTEM_PROMPT = (
    "You are a helpful assistant for interview preparation. "
    "Keep the response technical and concise."
)

_TOPIC_SEPARATORS = re.compile(r"\n|,|\d+\.|-|\*|•")
_DIFFICULTIES = {d.value for d in QuestionDifficulty}


def _job_summary(job: JobApplication) -> str:
    skills = ", ".join(sanitize_text(skill) for skill in (job.skills or [])) or "Not specified"
    return (
        f"Job Title: {sanitize_text(job.title)}\n"
        f"Company: {sanitize_text(job.company)}\n"
        f"Job Description: {sanitize_text(job.description)}\n"
        f"Skills: {skills}\n"
        f"Experience Level: {sanitize_text(job.experience_level) or 'Not specified'}"
    )


def _reply_text(item: dict, *keys: str) -> str:
    """First usable text among `keys`; numbers are stringified, other non-text values are skipped."""
    for key in keys:
        value = item.get(key)
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            continue
        text = sanitize_text(str(value))
        if text:
            return text
    return ""


def generate_behavioral_questions(llm: Optional[LLMProvider], job: JobApplication, count: int) -> list[QuestionCreate]:
    """
    Ask the LLM for behavioral questions tailored to a job.

    Raises:
        UpstreamError: LLM unavailable or reply unusable
    """
    prompt = (
        f"Generate {count} behavioral interview questions for:\n"
        f"{_job_summary(job)}\n\n"
        'Return as JSON array: [{"question": "...", "context": "...", "tips": ["..."]}]'
    )
    result = request_json(
        llm,
        feature="behavioral_questions",
        system_prompt=BEHAVIORAL_SYSTEM_PROMPT,
        prompt=prompt,
        temperature=0.7,
        max_tokens=2000,
    )

    # Some replies wrap the array: {"questions": [...]}
    if isinstance(result, dict):
        result = result.get("questions", [])
    if not isinstance(result, list):
        raise UpstreamError("AI service returned an invalid response")

    questions = []
    for item in result[:count]:
        if not isinstance(item, dict):
            continue
        text = _reply_text(item, "question", "title")
        if not text:
            continue
        tips = item.get("tips") if isinstance(item.get("tips"), list) else []
        questions.append(QuestionCreate(
            job_id=job.id,
            type=QuestionType.BEHAVIORAL.value,
            title=text[:question_store.MAX_TITLE_LENGTH],
            description=_reply_text(item, "context") or text,
            tags=[sanitize_text(str(tip)) for tip in tips if tip],
        ))
    return questions


def parse_topics(text: str) -> list[str]:
    """Pull known topic names out of a free-form list, keeping order and dropping repeats."""
    topics = []
    for part in _TOPIC_SEPARATORS.split((text or "").lower()):
        topic = part.strip().strip(".\"'")
        if topic in LEETCODE_TOPICS and topic not in topics:
            topics.append(topic)
    return topics


def suggest_topics(llm: Optional[LLMProvider], job: JobApplication) -> list[str]:
    """
    Ask the LLM which problem topics suit the job.

    Raises:
        UpstreamError: LLM unavailable, failed, or suggested nothing usable
    """
    if llm is None:
        raise UpstreamError("AI service is not configured")

    prompt = (
        "Given the following job description, suggest the most relevant LeetCode question types "
        f"(from this list: {', '.join(LEETCODE_TOPICS)}). Return 3-5 types that would best help a "
        "candidate prepare. Only return the types, do not explain why.\n\n"
        f"{_job_summary(job)}"
    )
    try:
        response = llm.ask(
            TOPICS_SYSTEM_PROMPT,
            prompt,
            model=get_model_for_feature("technical_topics"),
            temperature=0.5,
            max_tokens=100,
        )
    except Exception as e:
        logger.error(f"Topic suggestion failed: {e}", exc_info=True)
        raise UpstreamError("AI service request failed") from e

    topics = parse_topics(response.content)
    if not topics:
        raise UpstreamError("AI service suggested no usable topics")
    logger.debug(f"Suggested topics for job_id={job.id}: {topics}")
    return topics[:5]


def fallback_technical_questions(job_id: int, count: int) -> list[QuestionCreate]:
    return [
        QuestionCreate(
            job_id=job_id,
            type=QuestionType.TECHNICAL.value,
            title=title,
            difficulty=difficulty,
            external_url=f"https://leetcode.com/problems/{slug}/",
        )
        for title, difficulty, slug in FALLBACK_TECHNICAL_PROBLEMS[:count]
    ]


def generate_technical_questions(
    llm: Optional[LLMProvider],
    leetcode: LeetCodeClient,
    job: JobApplication,
    count: int,
) -> list[QuestionCreate]:
    """
    LeetCode problems for the job's suggested topics.

    Falls back to a fixed list of classic problems when topic suggestion or the
    search fails or finds nothing.
    """
    try:
        topics = suggest_topics(llm, job)
        questions: list[QuestionCreate] = []
        seen_urls = set()
        for topic in topics:
            for problem in leetcode.search(topic, limit=QUESTIONS_PER_TOPIC):
                if not problem.url or problem.url in seen_urls:
                    continue
                seen_urls.add(problem.url)
                difficulty = problem.difficulty if problem.difficulty in _DIFFICULTIES else None
                questions.append(QuestionCreate(
                    job_id=job.id,
                    type=QuestionType.TECHNICAL.value,
                    title=problem.title[:question_store.MAX_TITLE_LENGTH],
                    description=f"LeetCode problem for {topic}",
                    difficulty=difficulty,
                    tags=problem.tags or [topic],
                    external_url=problem.url,
                ))
        if questions:
            return questions[:count]
        logger.warning(f"LeetCode search found nothing for job_id={job.id}, using fallback problems")
    except UpstreamError as e:
        logger.warning(f"Technical generation failed for job_id={job.id} ({e.message}), using fallback problems")

    return fallback_technical_questions(job.id, count)


def generate_for_job(
    db: Session,
    user_id: int,
    job: JobApplication,
    types: list[str],
    count: int,
    llm: Optional[LLMProvider],
    leetcode: LeetCodeClient,
) -> list[Question]:
    """
    Replace a job's questions with a freshly generated set.

    count is split evenly across the requested types (rounded up). A failed
    behavioral generation is logged and that type is skipped.
    """
    types = list(dict.fromkeys(t.value if isinstance(t, QuestionType) else t for t in types))
    per_type = math.ceil(count / len(types))

    drafts: list[QuestionCreate] = []
    if QuestionType.BEHAVIORAL.value in types:
        try:
            drafts.extend(generate_behavioral_questions(llm, job, per_type))
        except UpstreamError as e:
            logger.error(f"Behavioral generation failed for job_id={job.id}: {e.message}")

    if QuestionType.TECHNICAL.value in types:
        drafts.extend(generate_technical_questions(llm, leetcode, job, per_type))

    try:
        question_store.delete_by_job_id(db, job.id, user_id, commit=False)
        questions = question_store.create_questions(db, user_id, job.id, drafts, commit=False)
    except Exception:
        db.rollback()
        raise
    commit_or_raise(db, "save generated questions")
    for question in questions:
        db.refresh(question)

    logger.info(f"Generated {len(questions)} questions for job_id={job.id}, types={types}")
    return questions
