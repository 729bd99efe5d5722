"""
Client for the community LeetCode search API.
"""
import logging
from functools import lru_cache
from typing import Any, Optional

import httpx

from app.core.config import LEETCODE_API_URL, LEETCODE_TIMEOUT_SECONDS
from app.core.exceptions import UpstreamError
from app.schemas.question import LeetCodeProblem

logger = logging.getLogger(__name__)


def _first(item: dict, *keys: str) -> Optional[Any]:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _normalize_tags(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    tags = []
    for tag in raw:
        # topicTags entries are {"name": ..., "slug": ...}
        if isinstance(tag, dict):
            tag = tag.get("name") or tag.get("slug")
        if tag:
            tags.append(str(tag))
    return tags


def normalize_problem(item: dict) -> Optional[LeetCodeProblem]:
    """Map one search hit onto LeetCodeProblem; hits without a title are dropped."""
    title = _first(item, "title", "name", "slug")
    if not title:
        return None

    slug = _first(item, "slug", "titleSlug")
    difficulty = _first(item, "difficulty", "level")
    url = _first(item, "url", "link", "leetcodeUrl")
    if not url and slug:
        url = f"https://leetcode.com/problems/{slug}/"

    return LeetCodeProblem(
        id=str(_first(item, "id", "questionId", "slug") or title),
        title=str(title),
        url=str(url or ""),
        difficulty=str(difficulty).lower() if difficulty else None,
        tags=_normalize_tags(_first(item, "tags", "topicTags")),
    )


class LeetCodeClient:
    def __init__(
        self,
        base_url: str = LEETCODE_API_URL,
        timeout: float = LEETCODE_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def search(self, query: str, limit: Optional[int] = None) -> list[LeetCodeProblem]:
        """
        Search problems by free text.

        Raises:
            UpstreamError: Network failure, non-2xx status or a non-JSON body
        """
        if not query or not query.strip():
            return []

        try:
            response = self.http_client.get(f"{self.base_url}/search", params={"query": query.strip()})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"LeetCode search failed for '{query}': {e}")
            raise UpstreamError("LeetCode search failed") from e

        if not isinstance(data, list):
            logger.warning(f"LeetCode search for '{query}' returned {type(data).__name__}, expected a list")
            return []

        problems = [problem for problem in (normalize_problem(item) for item in data if isinstance(item, dict)) if problem]
        if limit is not None:
            problems = problems[:limit]

        logger.debug(f"LeetCode search '{query}' -> {len(problems)} problems")
        return problems


@lru_cache
def get_leetcode_client() -> LeetCodeClient:
    return LeetCodeClient()
