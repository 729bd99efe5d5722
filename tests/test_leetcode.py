"""
Tests for the LeetCode search client and technical topic selection.
"""
import httpx
import pytest

from app.core.exceptions import UpstreamError
from app.services.leetcode_client import LeetCodeClient, normalize_problem
from app.services.question_generation import (
    fallback_technical_questions,
    generate_technical_questions,
    parse_topics,
)
from tests.utils import FakeLeetCode, FakeLLM


def make_client(handler) -> LeetCodeClient:
    return LeetCodeClient(
        base_url="https://leetcode.test/",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_search_normalizes_results():
    """Hits are mapped onto LeetCodeProblem and limited."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[
            {"id": 1, "title": "Two Sum", "titleSlug": "two-sum", "difficulty": "Easy",
             "topicTags": [{"name": "Array", "slug": "array"}]},
            {"questionId": "20", "title": "Valid Parentheses", "url": "https://leetcode.com/problems/valid-parentheses/"},
            {"difficulty": "Hard"},
        ])

    problems = make_client(handler).search(" two ", limit=5)

    assert seen["url"] == "https://leetcode.test/search?query=two"
    assert [p.title for p in problems] == ["Two Sum", "Valid Parentheses"]
    assert problems[0].url == "https://leetcode.com/problems/two-sum/"
    assert problems[0].difficulty == "easy"
    assert problems[0].tags == ["Array"]
    assert problems[1].id == "20"

    assert len(make_client(handler).search("two", limit=1)) == 1


def test_search_blank_query_skips_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert make_client(handler).search("  ") == []


def test_search_non_list_body():
    problems = make_client(lambda request: httpx.Response(200, json={"error": "rate limited"})).search("tree")

    assert problems == []


@pytest.mark.parametrize("response", [
    httpx.Response(503, text="unavailable"),
    httpx.Response(200, text="<html>"),
])
def test_search_failures_raise_upstream(response):
    with pytest.raises(UpstreamError):
        make_client(lambda request: response).search("tree")


def test_normalize_drops_untitled():
    assert normalize_problem({"id": 3}) is None


def test_parse_topics_keeps_known_topics_in_order():
    text = "1. Dynamic Programming\n2. Graphs\n- arrays\n* Graphs\nblockchain"

    assert parse_topics(text) == ["dynamic programming", "graphs", "arrays"]
    assert parse_topics("") == []


def test_fallback_questions():
    drafts = fallback_technical_questions(job_id=3, count=2)

    assert [d.title for d in drafts] == ["Two Sum", "Valid Parentheses"]
    assert drafts[0].external_url == "https://leetcode.com/problems/two-sum/"
    assert all(d.type == "technical" and d.job_id == 3 for d in drafts)


def test_technical_generation_falls_back_on_search_failure(test_job):
    llm = FakeLLM("arrays, heap")
    leetcode = FakeLeetCode(error=UpstreamError("LeetCode search failed"))

    drafts = generate_technical_questions(llm, leetcode, test_job, 4)

    assert [d.title for d in drafts] == [
        "Two Sum", "Valid Parentheses", "Merge Two Sorted Lists", "Binary Tree Inorder Traversal",
    ]
    assert leetcode.queries == ["arrays"]


def test_technical_generation_falls_back_when_no_topics(test_job):
    leetcode = FakeLeetCode()

    drafts = generate_technical_questions(FakeLLM("I am not sure."), leetcode, test_job, 1)

    assert [d.title for d in drafts] == ["Two Sum"]
    assert leetcode.queries == []
