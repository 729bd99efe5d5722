"""
Shared fixtures: an in-memory SQLite database wired into the app, users with
bearer tokens, and fakes for the LLM, LeetCode search and socket broadcasts.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.routes.discussions import get_connection_manager
from app.core.rate_limit import rate_limit_store
from app.db.base import Base
from app.db.models.job_application import JobApplication
from app.db.session import get_db
from app.llm.router import get_llm_provider
from app.schemas.question import LeetCodeProblem
from app.services.leetcode_client import get_leetcode_client
from tests.utils import FakeLeetCode, FakeLLM, RecordingSockets, auth_headers, make_user


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create tables, wire overrides and reset rate limits for each test."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    rate_limit_store.clear()
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    return make_user(db_session)


@pytest.fixture
def headers(test_user):
    """Bearer token for the test user."""
    return auth_headers(test_user)


@pytest.fixture
def test_job(db_session, test_user):
    """Create a job application owned by the test user."""
    job = JobApplication(
        user_id=test_user.id,
        title="Backend Engineer",
        company="Acme",
        description="Build Python services",
        skills=["Python", "PostgreSQL"],
        requirements=[],
    )
    db_session.add(job)
    db_session.commit()
    db_session.refresh(job)
    return job


@pytest.fixture
def fake_llm():
    """Install a FakeLLM; tests append replies to fake_llm.replies."""
    llm = FakeLLM()
    app.dependency_overrides[get_llm_provider] = lambda: llm
    return llm


@pytest.fixture
def no_llm():
    """Run as if OPENAI_API_KEY were unset."""
    app.dependency_overrides[get_llm_provider] = lambda: None


@pytest.fixture
def fake_leetcode():
    leetcode = FakeLeetCode(problems=[
        LeetCodeProblem(id="1", title="Two Sum", url="https://leetcode.com/problems/two-sum/",
                        difficulty="easy", tags=["arrays"]),
        LeetCodeProblem(id="15", title="3Sum", url="https://leetcode.com/problems/3sum/",
                        difficulty="medium", tags=["arrays", "two pointers"]),
    ])
    app.dependency_overrides[get_leetcode_client] = lambda: leetcode
    return leetcode


@pytest.fixture
def sockets():
    recorder = RecordingSockets()
    app.dependency_overrides[get_connection_manager] = lambda: recorder
    return recorder
