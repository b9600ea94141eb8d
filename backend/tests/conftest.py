import json
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from edupath.core.config import settings
from edupath.main import app
from edupath.providers import factory
from edupath.providers.llm.mock_adapter import MockLLMProvider
from edupath.services.session_store import reset_session_store

TEST_START_YEAR = 2027
"""Fixed month-picker year so answers don't depend on the calendar."""


def university_rows_json(*rows: dict) -> str:
    """Serialize rows the way the search model returns them."""
    return json.dumps({"universities": list(rows)})


def plan_answers(
    *,
    country: str = "UK",
    course: str = "Data Science",
    gpa: str = "8.5",
    english_test: str = "ielts",
    english_score: str = "7.5",
    work_exp: str = "0",
    year: int = TEST_START_YEAR,
) -> list[tuple[str, str]]:
    """(step_id, value) pairs that walk the university flow to the end."""
    answers = [
        ("goal", "plan"),
        ("plan_intro", "begin"),
        ("plan_country", country),
        ("plan_course", course),
        ("university_preview", "continue"),
        ("plan_start_when", f"Jan to Mar-{year}"),
        ("bachelors_degree", "B.Tech in Computer Science"),
        ("target_university", ""),
        ("plan_work_exp", work_exp),
        ("plan_gpa", gpa),
        ("plan_english_test", english_test),
    ]
    if english_test != "none":
        answers.append(("plan_english_score", english_score))
    return answers


@pytest.fixture
def mock_llm() -> Iterator[MockLLMProvider]:
    """Fixture that provides mock LLM and resets after test.

    Injects MockLLMProvider into the factory singleton so that
    get_llm_provider() (and therefore the search adapter) returns it.
    """
    mock = MockLLMProvider()
    factory._llm_provider = mock

    yield mock

    factory.reset_providers()


@pytest.fixture(autouse=True)
def _reset_sessions() -> Iterator[None]:
    """Every test starts with an empty session store."""
    yield
    reset_session_store()


@pytest.fixture
def no_debounce(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable the live-search debounce delay for API tests."""
    monkeypatch.setattr(settings, "search_debounce_ms", 0)


@pytest_asyncio.fixture
async def client(
    mock_llm: MockLLMProvider,  # noqa: ARG001
    no_debounce: None,  # noqa: ARG001
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the mock LLM installed."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
