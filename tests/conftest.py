import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import get_db, init_db
from dependencies.reports import get_report_generator
from schemas.reports import GradeRecord, SubjectMeta
from services.llm.base import LLMClient
from services.report_generator import ReportGenerator


class FakeLLM(LLMClient):
    """Records prompts; returns ``response`` or raises ``error``."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def generate(self, prompt: str, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def webdev():
    return SubjectMeta(code="WEBDEV", name="Web Development", instructor=None)


@pytest.fixture
def ana():
    return GradeRecord(
        student_id=1, display_name="Ana Reyes", student_number="2023-0001",
        course="BSIT", year_level=2,
        prelim=1.0, midterm=1.25, semifinal=1.5, final=1.0,
    )


@pytest.fixture
def ben():
    # nothing recorded yet
    return GradeRecord(
        student_id=2, display_name="Ben Cruz", student_number="2023-0002",
        course="BSCS", year_level=1,
    )


@pytest.fixture
def carl():
    return GradeRecord(
        student_id=3, display_name="Carl Santos", student_number="2023-0003",
        course="BSIT", year_level=2,
        prelim=3.5, midterm=3.0,
    )


# ==========================================================
# [API] in-memory database + fake language model
# ==========================================================
@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def fake_llm():
    return FakeLLM(error=None, response='{"analysis": "Steady performance overall."}')


@pytest.fixture
def client(session_factory, fake_llm):
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_report_generator] = lambda: ReportGenerator(fake_llm)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_llm():
    return FakeLLM
