from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models import dashboard_db_model  # noqa: F401
from models.common_models import ParsedTable
from routers.deps import get_suggestion_adapter
from services import excel_reader_service, storage_service
from services.suggestion_service import SuggestionAdapter



class FakeGroqClient:
    """Stands in for groq.AsyncGroq: returns one suggest_charts tool call or raises."""

    def __init__(self, arguments=None, error=None):
        self.arguments = arguments
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        tool_calls = None
        if self.arguments is not None:
            tool_calls = [
                SimpleNamespace(function=SimpleNamespace(name="suggest_charts", arguments=self.arguments))
            ]
        message = SimpleNamespace(content=None, tool_calls=tool_calls)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def sales_table() -> ParsedTable:
    return ParsedTable(
        headers=["Region", "Sales"],
        rows=[
            {"Region": "East", "Sales": 100},
            {"Region": "West", "Sales": 50},
            {"Region": "East", "Sales": 30},
        ],
        sheet_name="Sheet1",
    )


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage_service, "UPLOAD_DIR", str(tmp_path))
    excel_reader_service._TABLE_CACHE.clear()
    yield tmp_path
    excel_reader_service._TABLE_CACHE.clear()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def groq_client():
    return FakeGroqClient(
        arguments=(
            '{"suggestions": ['
            '{"type": "bar", "title": "Sales by Region", "xAxis": "Region", "yAxis": "Sales", "reason": "Compare regions"},'
            '{"type": "pie", "title": "Revenue share", "xAxis": "Region", "yAxis": "Revenue", "reason": "Parts of a whole"}'
            "]}"
        )
    )


@pytest.fixture
def client(db_session, groq_client):
    """
    TestClient bound to the in-memory database and a fake suggestion service.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_suggestion_adapter] = lambda: SuggestionAdapter(client=groq_client)

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def fake_groq():
    return FakeGroqClient
