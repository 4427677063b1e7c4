import os
import tempfile

# Point config at throwaway storage before any app module is imported
_TMP_DIR = tempfile.mkdtemp(prefix="sheet-chat-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'sessions.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["GROQ_API_KEY"] = ""

import pytest

from models.dataset_models import Dataset


class FakeLLM:
    """Stands in for the Groq-backed LLMService."""

    def __init__(self, reply: str = "Here is what I found.", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, system_prompt: str, message: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "message": message})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def sales_dataset():
    return Dataset.from_records(
        [
            {"id": 1, "region": "North", "sales": 100, "age": 25},
            {"id": 2, "region": "South", "sales": "50", "age": 35},
            {"id": 3, "region": "North", "sales": 25, "age": "40"},
            {"id": 4, "region": None, "sales": "n/a", "age": "abc"},
            {"id": 5, "region": "East", "sales": 75, "age": None},
            {"id": 6, "region": "North", "sales": 10, "age": 31},
            {"id": 7, "region": "South", "sales": None, "age": 30},
        ],
        columns=["id", "region", "sales", "age"],
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def api_client(fake_llm):
    from fastapi.testclient import TestClient
    from main import app

    original = app.state.llm
    app.state.llm = fake_llm
    with TestClient(app) as client:
        yield client
    app.state.llm = original
