"""Shared pytest fixtures for finance bot tests."""

from datetime import date
from typing import Any

import pytest

from finance_bot.config import Settings
from finance_bot.container import build_container
from finance_bot.db import create_db_engine, create_session_factory
from finance_bot.domain.dtos import RawExtraction, TranscriptionRequest
from finance_bot.domain.entities import AudioFile, FinancialTransaction
from finance_bot.domain.errors import AudioFetchError
from finance_bot.domain.ports import AudioSourcePort, FinanceExtractionPort, SpeechToTextPort
from finance_bot.migrations import init_db
from finance_bot.repositories.accounts import SQLAccountRepository
from finance_bot.repositories.extraction_logs import SQLExtractionLogRepository
from finance_bot.repositories.goals import SQLGoalRepository
from finance_bot.repositories.transactions import SQLTransactionRepository
from finance_bot.repositories.transcriptions import SQLTranscriptionRepository

SPOKEN_TEXT = "Gastei 50 reais no almoço e recebi 2000 de salário"


class FakeSpeechToText(SpeechToTextPort):
    def __init__(self, text: str = SPOKEN_TEXT):
        self.text = text
        self.calls: list[dict[str, Any]] = []

    def transcribe(self, audio: bytes, mime_type: str, metadata: dict[str, Any]) -> str:
        self.calls.append({"audio": audio, "mime_type": mime_type, "metadata": metadata})
        return self.text


class FakeExtractor(FinanceExtractionPort):
    def __init__(self, raw: RawExtraction | None = None, error: Exception | None = None):
        self.raw = raw or RawExtraction()
        self.error = error
        self.calls: list[str] = []

    def extract(self, text: str, metadata: dict[str, Any]) -> RawExtraction:
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.raw


class FakeAudioSource(AudioSourcePort):
    def __init__(self, payload: bytes = b"fake-ogg-bytes"):
        self.payload = payload
        self.fetched: list[str] = []

    def fetch(self, audio_file: AudioFile) -> bytes:
        if not audio_file.is_remote():
            raise AudioFetchError(f"Local file reading is not supported: {audio_file.file_path}")
        self.fetched.append(audio_file.file_id)
        return self.payload


def lunch_and_salary() -> RawExtraction:
    return RawExtraction(
        transactions=[
            {"amount": 50, "type": "expense", "category": "alimentação", "description": "almoço"},
            {"amount": 2000, "type": "income", "category": "salário", "description": "salário"},
        ],
        notes=["Primeiro registro do mês"],
        confidence=0.95,
    )


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'finance.db'}",
        telegram_bot_token="test-token",
        openai_api_key="test-key",
        environment="test",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def transaction_repo(session_factory):
    return SQLTransactionRepository(session_factory)


@pytest.fixture
def account_repo(session_factory):
    return SQLAccountRepository(session_factory)


@pytest.fixture
def goal_repo(session_factory):
    return SQLGoalRepository(session_factory)


@pytest.fixture
def transcription_repo(session_factory):
    return SQLTranscriptionRepository(session_factory)


@pytest.fixture
def extraction_log_repo(session_factory):
    return SQLExtractionLogRepository(session_factory)


@pytest.fixture
def speech_to_text():
    return FakeSpeechToText()


@pytest.fixture
def extractor():
    return FakeExtractor(lunch_and_salary())


@pytest.fixture
def audio_source():
    return FakeAudioSource()


@pytest.fixture
def container(settings, speech_to_text, extractor, audio_source):
    """Fully wired container with fake external services."""
    container = build_container(
        settings,
        speech_to_text=speech_to_text,
        extractor=extractor,
        audio_source=audio_source,
    )
    init_db(container.engine)
    yield container
    container.dispose()


@pytest.fixture
def voice_file():
    return AudioFile(
        file_id="voice-1",
        file_path="https://api.telegram.org/file/bottoken/voice/file_1.oga",
        mime_type="audio/ogg",
        file_size=4096,
    )


@pytest.fixture
def transcription_request(voice_file):
    return TranscriptionRequest(audio_file=voice_file, user_id=42, username="maria", audio_duration=3.5)


@pytest.fixture
def make_transaction():
    def factory(**overrides: Any) -> FinancialTransaction:
        values: dict[str, Any] = {
            "user_id": 42,
            "amount": "50.00",
            "type": "expense",
            "category": "alimentação",
            "description": "almoço",
            "date": date(2024, 5, 10),
        }
        values.update(overrides)
        return FinancialTransaction(**values)

    return factory
