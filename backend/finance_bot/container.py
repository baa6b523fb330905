"""Composition root: builds every adapter and use case once per process."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .ai import HttpAudioSource, OpenAIFinanceExtractor, OpenAISpeechToText, create_openai_client
from .config import Settings
from .db import create_db_engine, create_session_factory
from .domain.ports import AudioSourcePort, FinanceExtractionPort, SpeechToTextPort
from .repositories.accounts import SQLAccountRepository
from .repositories.extraction_logs import SQLExtractionLogRepository
from .repositories.goals import SQLGoalRepository
from .repositories.transactions import SQLTransactionRepository
from .repositories.transcriptions import SQLTranscriptionRepository
from .use_cases.extract_financial_data import ExtractFinancialDataUseCase
from .use_cases.financial_summary import GetFinancialSummaryUseCase
from .use_cases.process_audio import ProcessAudioMessageUseCase
from .use_cases.save_financial_data import SaveFinancialDataUseCase
from .use_cases.save_transcription import SaveTranscriptionUseCase
from .use_cases.transcribe_audio import TranscribeAudioUseCase

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    transactions: SQLTransactionRepository
    accounts: SQLAccountRepository
    goals: SQLGoalRepository
    transcriptions: SQLTranscriptionRepository
    extraction_logs: SQLExtractionLogRepository
    speech_to_text: SpeechToTextPort
    extractor: FinanceExtractionPort
    audio_source: AudioSourcePort
    transcribe_audio: TranscribeAudioUseCase
    save_transcription: SaveTranscriptionUseCase
    extract_financial_data: ExtractFinancialDataUseCase
    save_financial_data: SaveFinancialDataUseCase
    financial_summary: GetFinancialSummaryUseCase
    process_audio: ProcessAudioMessageUseCase

    def dispose(self) -> None:
        close = getattr(self.audio_source, "close", None)
        if close is not None:
            close()
        self.engine.dispose()
        logger.info("Container resources released")


def build_container(
    settings: Settings,
    *,
    speech_to_text: SpeechToTextPort | None = None,
    extractor: FinanceExtractionPort | None = None,
    audio_source: AudioSourcePort | None = None,
) -> Container:
    """Wire the application. Ports may be overridden, e.g. with fakes in tests."""
    engine = create_db_engine(settings)
    session_factory = create_session_factory(engine)

    transactions = SQLTransactionRepository(session_factory)
    accounts = SQLAccountRepository(session_factory)
    goals = SQLGoalRepository(session_factory)
    transcriptions = SQLTranscriptionRepository(session_factory)
    extraction_logs = SQLExtractionLogRepository(session_factory)

    if speech_to_text is None or extractor is None:
        client = create_openai_client(settings.openai_api_key)
        speech_to_text = speech_to_text or OpenAISpeechToText(client, settings.transcription_model)
        extractor = extractor or OpenAIFinanceExtractor(client, settings.ai_model)
    audio_source = audio_source or HttpAudioSource()

    transcribe_audio = TranscribeAudioUseCase(speech_to_text, audio_source, settings.max_audio_size_bytes)
    save_transcription = SaveTranscriptionUseCase(transcriptions)
    extract_financial_data = ExtractFinancialDataUseCase(extractor)
    save_financial_data = SaveFinancialDataUseCase(
        transactions,
        accounts,
        goals,
        extraction_logs=extraction_logs,
        min_confidence=settings.extraction_confidence_threshold,
    )

    return Container(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        transactions=transactions,
        accounts=accounts,
        goals=goals,
        transcriptions=transcriptions,
        extraction_logs=extraction_logs,
        speech_to_text=speech_to_text,
        extractor=extractor,
        audio_source=audio_source,
        transcribe_audio=transcribe_audio,
        save_transcription=save_transcription,
        extract_financial_data=extract_financial_data,
        save_financial_data=save_financial_data,
        financial_summary=GetFinancialSummaryUseCase(transactions, accounts, goals),
        process_audio=ProcessAudioMessageUseCase(
            transcribe_audio, save_transcription, extract_financial_data, save_financial_data
        ),
    )
