from __future__ import annotations

import logging
from dataclasses import dataclass

from ..domain.dtos import (
    ExtractedFinancialData,
    FinanceExtractionRequest,
    SaveResult,
    TranscriptionRequest,
    TranscriptionResult,
)
from ..domain.entities import Transcription
from .extract_financial_data import ExtractFinancialDataUseCase
from .save_financial_data import SaveFinancialDataUseCase
from .save_transcription import SaveTranscriptionUseCase
from .transcribe_audio import TranscribeAudioUseCase

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessedAudio:
    transcription: TranscriptionResult
    stored_transcription: Transcription
    extracted: ExtractedFinancialData
    saved: SaveResult


class ProcessAudioMessageUseCase:
    """Transcribe, store, extract and save one audio message, in that order."""

    def __init__(
        self,
        transcribe: TranscribeAudioUseCase,
        save_transcription: SaveTranscriptionUseCase,
        extract: ExtractFinancialDataUseCase,
        save_financial_data: SaveFinancialDataUseCase,
    ):
        self._transcribe = transcribe
        self._save_transcription = save_transcription
        self._extract = extract
        self._save_financial_data = save_financial_data

    def execute(self, request: TranscriptionRequest) -> ProcessedAudio:
        transcription = self._transcribe.execute(request)
        stored = self._save_transcription.execute(transcription)

        extracted = self._extract.execute(
            FinanceExtractionRequest(
                user_id=request.user_id,
                transcription_text=transcription.text,
                username=request.username,
                audio_duration=request.audio_duration,
                timestamp=request.timestamp,
            )
        )
        saved = self._save_financial_data.execute(extracted, transcription.text)
        logger.info(
            "Processed audio %s for user %s: %s transactions saved",
            request.audio_file.file_id,
            request.user_id,
            len(saved.transaction_ids),
        )
        return ProcessedAudio(
            transcription=transcription,
            stored_transcription=stored,
            extracted=extracted,
            saved=saved,
        )
