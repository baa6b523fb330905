from __future__ import annotations

import logging

from ..domain.dtos import TranscriptionResult
from ..domain.entities import Transcription, utcnow
from ..domain.repositories import TranscriptionRepository

logger = logging.getLogger(__name__)


class SaveTranscriptionUseCase:
    def __init__(self, repository: TranscriptionRepository):
        self._repository = repository

    def execute(self, result: TranscriptionResult) -> Transcription:
        metadata = result.metadata
        transcription = Transcription(
            user_id=metadata["user_id"],
            text=result.text,
            created_at=metadata.get("timestamp") or utcnow(),
            audio_duration=metadata.get("duration"),
            username=metadata.get("username"),
            metadata={
                "file_id": result.file_id,
                "format": metadata.get("format"),
                "file_size": metadata.get("file_size"),
                "word_count": metadata.get("word_count"),
            },
        )
        saved = self._repository.save(transcription)
        logger.info("Stored transcription %s for user %s", saved.id, saved.user_id)
        return saved
