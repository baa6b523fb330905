from __future__ import annotations

import logging

from ..domain.dtos import TranscriptionRequest, TranscriptionResult
from ..domain.entities import MAX_AUDIO_SIZE_BYTES, SUPPORTED_AUDIO_MIME_TYPES, Transcription
from ..domain.errors import AudioFormatError, AudioSizeError
from ..domain.ports import AudioSourcePort, SpeechToTextPort

logger = logging.getLogger(__name__)


class TranscribeAudioUseCase:
    """Turn one audio message into text.

    Format and size are checked before anything is downloaded, so a rejected
    file never reaches the speech service.
    """

    def __init__(
        self,
        speech_to_text: SpeechToTextPort,
        audio_source: AudioSourcePort,
        max_size_bytes: int = MAX_AUDIO_SIZE_BYTES,
    ):
        self._speech_to_text = speech_to_text
        self._audio_source = audio_source
        self._max_size_bytes = max_size_bytes

    def check(self, mime_type: str, file_size: int | None) -> None:
        """Raise if an audio with this type and size would be rejected.

        Callers that still have to resolve the download URL use this to fail
        before contacting Telegram. An unknown size passes.
        """
        if mime_type not in SUPPORTED_AUDIO_MIME_TYPES:
            raise AudioFormatError(f"Unsupported audio format: {mime_type}")
        if file_size is not None and file_size > self._max_size_bytes:
            raise AudioSizeError(
                f"Audio file too large: {file_size} bytes (limit {self._max_size_bytes} bytes)"
            )

    def execute(self, request: TranscriptionRequest) -> TranscriptionResult:
        audio_file = request.audio_file
        try:
            self.check(audio_file.mime_type, audio_file.file_size)

            audio = self._audio_source.fetch(audio_file)
            text = self._speech_to_text.transcribe(
                audio,
                audio_file.mime_type,
                {
                    "file_id": audio_file.file_id,
                    "format": audio_file.file_extension(),
                    "user_id": request.user_id,
                    "duration": request.audio_duration,
                },
            )
            transcription = Transcription(
                user_id=request.user_id,
                text=text,
                created_at=request.timestamp,
                audio_duration=request.audio_duration,
                username=request.username,
            )
        except Exception:
            logger.exception(
                "Transcription failed for user %s (file %s, %s, %s bytes)",
                request.user_id,
                audio_file.file_id,
                audio_file.mime_type,
                audio_file.file_size,
            )
            raise

        logger.info(
            "Transcribed %s words for user %s", transcription.word_count(), request.user_id
        )
        return TranscriptionResult(
            text=transcription.text,
            file_id=audio_file.file_id,
            metadata={
                "duration": request.audio_duration,
                "format": audio_file.file_extension(),
                "timestamp": request.timestamp,
                "user_id": request.user_id,
                "username": request.username,
                "file_size": audio_file.file_size,
                "word_count": transcription.word_count(),
            },
        )
