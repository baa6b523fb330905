"""Interfaces for capabilities supplied by external systems."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .dtos import RawExtraction
from .entities import AudioFile


class SpeechToTextPort(ABC):
    """Turns raw audio into text."""

    @abstractmethod
    def transcribe(self, audio: bytes, mime_type: str, metadata: dict[str, Any]) -> str:
        """Return the spoken text. Raise ``TranscriptionError`` when none is produced."""


class FinanceExtractionPort(ABC):
    """Finds transactions, accounts and goals in free text."""

    @abstractmethod
    def extract(self, text: str, metadata: dict[str, Any]) -> RawExtraction:
        """Return raw candidates. Raise ``ExtractionError`` on malformed output."""


class AudioSourcePort(ABC):
    """Resolves an ``AudioFile`` reference to its bytes."""

    @abstractmethod
    def fetch(self, audio_file: AudioFile) -> bytes:
        """Return the audio payload. Raise ``AudioFetchError`` on failure."""
