"""OpenAI and HTTP adapters for the speech, extraction and audio-source ports."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from openai import OpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from .domain.dtos import RawExtraction
from .domain.entities import AudioFile
from .domain.errors import AudioFetchError, ConfigurationError, ExtractionError, TranscriptionError
from .domain.ports import AudioSourcePort, FinanceExtractionPort, SpeechToTextPort
from .schemas import ExtractionPayload

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "alimentação",
    "transporte",
    "moradia",
    "saúde",
    "educação",
    "lazer",
    "compras",
    "contas",
    "salário",
    "investimentos",
    "transferência",
    "outros",
]

EXTRACTION_INSTRUCTIONS = (
    "You are a personal-finance assistant. The user dictated a message, usually in "
    "Brazilian Portuguese. Return ONLY valid JSON in this schema: "
    '{"transactions": [{"amount": number, "description": string, "category": string, '
    '"type": "income"|"expense"|"transfer", "date": string|null, "account": string|null, '
    '"tags": [string]|null}], '
    '"accounts": [{"name": string, "type": "checking"|"savings"|"credit"|"investment"|"cash", '
    '"bank": string|null, "balance": number|null}], '
    '"goals": [{"title": string, "targetAmount": number, "currentAmount": number, '
    '"category": string, "description": string|null, "targetDate": string|null}], '
    '"notes": [string], "confidence": number}. '
    "Amounts are positive numbers; the type carries the direction. "
    "Prefer these categories when one fits: "
    f"{json.dumps(DEFAULT_CATEGORIES, ensure_ascii=False)}. "
    "Use ISO dates (YYYY-MM-DD) and resolve relative phrases such as \"ontem\" against "
    "the reference date given in the message. Omit fields you cannot infer. "
    "confidence is between 0 and 1. Use empty lists when nothing financial is mentioned."
)


def create_openai_client(api_key: str | None) -> OpenAI:
    if not api_key:
        raise ConfigurationError("Missing required configuration: OPENAI_API_KEY")
    return OpenAI(api_key=api_key)


class OpenAISpeechToText(SpeechToTextPort):
    def __init__(self, client: OpenAI, model: str = "whisper-1"):
        self._client = client
        self._model = model

    def transcribe(self, audio: bytes, mime_type: str, metadata: dict[str, Any]) -> str:
        filename = f"{metadata.get('file_id') or 'audio'}.{metadata.get('format') or 'ogg'}"
        try:
            response = self._client.audio.transcriptions.create(
                model=self._model,
                file=(filename, audio, mime_type),
            )
        except OpenAIError as exc:
            logger.error("OpenAI transcription failed: %s", exc)
            raise TranscriptionError(f"Failed to transcribe audio: {exc}") from exc

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise TranscriptionError("No transcription text was returned")
        return text


class OpenAIFinanceExtractor(FinanceExtractionPort):
    def __init__(self, client: OpenAI, model: str = "gpt-4o-mini"):
        self._client = client
        self._model = model

    def _user_message(self, text: str, metadata: dict[str, Any]) -> str:
        reference = metadata.get("timestamp")
        if reference is not None and hasattr(reference, "date"):
            reference = reference.date().isoformat()
        return f"Reference date: {reference or 'unknown'}\nText: {text}"

    def extract(self, text: str, metadata: dict[str, Any]) -> RawExtraction:
        logger.info("Extracting financial data from text: %s...", text[:50])
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": EXTRACTION_INSTRUCTIONS},
                    {"role": "user", "content": self._user_message(text, metadata)},
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except OpenAIError as exc:
            logger.error("OpenAI extraction failed: %s", exc)
            raise ExtractionError(f"Failed to extract financial data: {exc}") from exc

        content = response.choices[0].message.content or ""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("Extraction response is not JSON: %s", content[:200])
            raise ExtractionError("Failed to analyze financial data: invalid JSON format") from exc
        if not isinstance(data, dict):
            raise ExtractionError("Failed to analyze financial data: invalid JSON format")

        try:
            payload = ExtractionPayload.model_validate(data)
        except PydanticValidationError as exc:
            raise ExtractionError(f"Failed to analyze financial data: {exc}") from exc
        return payload.to_raw()


class HttpAudioSource(AudioSourcePort):
    """Downloads audio referenced by an http(s) URL into memory."""

    def __init__(self, client: httpx.Client | None = None, timeout: float = 60.0):
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout=timeout, connect=10.0))

    def fetch(self, audio_file: AudioFile) -> bytes:
        if not audio_file.is_remote():
            raise AudioFetchError(f"Local file reading is not supported: {audio_file.file_path}")
        try:
            response = self._client.get(audio_file.file_path)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            # the URL embeds the bot token, so only the file id is logged
            logger.error("Failed to download audio %s: %s", audio_file.file_id, type(exc).__name__)
            raise AudioFetchError(f"Failed to download audio file {audio_file.file_id}") from exc
        return response.content

    def close(self) -> None:
        self._client.close()
