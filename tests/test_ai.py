"""Tests for the OpenAI and HTTP adapters using stubbed clients."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from openai import OpenAIError

from finance_bot.ai import HttpAudioSource, OpenAIFinanceExtractor, OpenAISpeechToText, create_openai_client
from finance_bot.domain.entities import AudioFile
from finance_bot.domain.errors import AudioFetchError, ConfigurationError, ExtractionError, TranscriptionError


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAISpeechToText:
    """Tests for the transcription adapter."""

    def test_returns_stripped_text(self):
        client = MagicMock()
        client.audio.transcriptions.create.return_value = SimpleNamespace(text="  gastei dez reais \n")
        adapter = OpenAISpeechToText(client, model="whisper-1")

        text = adapter.transcribe(b"bytes", "audio/ogg", {"file_id": "f1", "format": "ogg"})

        assert text == "gastei dez reais"
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["model"] == "whisper-1"
        assert kwargs["file"] == ("f1.ogg", b"bytes", "audio/ogg")

    def test_empty_text_is_an_error(self):
        client = MagicMock()
        client.audio.transcriptions.create.return_value = SimpleNamespace(text="   ")
        with pytest.raises(TranscriptionError, match="No transcription text"):
            OpenAISpeechToText(client).transcribe(b"x", "audio/ogg", {})

    def test_service_error_is_wrapped(self):
        client = MagicMock()
        client.audio.transcriptions.create.side_effect = OpenAIError("quota exceeded")
        with pytest.raises(TranscriptionError, match="quota exceeded"):
            OpenAISpeechToText(client).transcribe(b"x", "audio/ogg", {})


class TestOpenAIFinanceExtractor:
    """Tests for the extraction adapter."""

    def test_parses_json_payload(self):
        client = MagicMock()
        client.chat.completions.create.return_value = chat_response(
            '{"transactions": [{"amount": 50, "type": "expense", "category": "alimentação",'
            ' "description": "almoço"}], "notes": ["ok"], "confidence": 0.9}'
        )
        raw = OpenAIFinanceExtractor(client).extract("Gastei 50 no almoço", {})

        assert raw.transactions[0]["amount"] == 50
        assert raw.accounts == []
        assert raw.notes == ["ok"]
        assert raw.confidence == 0.9
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", ""])
    def test_malformed_json_is_an_error(self, content):
        client = MagicMock()
        client.chat.completions.create.return_value = chat_response(content)
        with pytest.raises(ExtractionError, match="invalid JSON format"):
            OpenAIFinanceExtractor(client).extract("texto", {})

    def test_service_error_is_wrapped(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = OpenAIError("timeout")
        with pytest.raises(ExtractionError):
            OpenAIFinanceExtractor(client).extract("texto", {})


class TestHttpAudioSource:
    """Tests for downloading audio into memory."""

    def make_file(self, path="https://api.telegram.org/file/bottoken/voice.oga"):
        return AudioFile(file_id="f1", file_path=path, mime_type="audio/ogg", file_size=3)

    def test_downloads_bytes(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"ogg"))
        source = HttpAudioSource(httpx.Client(transport=transport))
        assert source.fetch(self.make_file()) == b"ogg"

    def test_http_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        source = HttpAudioSource(httpx.Client(transport=transport))
        with pytest.raises(AudioFetchError, match="f1"):
            source.fetch(self.make_file())

    def test_local_path_not_supported(self):
        source = HttpAudioSource(httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
        with pytest.raises(AudioFetchError, match="Local file reading is not supported"):
            source.fetch(self.make_file("/tmp/voice.oga"))


def test_openai_client_requires_key():
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        create_openai_client(None)
