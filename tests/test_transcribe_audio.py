"""Tests for TranscribeAudioUseCase and SaveTranscriptionUseCase."""

import pytest

from conftest import FakeAudioSource, FakeSpeechToText
from finance_bot.domain.dtos import TranscriptionRequest
from finance_bot.domain.entities import AudioFile
from finance_bot.domain.errors import AudioFetchError, AudioFormatError, AudioSizeError, TranscriptionError
from finance_bot.use_cases.save_transcription import SaveTranscriptionUseCase
from finance_bot.use_cases.transcribe_audio import TranscribeAudioUseCase


class FailingSpeechToText(FakeSpeechToText):
    def transcribe(self, audio, mime_type, metadata):
        raise TranscriptionError("No transcription text was returned")


def request_for(audio_file: AudioFile) -> TranscriptionRequest:
    return TranscriptionRequest(audio_file=audio_file, user_id=42, username="maria")


class TestTranscribeAudio:
    """Tests for the transcription use case."""

    def test_returns_text_and_metadata(self, speech_to_text, audio_source, transcription_request):
        use_case = TranscribeAudioUseCase(speech_to_text, audio_source)
        result = use_case.execute(transcription_request)

        assert result.text == speech_to_text.text
        assert result.file_id == "voice-1"
        assert result.metadata["format"] == "ogg"
        assert result.metadata["user_id"] == 42
        assert result.metadata["username"] == "maria"
        assert result.metadata["file_size"] == 4096
        assert result.metadata["duration"] == 3.5
        assert result.metadata["word_count"] == 10
        assert speech_to_text.calls[0]["audio"] == audio_source.payload
        assert speech_to_text.calls[0]["mime_type"] == "audio/ogg"

    def test_unsupported_format_rejected_before_any_call(self, speech_to_text, audio_source):
        audio = AudioFile(file_id="v", file_path="https://x/v.mp4", mime_type="video/mp4", file_size=100)
        use_case = TranscribeAudioUseCase(speech_to_text, audio_source)

        with pytest.raises(AudioFormatError, match="Unsupported audio format: video/mp4"):
            use_case.execute(request_for(audio))
        assert audio_source.fetched == []
        assert speech_to_text.calls == []

    def test_oversize_rejected_before_any_call(self, speech_to_text, audio_source):
        audio = AudioFile(
            file_id="big", file_path="https://x/big.mp3", mime_type="audio/mpeg", file_size=25 * 1024 * 1024
        )
        use_case = TranscribeAudioUseCase(speech_to_text, audio_source)

        with pytest.raises(AudioSizeError, match="Audio file too large"):
            use_case.execute(request_for(audio))
        assert audio_source.fetched == []
        assert speech_to_text.calls == []

    def test_custom_size_limit(self, speech_to_text, audio_source, voice_file):
        use_case = TranscribeAudioUseCase(speech_to_text, audio_source, max_size_bytes=1024)
        with pytest.raises(AudioSizeError):
            use_case.execute(request_for(voice_file))

    def test_check_without_audio_file(self, speech_to_text, audio_source):
        use_case = TranscribeAudioUseCase(speech_to_text, audio_source)

        use_case.check("audio/ogg", None)
        with pytest.raises(AudioFormatError):
            use_case.check("video/mp4", 100)
        with pytest.raises(AudioSizeError):
            use_case.check("audio/ogg", 25 * 1024 * 1024)

    def test_local_path_fails_clearly(self, speech_to_text):
        audio = AudioFile(file_id="v", file_path="/tmp/voice.ogg", mime_type="audio/ogg", file_size=100)
        use_case = TranscribeAudioUseCase(speech_to_text, FakeAudioSource())

        with pytest.raises(AudioFetchError, match="Local file reading is not supported"):
            use_case.execute(request_for(audio))
        assert speech_to_text.calls == []

    def test_port_failure_propagates(self, audio_source, transcription_request):
        use_case = TranscribeAudioUseCase(FailingSpeechToText(), audio_source)
        with pytest.raises(TranscriptionError):
            use_case.execute(transcription_request)


class TestSaveTranscription:
    """Tests for persisting transcription results."""

    def test_persists_result(self, speech_to_text, audio_source, transcription_request, transcription_repo):
        result = TranscribeAudioUseCase(speech_to_text, audio_source).execute(transcription_request)
        stored = SaveTranscriptionUseCase(transcription_repo).execute(result)

        assert stored.id is not None
        assert stored.username == "maria"
        assert stored.audio_duration == 3.5
        assert stored.metadata["file_id"] == "voice-1"
        assert transcription_repo.find_by_user_id(42)[0].text == speech_to_text.text
