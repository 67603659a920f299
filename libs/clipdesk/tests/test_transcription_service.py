from __future__ import annotations

import pytest

from clipdesk.exceptions import ConfigurationError, SizeLimitExceededError
from clipdesk.models.media import MediaKind
from clipdesk.models.transcript import (
    FlaggedWord,
    ProfanitySource,
    Transcription,
    TranscriptSegment,
    TranscriptWord,
)
from clipdesk.services.transcription import TranscriptionService


@pytest.fixture()
def transcript() -> Transcription:
    return Transcription(
        full_text="oh darn",
        words=[TranscriptWord("oh", 0.0, 0.3), TranscriptWord("darn", 0.4, 0.8)],
        segments=[TranscriptSegment(index=0, text="Oh darn")],
        detected_language="en",
        language_confidence=0.9,
        flagged_profanity=[FlaggedWord("s***", 2.0, 2.5)],
    )


async def test_video_audio_is_extracted_to_temp_and_removed(
    media, asr, files, record_factory, transcript
) -> None:
    asr.result = transcript
    service = TranscriptionService(media, asr, files)
    record = record_factory()

    outcome = await service.transcribe_file(record)

    assert outcome.audio_size_bytes == media.audio_bytes
    assert asr.seen_paths[0].endswith(".mp3")
    assert asr.seen_paths[0] != record.path
    assert asr.seen_exists == [True]
    assert list(files.temp_dir.iterdir()) == []
    assert [w.word for w in outcome.transcription.segments[0].words] == ["oh", "darn"]
    assert outcome.transcription.segments[0].start == 0.0


async def test_audio_upload_is_sent_directly(media, asr, files, record_factory) -> None:
    service = TranscriptionService(media, asr, files)
    record = record_factory(file_id="song", kind=MediaKind.AUDIO)

    await service.transcribe_file(record)

    assert asr.seen_paths == [record.path]
    assert media.ops("extract_audio") == []


async def test_size_ceiling_is_checked_before_transcribing(
    media, asr, files, record_factory
) -> None:
    media.audio_bytes = 2048
    service = TranscriptionService(media, asr, files, max_audio_bytes=1024)

    with pytest.raises(SizeLimitExceededError) as exc_info:
        await service.transcribe_file(record_factory())

    assert exc_info.value.limit_bytes == 1024
    assert asr.seen_paths == []
    assert list(files.temp_dir.iterdir()) == []


async def test_detect_profanity_merges_custom_words(
    media, asr, files, record_factory, transcript
) -> None:
    asr.result = transcript
    service = TranscriptionService(media, asr, files)

    report = await service.detect_profanity(record_factory(), {"darn"})

    assert [(s.word, s.source) for s in report.spans] == [
        ("s***", ProfanitySource.EXTERNAL_DETECTOR),
        ("darn", ProfanitySource.CUSTOM_LIST),
    ]
    assert report.transcription.detected_language == "en"


async def test_missing_provider_is_a_configuration_error(media, files, record_factory) -> None:
    service = TranscriptionService(media, None, files)
    with pytest.raises(ConfigurationError):
        await service.transcribe_file(record_factory())
    await service.close()
