from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from clipdesk.exceptions import InvalidInputError, TransformError
from clipdesk.models.media import MediaKind
from clipdesk.models.segment import Segment
from clipdesk.providers.media.ffmpeg import FFmpegMediaProvider, parse_probe_output
from clipdesk.utils.subprocess import RunResult


class RecordingRunner:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.list_files: list[str] = []
        self.returncode = 0
        self.stdout = b""
        self.stderr = b""
        self.exc: BaseException | None = None

    async def __call__(self, args, *, capture_output: bool = True, timeout_s=None) -> RunResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        if "concat" in argv:
            self.list_files.append(Path(argv[argv.index("-i") + 1]).read_text(encoding="utf-8"))
        if self.exc is not None:
            raise self.exc
        return RunResult(
            args=tuple(argv), returncode=self.returncode, stdout=self.stdout, stderr=self.stderr
        )


@pytest.fixture()
def runner(monkeypatch) -> RecordingRunner:
    fake = RecordingRunner()
    monkeypatch.setattr("clipdesk.providers.media.ffmpeg.run_subprocess", fake)
    return fake


@pytest.fixture()
def provider(tmp_path) -> FFmpegMediaProvider:
    ffmpeg = tmp_path / "bin" / "ffmpeg"
    ffprobe = tmp_path / "bin" / "ffprobe"
    ffmpeg.parent.mkdir()
    ffmpeg.write_text("")
    ffprobe.write_text("")
    return FFmpegMediaProvider(
        ffmpeg_bin=str(ffmpeg), ffprobe_bin=str(ffprobe), work_dir=str(tmp_path / "work")
    )


async def test_mute_segments_builds_volume_filter(provider, runner, tmp_path) -> None:
    out = tmp_path / "out" / "muted.mp4"
    await provider.mute_segments("in.mp4", [Segment(1, 2), Segment(3.5, 4)], str(out))

    argv = runner.calls[0]
    graph = argv[argv.index("-filter_complex") + 1]
    assert graph == (
        "[0:a]volume=enable='between(t,1.000,2.000)+between(t,3.500,4.000)':volume=0[outa]"
    )
    assert argv[argv.index("-c:v") + 1] == "copy"
    assert argv[argv.index("-c:a") + 1] == "aac"
    assert argv[-1] == str(out)
    assert out.parent.is_dir()


async def test_trim_single_segment_uses_seek(provider, runner, tmp_path) -> None:
    await provider.trim("in.mp4", [Segment(2, 7.5)], False, str(tmp_path / "t.mp4"))

    argv = runner.calls[0]
    assert argv[argv.index("-ss") + 1] == "2.000"
    assert argv[argv.index("-t") + 1] == "5.500"
    assert argv[argv.index("-c:v") + 1] == "libx264"
    assert argv[argv.index("-crf") + 1] == "23"
    assert "-r" not in argv


async def test_trim_normalize_adds_common_stream_layout(provider, runner, tmp_path) -> None:
    await provider.trim("in.mp4", [Segment(0, 1)], False, str(tmp_path / "t.mp4"), normalize=True)

    argv = runner.calls[0]
    assert argv[argv.index("-r") + 1] == "30"
    assert argv[argv.index("-ar") + 1] == "48000"
    assert argv[argv.index("-ac") + 1] == "2"


async def test_trim_join_concatenates_in_order(provider, runner, tmp_path) -> None:
    await provider.trim("in.mp4", [Segment(10, 12), Segment(0, 1)], True, str(tmp_path / "j.mp4"))

    graph = runner.calls[0][runner.calls[0].index("-filter_complex") + 1]
    assert "[0:v]trim=start=10.000:end=12.000,setpts=PTS-STARTPTS[v0]" in graph
    assert "[0:a]atrim=start=0.000:end=1.000,asetpts=PTS-STARTPTS[a1]" in graph
    assert graph.endswith("[v0][a0][v1][a1]concat=n=2:v=1:a=1[outv][outa]")


@pytest.mark.parametrize(
    "segments, join",
    [([Segment(0, 1), Segment(2, 3)], False), ([Segment(0, 1)], True), ([], False)],
)
async def test_trim_rejects_invalid_configuration(
    provider, runner, tmp_path, segments, join
) -> None:
    with pytest.raises(InvalidInputError):
        await provider.trim("in.mp4", segments, join, str(tmp_path / "x.mp4"))
    assert runner.calls == []


async def test_concatenate_copy_writes_and_removes_list_file(provider, runner, tmp_path) -> None:
    await provider.concatenate(
        ["/a/one.mp4", "/b/it's.mp4"], str(tmp_path / "m.mp4"), reencode=False
    )

    argv = runner.calls[0]
    assert argv[argv.index("-c") + 1] == "copy"
    assert argv[argv.index("-fflags") + 1] == "+genpts"
    assert runner.list_files[0] == "file '/a/one.mp4'\nfile '/b/it'\\''s.mp4'\n"
    assert list((tmp_path / "work").iterdir()) == []


async def test_concatenate_reencode_resamples_audio(provider, runner, tmp_path) -> None:
    await provider.concatenate(["/a.mp4", "/b.mp4"], str(tmp_path / "m.mp4"), reencode=True)

    argv = runner.calls[0]
    assert "-fflags" not in argv
    assert argv[argv.index("-af") + 1] == "aresample=async=1"
    assert argv[argv.index("-vsync") + 1] == "cfr"


async def test_nonzero_exit_raises_with_stderr(provider, runner, tmp_path) -> None:
    runner.returncode = 1
    runner.stderr = b"Invalid data found when processing input"
    with pytest.raises(TransformError) as exc_info:
        await provider.mute_segments("in.mp4", [Segment(0, 1)], str(tmp_path / "o.mp4"))
    assert exc_info.value.engine == "ffmpeg"
    assert "Invalid data found" in str(exc_info.value)


async def test_missing_binary_and_timeout_are_transform_errors(provider, runner, tmp_path) -> None:
    runner.exc = FileNotFoundError("ffmpeg")
    with pytest.raises(TransformError, match="binary not found"):
        await provider.extract_audio_track("in.mp4", str(tmp_path / "a.mp3"))

    runner.exc = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=1)
    with pytest.raises(TransformError, match="timed out"):
        await provider.extract_audio_track("in.mp4", str(tmp_path / "a.mp3"))


async def test_convert_container_replaces_source(provider, runner, tmp_path) -> None:
    src = tmp_path / "clip.MOV"
    src.write_bytes(b"raw")
    out = await provider.convert_container(str(src), MediaKind.VIDEO)
    assert out == str(tmp_path / "clip.mp4")
    assert not src.exists()
    assert "libx264" in runner.calls[0]

    same = tmp_path / "song.mp3"
    same.write_bytes(b"raw")
    assert await provider.convert_container(str(same), MediaKind.AUDIO) == str(same)
    assert len(runner.calls) == 1


async def test_convert_container_keeps_source_on_failure(provider, runner, tmp_path) -> None:
    src = tmp_path / "voice.wav"
    src.write_bytes(b"raw")
    runner.returncode = 1
    with pytest.raises(TransformError):
        await provider.convert_container(str(src), MediaKind.AUDIO)
    assert src.exists()
    assert not (tmp_path / "voice.mp3").exists()


async def test_probe_parses_json(provider, runner) -> None:
    runner.stdout = json.dumps(
        {
            "format": {"duration": "12.5", "format_name": "mov,mp4", "size": "2048"},
            "streams": [
                {"codec_type": "video", "codec_name": "h264", "width": 1280, "height": 720,
                 "r_frame_rate": "30/1", "bit_rate": "1000"},
                {"codec_type": "audio", "codec_name": "aac", "channels": 2, "sample_rate": "48000"},
            ],
        }
    ).encode()

    info = await provider.probe("in.mp4")
    assert info.duration == 12.5
    assert info.video is not None and info.video.resolution == "1280x720"
    assert info.audio is not None and info.audio.sample_rate == 48000
    assert runner.calls[0][-1] == "in.mp4"


def test_parse_probe_output_audio_only() -> None:
    info = parse_probe_output(
        {
            "format": {"duration": "3.0", "format_name": "mp3"},
            "streams": [{"codec_type": "audio", "codec_name": "mp3", "channels": 1}],
        }
    )
    assert info.video is None
    assert info.to_dict() == {
        "duration": 3.0,
        "size": None,
        "format": "mp3",
        "audio": {"codec": "mp3", "channels": 1, "sampleRate": None, "bitrate": None},
    }
