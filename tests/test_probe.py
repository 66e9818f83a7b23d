import subprocess
from pathlib import Path
from unittest import mock

import pytest

from postkit.probe import VideoInfo, parse_frame_rate, probe_video


def _reply(stdout: bytes, returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=b"")


def test_parse_fractional_rate():
    assert parse_frame_rate("24000/1001") == (24000, 1001)


@pytest.mark.parametrize("rate", [24, 25, 30, 48])
def test_parse_whole_rates(rate):
    assert parse_frame_rate(str(rate)) == (rate, 1)


def test_parse_decimal_rate_uses_thousandths():
    assert parse_frame_rate("23.976") == (23976, 1000)


def test_parse_decimal_near_whole_rate_truncates():
    assert parse_frame_rate("48.0") == (48, 1)


@pytest.mark.parametrize("text", ["abc", "24/x", "x/1", "", " 24", "-1/1"])
def test_parse_invalid_rate(text):
    with pytest.raises(ValueError):
        parse_frame_rate(text)


def test_probe_nonexistent_file_returns_none(tmp_path):
    assert probe_video(tmp_path / "missing.mov") is None


def test_probe_video_with_stubbed_ffprobe():
    replies = [_reply(b"1920,1080,24/1\n"), _reply(b"audio\n"), _reply(b"240\n")]
    with mock.patch("subprocess.run", side_effect=replies) as run:
        info = probe_video(Path("/media/clip.mov"))
    assert info == VideoInfo(
        width=1920, height=1080, fps_num=24, fps_den=1, has_audio=True, total_frames=240
    )
    assert run.call_count == 3
    assert run.call_args_list[0].args[0][0] == "ffprobe"
    assert run.call_args_list[0].args[0][-1] == "/media/clip.mov"


def test_probe_video_without_audio_or_count():
    replies = [_reply(b"2048,858,25\n"), _reply(b""), _reply(b"N/A\n")]
    with mock.patch("subprocess.run", side_effect=replies):
        info = probe_video(Path("/media/clip.mov"))
    assert info is not None
    assert (info.width, info.height) == (2048, 858)
    assert (info.fps_num, info.fps_den) == (25, 1)
    assert info.has_audio is False
    assert info.total_frames == 0


def test_probe_video_failing_ffprobe():
    with mock.patch("subprocess.run", return_value=_reply(b"", returncode=1)):
        assert probe_video(Path("/media/clip.mov")) is None


def test_probe_video_short_output():
    with mock.patch("subprocess.run", return_value=_reply(b"1920,1080\n")):
        assert probe_video(Path("/media/clip.mov")) is None


def test_probe_video_missing_ffprobe():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("ffprobe")):
        assert probe_video(Path("/media/clip.mov")) is None