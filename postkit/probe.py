"""Probe video files with ffprobe for resolution, frame rate and frame count."""

from __future__ import annotations

import math
import subprocess
from dataclasses import dataclass
from pathlib import Path

_U32_MAX = 2**32 - 1

_VIDEO_ARGS = (
    "ffprobe", "-v", "quiet", "-select_streams", "v:0",
    "-show_entries", "stream=r_frame_rate,width,height", "-of", "csv=p=0",
)
_AUDIO_ARGS = (
    "ffprobe", "-v", "quiet", "-select_streams", "a:0",
    "-show_entries", "stream=codec_type", "-of", "csv=p=0",
)
_FRAME_COUNT_ARGS = (
    "ffprobe", "-v", "quiet", "-select_streams", "v:0", "-count_frames",
    "-show_entries", "stream=nb_read_frames", "-of", "csv=p=0",
)
_WHOLE_RATES = (24, 25, 30, 48)


@dataclass
class VideoInfo:
    """Video stream metadata."""

    width: int
    height: int
    fps_num: int
    fps_den: int
    has_audio: bool
    total_frames: int


def _parse_u32(text: str) -> int:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(digits)
    if value > _U32_MAX:
        raise ValueError(f"out of range: {text!r}")
    return value


def _parse_f64(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"not a number: {text!r}")
    return float(text)


def _saturating_u32(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return int(value)


def parse_frame_rate(s: str) -> tuple[int, int]:
    """Parse ``num/den`` or a plain number into a (numerator, denominator) pair.

    Raises ValueError when the text is not a frame rate.
    """
    num, slash, den = s.partition("/")
    if slash:
        return _parse_u32(num), _parse_u32(den)
    fps = _parse_f64(s)
    whole = _saturating_u32(fps)
    if whole in _WHOLE_RATES:
        return whole, 1
    return _saturating_u32(fps * 1000.0), 1000


def _run(args: tuple[str, ...], path: Path) -> subprocess.CompletedProcess | None:
    try:
        return subprocess.run([*args, str(path)], capture_output=True, check=False)
    except OSError:
        return None


def _stdout(completed: subprocess.CompletedProcess | None) -> str:
    if completed is None:
        return ""
    return completed.stdout.decode("utf-8", errors="replace").strip()


def probe_video(path: Path) -> VideoInfo | None:
    """Return the video stream's metadata, or None if it cannot be probed."""
    completed = _run(_VIDEO_ARGS, path)
    if completed is None or completed.returncode != 0:
        return None

    parts = _stdout(completed).split(",")
    if len(parts) < 3:
        return None
    try:
        width = _parse_u32(parts[0])
        height = _parse_u32(parts[1])
        fps_num, fps_den = parse_frame_rate(parts[2])
    except ValueError:
        return None

    has_audio = bool(_stdout(_run(_AUDIO_ARGS, path)))

    try:
        total_frames = _parse_u32(_stdout(_run(_FRAME_COUNT_ARGS, path)))
    except ValueError:
        total_frames = 0

    return VideoInfo(
        width=width,
        height=height,
        fps_num=fps_num,
        fps_den=fps_den,
        has_audio=has_audio,
        total_frames=total_frames,
    )