"""Frame extraction, metadata and playback for DCP and IMF content via ffmpeg tools."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_DEFAULT_FPS = 24.0
_U32_MASK = 0xFFFFFFFF
_U64_MAX = 2**64 - 1


class PreviewError(Exception):
    """Raised when a preview, extraction or render operation fails."""


@dataclass
class PlaybackOptions:
    """Options for frame-accurate playback."""

    input: Path = field(default_factory=Path)
    cpl_uuid: str = ""
    start_frame: int = 0
    # 0 plays to the end.
    end_frame: int = 0
    loop_playback: bool = False
    decode_to_display: bool = True
    display_colourspace: str = "sRGB"
    gpu_device: int = -1


@dataclass
class FrameInfo:
    """Metadata of a frame's video stream."""

    frame_number: int = 0
    width: int = 0
    height: int = 0
    bitrate_kbps: int = 0
    codec: str = ""


def _frame_seconds(frame: int) -> str:
    return f"{frame / _DEFAULT_FPS:.3f}"


def _run_ffmpeg(cmd: list[str], failure: str) -> None:
    try:
        completed = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as exc:
        raise PreviewError(f"Failed to run {cmd[0]}: {exc}") from exc
    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace")
        raise PreviewError(f"{failure}: {stderr}")


def extract_frame(input_path: Path, frame: int, output_image: Path) -> None:
    """Write one frame of ``input_path`` to ``output_image``, assuming 24 fps."""
    cmd = [
        "ffmpeg", "-y", "-i", str(input_path),
        "-ss", _frame_seconds(frame),
        "-frames:v", "1",
        str(output_image),
    ]
    _run_ffmpeg(cmd, "Frame extraction failed")


def _as_unsigned(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if not 0 <= value <= _U64_MAX:
        return None
    return value


def _parse_u64(text: str) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= _U64_MAX else None


def _frame_info_from_stream(stream: dict[str, Any], frame: int) -> FrameInfo:
    width = _as_unsigned(stream.get("width")) or 0
    height = _as_unsigned(stream.get("height")) or 0
    bitrate = 0
    bit_rate = stream.get("bit_rate")
    if isinstance(bit_rate, str):
        parsed = _parse_u64(bit_rate)
        if parsed is not None:
            bitrate = (parsed // 1000) & _U32_MASK
    codec = stream.get("codec_name")
    return FrameInfo(
        frame_number=frame,
        width=width & _U32_MASK,
        height=height & _U32_MASK,
        bitrate_kbps=bitrate,
        codec=codec if isinstance(codec, str) else "",
    )


def get_frame_info(input_path: Path, frame: int) -> FrameInfo:
    """Return video stream metadata from ffprobe without decoding the frame.

    If ffprobe cannot be run, an empty FrameInfo is returned; if there is no
    video stream, only the frame number is filled in.
    """
    cmd = [
        "ffprobe", "-v", "quiet", "-print_format", "json", "-show_streams",
        str(input_path),
    ]
    try:
        completed = subprocess.run(cmd, capture_output=True, check=False)
    except OSError:
        return FrameInfo()

    try:
        data = json.loads(completed.stdout.decode("utf-8", errors="replace"))
    except ValueError:
        data = None

    streams = data.get("streams") if isinstance(data, dict) else None
    if isinstance(streams, list):
        for stream in streams:
            if isinstance(stream, dict) and stream.get("codec_type") == "video":
                return _frame_info_from_stream(stream, frame)
    return FrameInfo(frame_number=frame)


def play(opts: PlaybackOptions) -> None:
    """Play the input with ffplay, blocking until playback ends."""
    cmd = ["ffplay", "-autoexit", str(opts.input)]
    if opts.start_frame > 0:
        cmd += ["-ss", _frame_seconds(opts.start_frame)]
    if opts.loop_playback:
        cmd += ["-loop", "0"]
    try:
        completed = subprocess.run(cmd, check=False)
    except OSError as exc:
        raise PreviewError(f"Failed to run ffplay: {exc}") from exc
    if completed.returncode != 0:
        raise PreviewError(f"ffplay exited with code {completed.returncode}")


def render_to_sequence(
    input_path: Path, output_dir: Path, image_format: str | None = None
) -> None:
    """Render every frame of the input to ``output_dir`` as numbered images."""
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PreviewError(f"Failed to create output directory: {exc}") from exc
    ext = image_format or "png"
    pattern = output_dir / f"frame_%06d.{ext}"
    cmd = ["ffmpeg", "-y", "-i", str(input_path), str(pattern)]
    _run_ffmpeg(cmd, "Render failed")