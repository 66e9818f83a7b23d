"""ProRes detection and ffmpeg arguments for DCP packaging."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ProResError(Exception):
    """Raised when ProRes media cannot be inspected or wrapped."""


class ProResProfile(Enum):
    """ProRes codec profiles; each value is the profile's four-character code."""

    PROXY = "apco"
    LT = "apcs"
    STANDARD = "apcn"
    HQ = "apch"
    XQ = "ap4h"


@dataclass
class ProResDcpOptions:
    """Options for creating a DCP from a ProRes source."""

    input_file: Path = field(default_factory=Path)
    output_dir: Path = field(default_factory=Path)
    title: str = ""
    issuer: str = "DCP Wizard"
    profile: ProResProfile = ProResProfile.HQ
    fps_num: int = 24
    fps_den: int = 1
    sample_rate: int = 48000
    audio_bit_depth: int = 24


def has_ffprobe() -> bool:
    """Return True if ffprobe is on the PATH."""
    return shutil.which("ffprobe") is not None


def has_ffmpeg() -> bool:
    """Return True if ffmpeg is on the PATH."""
    return shutil.which("ffmpeg") is not None


def _probe_first_video_stream(file: Path, entry: str) -> str:
    if not has_ffprobe():
        raise ProResError("ffprobe not found")
    cmd = [
        "ffprobe", "-v", "error", "-select_streams", "v:0",
        "-show_entries", f"stream={entry}", "-of", "csv=p=0", str(file),
    ]
    try:
        completed = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as exc:
        raise ProResError(f"IO error: {exc}") from exc
    return completed.stdout.decode("utf-8", errors="replace").strip()


def is_prores_file(file: Path) -> bool:
    """Return True if the file's first video stream is ProRes."""
    return _probe_first_video_stream(file, "codec_name") == "prores"


def detect_prores_profile(file: Path) -> ProResProfile:
    """Detect the ProRes profile of the file's first video stream."""
    return parse_profile(_probe_first_video_stream(file, "profile"))


def parse_profile(s: str) -> ProResProfile:
    """Map an ffprobe profile description to a profile; unknown ones give HQ."""
    if "Proxy" in s:
        return ProResProfile.PROXY
    if "LT" in s:
        return ProResProfile.LT
    if "Standard" in s:
        return ProResProfile.STANDARD
    if "XQ" in s:
        return ProResProfile.XQ
    return ProResProfile.HQ


def build_video_extract_args(input_path: Path, output_path: Path) -> list[str]:
    """Return ffmpeg arguments that copy the ProRes video into an MXF file."""
    return [
        "-y", "-i", str(input_path),
        "-c:v", "copy",
        "-f", "mxf",
        str(output_path),
    ]


def build_audio_extract_args(
    input_path: Path, output_path: Path, bit_depth: int, sample_rate: int
) -> list[str]:
    """Return ffmpeg arguments that extract the audio as PCM into an MXF file."""
    return [
        "-y", "-i", str(input_path),
        "-vn",
        "-c:a", f"pcm_s{bit_depth}le",
        "-ar", str(sample_rate),
        "-f", "mxf",
        str(output_path),
    ]