"""Trailer packaging: ratings card, countdown leader and content assembly."""

from __future__ import annotations

import subprocess
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TrailerError(Exception):
    """Raised when a trailer cannot be packaged."""


class RatingSystem(Enum):
    """Content rating system."""

    MPAA = "Mpaa"
    BBFC = "Bbfc"
    FSK = "Fsk"
    CUSTOM = "Custom"


class TrailerBand(Enum):
    """Trailer band colour; each value is the ffmpeg colour used for it."""

    GREEN = "0x00FF00"
    RED = "0xFF0000"
    YELLOW = "0xFFFF00"


_DEFAULT_RATINGS = {
    RatingSystem.MPAA: "G",
    RatingSystem.BBFC: "U",
    RatingSystem.FSK: "FSK 0",
    RatingSystem.CUSTOM: "",
}


@dataclass
class TrailerOptions:
    """What to package into a trailer and where."""

    content_dir: Path = field(default_factory=Path)
    audio_file: Path = field(default_factory=Path)
    output_dir: Path = field(default_factory=Path)
    title: str = ""
    rating: str = ""
    rating_system: RatingSystem = RatingSystem.MPAA
    band: TrailerBand = TrailerBand.GREEN
    countdown_seconds: int = 0
    fps_num: int = 0
    fps_den: int = 0


@dataclass
class TrailerResult:
    """Where a packaged trailer went and the id of its composition."""

    output_dir: Path
    cpl_uuid: str


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _escape_quotes(text: str) -> str:
    return text.replace("'", "\\'")


def _run_quietly(cmd: list[str]) -> None:
    try:
        subprocess.run(cmd, capture_output=True, check=False)
    except OSError:
        pass


def package_trailer(opts: TrailerOptions) -> TrailerResult:
    """Generate a ratings card and countdown leader and assemble them with the content."""
    output_dir = Path(opts.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TrailerError(f"Failed to create output directory: {exc}") from exc
    try:
        (output_dir / "leader").mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TrailerError(f"Failed to create leader directory: {exc}") from exc

    if opts.fps_num > 0 and opts.fps_den > 0:
        fps = opts.fps_num / opts.fps_den
    else:
        fps = 24.0
    countdown = opts.countdown_seconds if opts.countdown_seconds > 0 else 8
    rating_text = opts.rating or _DEFAULT_RATINGS[opts.rating_system]

    ratings_card = output_dir / "ratings_card.png"
    drawtext = (
        f"drawtext=text='{_escape_quotes(opts.title)}':fontsize=72:fontcolor=white:"
        "x=(w-text_w)/2:y=(h-text_h)/2,"
        f"drawtext=text='{_escape_quotes(rating_text)}':fontsize=36:fontcolor=white:"
        "x=(w-text_w)/2:y=(h+text_h)/2+20"
    )
    card_cmd = [
        "ffmpeg", "-y", "-f", "lavfi",
        "-i", f"color=c={opts.band.value}:s=1920x1080:d=1",
        "-vf", drawtext,
        "-frames:v", "1",
        str(ratings_card),
    ]
    try:
        subprocess.run(card_cmd, capture_output=True, check=False)
    except OSError as exc:
        raise TrailerError(f"Failed to generate ratings card: {exc}") from exc

    leader_file = output_dir / "leader.mp4"
    countdown_filter = (
        f"drawtext=text='%{{eif\\:({countdown}-t)\\:d}}':fontsize=200:fontcolor=white:"
        "x=(w-text_w)/2:y=(h-text_h)/2"
    )
    _run_quietly([
        "ffmpeg", "-y", "-f", "lavfi",
        "-i", f"color=c=black:s=1920x1080:d={countdown}:r={_format_number(fps)}",
        "-vf", countdown_filter,
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(leader_file),
    ])

    concat_lines = []
    if leader_file.exists():
        concat_lines.append(f"file '{leader_file}'\n")
    content = Path(opts.content_dir)
    if content.is_file():
        concat_lines.append(f"file '{content}'\n")

    concat_file = output_dir / "concat.txt"
    try:
        concat_file.write_text("".join(concat_lines), encoding="utf-8")
    except OSError as exc:
        raise TrailerError(f"Failed to write concat file: {exc}") from exc

    _run_quietly([
        "ffmpeg", "-y", "-f", "concat", "-safe", "0",
        "-i", str(concat_file),
        "-c", "copy",
        str(output_dir / "trailer_packaged.mp4"),
    ])

    return TrailerResult(output_dir=output_dir, cpl_uuid=str(uuid.uuid4()))