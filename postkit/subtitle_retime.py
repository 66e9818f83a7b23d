"""Re-time TTML or SRT subtitle files from one frame rate to another."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

_U32_MAX = 2**32 - 1
_TTML_TIME_PATTERNS = ('begin="', 'end="')
_SRT_ARROW = " --> "
_SRT_TC_LEN = 12


class RetimeError(Exception):
    """Raised when a subtitle file cannot be re-timed."""


@dataclass
class RetimeOptions:
    """Input and output files and the source and target frame rates."""

    input_file: Path
    output_file: Path
    source_fps_num: int
    source_fps_den: int
    target_fps_num: int
    target_fps_den: int
    # True stretches timing proportionally; False keeps the original times.
    stretch: bool = False


@dataclass
class RetimeResult:
    """Outcome of a re-time run."""

    output_file: Path
    entries_processed: int
    time_shift_ms: float = 0.0


def _to_float(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _as_u32(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return int(value)


def _round_u32(value: float) -> int:
    if math.isfinite(value):
        if value >= 0:
            value = math.floor(value + 0.5)
        else:
            value = -math.floor(-value + 0.5)
    return _as_u32(value)


def parse_ttml_time(t: str, fps: float) -> float:
    """Parse ``HH:MM:SS:FF`` or ``HH:MM:SS.mmm`` into seconds; unknown forms give 0."""
    parts = t.split(":")
    if len(parts) == 4:
        h, m, s, f = (_to_float(p) for p in parts)
        return h * 3600.0 + m * 60.0 + s + f / fps
    if len(parts) == 3:
        h = _to_float(parts[0])
        m = _to_float(parts[1])
        sec, dot, frac = parts[2].partition(".")
        if dot:
            divisor = 10.0 ** len(frac)
            return h * 3600.0 + m * 60.0 + _to_float(sec) + _to_float(frac) / divisor
        return h * 3600.0 + m * 60.0 + _to_float(parts[2])
    return 0.0


def format_ttml_time(seconds: float, fps: float) -> str:
    """Format seconds as an ``HH:MM:SS:FF`` TTML time code."""
    h = _as_u32(seconds / 3600.0)
    rem = seconds - h * 3600.0
    m = _as_u32(rem / 60.0)
    rem -= m * 60.0
    s = _as_u32(rem)
    frames = _round_u32((rem - s) * fps)
    return f"{h:02}:{m:02}:{s:02}:{frames:02}"


def format_srt_time(seconds: float) -> str:
    """Format seconds as an ``HH:MM:SS,mmm`` SRT time code."""
    total = max(seconds, 0.0)
    h = _as_u32(total / 3600.0)
    rem = total - h * 3600.0
    m = _as_u32(rem / 60.0)
    rem -= m * 60.0
    s = _as_u32(rem)
    ms = _round_u32((rem - s) * 1000.0)
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def parse_srt_time(t: str) -> float:
    """Parse an ``HH:MM:SS,mmm`` SRT time code into seconds; malformed codes give 0."""
    hms, comma, ms = t.partition(",")
    if not comma:
        ms = "0"
    parts = hms.split(":")
    if len(parts) != 3:
        return 0.0
    h, m, s = (_to_float(p) for p in parts)
    return h * 3600.0 + m * 60.0 + s + _to_float(ms) / 1000.0


def _iter_ttml_time_attrs(content: str) -> Iterator[tuple[int, str, str, int]]:
    """Yield (attribute start, name, value, index after closing quote) for time attributes."""
    pos = 0
    while True:
        found = [
            (index, pattern)
            for pattern in _TTML_TIME_PATTERNS
            if (index := content.find(pattern, pos)) >= 0
        ]
        if not found:
            return
        attr_pos, pattern = min(found)
        val_start = attr_pos + len(pattern)
        val_end = content.find('"', val_start)
        if val_end < 0:
            return
        value = content[val_start:val_end]
        if len(value) >= 8 and value[2] == ":":
            yield attr_pos, pattern[:-2], value, val_end + 1
        pos = val_end + 1


def _retime_ttml(
    content: str, src_fps: float, tgt_fps: float, ratio: float, stretch: bool
) -> tuple[str, int]:
    pieces: list[str] = []
    entries = 0
    last = 0
    for attr_pos, name, value, after in _iter_ttml_time_attrs(content):
        pieces.append(content[last:attr_pos])
        t = parse_ttml_time(value, src_fps)
        new_t = t / ratio if stretch else t
        pieces.append(f'{name}="{format_ttml_time(new_t, tgt_fps)}"')
        last = after
        entries += 1
    pieces.append(content[last:])
    return "".join(pieces), entries


def _is_srt_tc(s: str) -> bool:
    return len(s) == _SRT_TC_LEN and s[2] == ":" and s[5] == ":" and s[8] == ","


def _iter_srt_timecodes(content: str) -> Iterator[tuple[int, str, str, int]]:
    """Yield (line start, start code, end code, index after end code) for SRT cues."""
    base = 0
    while True:
        pos = content.find(_SRT_ARROW, base)
        if pos < 0:
            return
        after_arrow = pos + len(_SRT_ARROW)
        if pos - base < _SRT_TC_LEN:
            base = after_arrow
            continue
        start_tc = content[pos - _SRT_TC_LEN : pos]
        if not _is_srt_tc(start_tc):
            base = after_arrow
            continue
        end_tc = content[after_arrow : after_arrow + _SRT_TC_LEN]
        if not _is_srt_tc(end_tc):
            return
        yield pos - _SRT_TC_LEN, start_tc, end_tc, after_arrow + _SRT_TC_LEN
        base = after_arrow + _SRT_TC_LEN


def _retime_srt(content: str, ratio: float, stretch: bool) -> tuple[str, int]:
    pieces: list[str] = []
    entries = 0
    last = 0
    for start_pos, start_tc, end_tc, after in _iter_srt_timecodes(content):
        pieces.append(content[last:start_pos])
        start = parse_srt_time(start_tc)
        end = parse_srt_time(end_tc)
        if stretch:
            start /= ratio
            end /= ratio
        pieces.append(f"{format_srt_time(start)}{_SRT_ARROW}{format_srt_time(end)}")
        last = after
        entries += 2
    pieces.append(content[last:])
    return "".join(pieces), entries


def _fps(num: int, den: int) -> float:
    if den == 0:
        raise RetimeError("Invalid framerate")
    return num / den


def retime_subtitles(opts: RetimeOptions) -> RetimeResult:
    """Re-time a subtitle file from the source frame rate to the target one."""
    input_file = Path(opts.input_file)
    output_file = Path(opts.output_file)
    if not input_file.exists():
        raise RetimeError(f"Input file not found: {input_file}")

    src_fps = _fps(opts.source_fps_num, opts.source_fps_den)
    tgt_fps = _fps(opts.target_fps_num, opts.target_fps_den)
    if src_fps <= 0.0 or tgt_fps <= 0.0:
        raise RetimeError("Invalid framerate")
    ratio = tgt_fps / src_fps

    try:
        content = input_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RetimeError(f"IO error: {exc}") from exc

    if "<tt" in content:
        output, entries = _retime_ttml(content, src_fps, tgt_fps, ratio, opts.stretch)
    else:
        output, entries = _retime_srt(content, ratio, opts.stretch)

    try:
        output_file.write_text(output, encoding="utf-8")
    except OSError as exc:
        raise RetimeError(f"IO error: {exc}") from exc

    return RetimeResult(output_file=output_file, entries_processed=entries // 2)