"""Import OTIOZ bundles and OTIO timelines and extract their clips."""

from __future__ import annotations

import io
import math
import struct
from dataclasses import dataclass, field
from pathlib import Path

_ZIP_LOCAL_SIGNATURE = b"PK\x03\x04"
_CLIP_MARKER = '"OTIO_SCHEMA": "Clip.'
_CLIP_BLOCK_LENGTH = 2000
_NUMBER_CHARS = frozenset("0123456789.")
_U32_MAX = 2**32 - 1

_CPL_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<CompositionPlaylist xmlns="http://www.smpte-ra.org/schemas/429-7/2006/CPL">
  <Id>urn:uuid:00000000-0000-0000-0000-000000000000</Id>
  <ContentTitleText>{title}</ContentTitleText>
  <EditRate>{fps} 1</EditRate>
  <!-- Source file: {source} -->
  <!-- {count} clips imported -->
</CompositionPlaylist>
"""


class OtiozError(Exception):
    """Raised when an OTIOZ or OTIO file cannot be imported."""


@dataclass
class OtiozClip:
    """A clip found in an OTIO timeline."""

    name: str
    media_reference: str
    start_time: float
    duration: float
    track_kind: str


@dataclass
class OtiozImportOptions:
    """What to import and where to put the results."""

    input_file: Path
    output_dir: Path | None = None
    extract_media: bool = False
    generate_cpl: bool = False
    title: str = ""
    fps: float = 24.0


@dataclass
class OtiozImportResult:
    """Clips and per-kind counts from an import, plus any files written."""

    clips: list[OtiozClip] = field(default_factory=list)
    video_tracks: int = 0
    audio_tracks: int = 0
    subtitle_tracks: int = 0
    extracted_dir: Path | None = None
    generated_cpl: Path | None = None


@dataclass(frozen=True)
class _ZipEntry:
    filename: str
    compressed_size: int
    data_offset: int


def _read_exact(stream: io.BufferedIOBase, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise OtiozError("IO error: unexpected end of file")
    return data


def _list_zip_entries(path: Path) -> list[_ZipEntry]:
    entries: list[_ZipEntry] = []
    with path.open("rb") as stream:
        while stream.read(4) == _ZIP_LOCAL_SIGNATURE:
            # version, flags, method, time, date, crc32
            stream.seek(14, io.SEEK_CUR)
            comp_size, _uncomp_size, name_len, extra_len = struct.unpack(
                "<IIHH", _read_exact(stream, 12)
            )
            filename = _read_exact(stream, name_len).decode("utf-8", errors="replace")
            stream.seek(extra_len, io.SEEK_CUR)
            data_offset = stream.tell()
            stream.seek(comp_size, io.SEEK_CUR)
            entries.append(_ZipEntry(filename, comp_size, data_offset))
    return entries


def _read_entry(path: Path, entry: _ZipEntry) -> bytes:
    with path.open("rb") as stream:
        stream.seek(entry.data_offset)
        return _read_exact(stream, entry.compressed_size)


def _extract_json_string(block: str, key: str) -> str | None:
    pattern = f'"{key}": "'
    start = block.find(pattern)
    if start < 0:
        return None
    start += len(pattern)
    end = block.find('"', start)
    if end < 0:
        return None
    return block[start:end]


def _extract_json_number(block: str, key: str) -> float | None:
    pattern = f'"{key}": '
    start = block.find(pattern)
    if start < 0:
        return None
    start += len(pattern)
    end = start
    while end < len(block) and block[end] in _NUMBER_CHARS:
        end += 1
    try:
        return float(block[start:end])
    except ValueError:
        return None


def parse_otio_json(json_text: str) -> list[OtiozClip]:
    """Scan OTIO JSON text for clips, attributing each to the nearest preceding track kind."""
    clips: list[OtiozClip] = []
    pos = 0
    while (abs_pos := json_text.find(_CLIP_MARKER, pos)) >= 0:
        block = json_text[abs_pos : abs_pos + _CLIP_BLOCK_LENGTH]
        preceding = json_text[:abs_pos]
        video_pos = preceding.rfind('"kind": "Video"')
        audio_pos = preceding.rfind('"kind": "Audio"')
        track_kind = "Video" if video_pos >= 0 and video_pos > audio_pos else "Audio"

        clips.append(
            OtiozClip(
                name=_extract_json_string(block, "name") or "",
                media_reference=_extract_json_string(block, "target_url") or "",
                start_time=0.0,
                duration=_extract_json_number(block, "value") or 0.0,
                track_kind=track_kind,
            )
        )
        pos = abs_pos + 10
    return clips


def _fps_as_integer(fps: float) -> int:
    if math.isnan(fps) or fps <= 0:
        return 0
    if math.isinf(fps):
        return _U32_MAX
    return min(int(fps), _U32_MAX)


def _read_bundle(opts: OtiozImportOptions) -> str:
    entries = _list_zip_entries(opts.input_file)
    content_entry = next((e for e in entries if e.filename == "content.otio"), None)
    if content_entry is None:
        raise OtiozError("No content.otio found in bundle")
    content = _read_entry(opts.input_file, content_entry)

    if opts.extract_media and opts.output_dir:
        (opts.output_dir / "media").mkdir(parents=True, exist_ok=True)
        for entry in entries:
            if entry.filename.startswith("media/") and entry.compressed_size > 0:
                out_path = opts.output_dir / entry.filename
                out_path.parent.mkdir(parents=True, exist_ok=True)
                out_path.write_bytes(_read_entry(opts.input_file, entry))

    return content.decode("utf-8", errors="replace")


def _import(opts: OtiozImportOptions) -> OtiozImportResult:
    input_file = Path(opts.input_file)
    if not input_file.exists():
        raise OtiozError(f"File not found: {input_file}")

    ext = input_file.suffix[1:].lower()
    if ext not in ("otioz", "otio"):
        raise OtiozError("Expected .otioz or .otio file")

    if ext == "otio":
        otio_content = input_file.read_text(encoding="utf-8")
    else:
        otio_content = _read_bundle(opts)

    clips = parse_otio_json(otio_content)
    result = OtiozImportResult(clips=clips)
    for clip in clips:
        if clip.track_kind == "Video":
            result.video_tracks += 1
        elif clip.track_kind == "Audio":
            result.audio_tracks += 1
        else:
            result.subtitle_tracks += 1

    if opts.extract_media and opts.output_dir:
        result.extracted_dir = opts.output_dir / "media"

    if opts.generate_cpl and opts.output_dir:
        cpl_path = opts.output_dir / "CPL_from_otio.xml"
        cpl_content = _CPL_TEMPLATE.format(
            title=opts.title or "OTIOZ Import",
            fps=_fps_as_integer(opts.fps),
            source=input_file.name,
            count=len(clips),
        )
        cpl_path.write_text(cpl_content, encoding="utf-8")
        result.generated_cpl = cpl_path

    return result


def import_otioz(opts: OtiozImportOptions) -> OtiozImportResult:
    """Import an OTIOZ or OTIO file and extract its timeline clips."""
    if opts.output_dir is not None:
        opts.output_dir = Path(opts.output_dir)
    opts.input_file = Path(opts.input_file)
    try:
        return _import(opts)
    except (OSError, UnicodeDecodeError) as exc:
        raise OtiozError(f"IO error: {exc}") from exc