"""Forensic watermark embedding and detection."""

from __future__ import annotations

import hashlib
import math
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

_FRAME_EXTENSIONS = frozenset({"tif", "tiff", "dpx", "exr", "png", "jpg"})
_DEFAULT_STRENGTH = 8
_INTERNAL_DETECTION_NOTE = "internal detection requires reference frames"


class WatermarkError(Exception):
    """Raised when a watermark cannot be embedded or detected."""


class WatermarkBackend(Enum):
    """Forensic watermark backend."""

    NEXGUARD = "NexGuard"
    CIVOLUTION = "Civolution"
    INTERNAL = "Internal"


_EMBEDDERS = {
    WatermarkBackend.NEXGUARD: "nexguard_embedder",
    WatermarkBackend.CIVOLUTION: "civ_embedder",
}
_DETECTORS = {
    WatermarkBackend.NEXGUARD: "nexguard_detector",
    WatermarkBackend.CIVOLUTION: "civ_detector",
}


@dataclass
class WatermarkOptions:
    """Options for embedding a watermark into a frame sequence."""

    backend: WatermarkBackend = WatermarkBackend.INTERNAL
    operator_id: str = ""
    session_id: str = ""
    strength: float = 0.0
    input_dir: Path = field(default_factory=Path)
    output_dir: Path = field(default_factory=Path)
    license_file: Path = field(default_factory=Path)


@dataclass
class WatermarkResult:
    """Outcome of an embed or detect run."""

    frames_processed: int = 0
    payload_hash: str = ""


def _format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


def _strength_byte(strength: float) -> int:
    if not strength > 0.0:
        return _DEFAULT_STRENGTH
    scaled = strength * 255.0
    if scaled >= 255:
        return 255
    return int(scaled)


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    try:
        completed = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as exc:
        raise WatermarkError(f"Failed to run {cmd[0]}: {exc}") from exc
    if completed.returncode != 0:
        raise WatermarkError(completed.stderr.decode("utf-8", errors="replace"))
    return completed


def _frames(input_dir: Path) -> list[Path]:
    try:
        entries = sorted(Path(input_dir).iterdir())
    except OSError:
        return []
    return [p for p in entries if p.is_file() and p.suffix[1:] in _FRAME_EXTENSIONS]


def _embed_internal(opts: WatermarkOptions) -> WatermarkResult:
    output_dir = Path(opts.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WatermarkError(f"Failed to create output directory: {exc}") from exc

    digest = hashlib.sha256()
    digest.update(opts.operator_id.encode("utf-8"))
    digest.update(opts.session_id.encode("utf-8"))
    payload_hash = digest.hexdigest()

    frames = _frames(opts.input_dir)
    if not frames:
        raise WatermarkError("No image frames found in input directory")

    strength = _strength_byte(opts.strength)
    ext = frames[0].suffix[1:] or "tif"
    input_pattern = Path(opts.input_dir) / f"*.{ext}"
    output_pattern = output_dir / f"%06d.{ext}"

    text = f"{payload_hash[:8]}:{opts.session_id}".replace("'", "\\'")
    vf = (
        f"drawtext=text='{text}':fontsize=10:"
        f"fontcolor=white@0.{min(strength, 99):02}:x=10:y=h-20"
    )
    _run([
        "ffmpeg", "-y", "-pattern_type", "glob",
        "-i", str(input_pattern),
        "-vf", vf,
        str(output_pattern),
    ])
    return WatermarkResult(frames_processed=len(frames), payload_hash=payload_hash)


def _embed_external(tool: str, opts: WatermarkOptions) -> WatermarkResult:
    _run([
        tool,
        "--input", str(opts.input_dir),
        "--output", str(opts.output_dir),
        "--operator", opts.operator_id,
        "--session", opts.session_id,
        "--strength", _format_number(float(opts.strength)),
        "--license", str(opts.license_file),
    ])
    return WatermarkResult()


def embed_watermark(opts: WatermarkOptions) -> WatermarkResult:
    """Embed a watermark into a frame sequence with the chosen backend.

    The internal backend overlays faint text derived from a SHA-256 of the
    operator and session ids; other backends run their vendor tools.
    """
    if opts.backend is WatermarkBackend.INTERNAL:
        return _embed_internal(opts)
    return _embed_external(_EMBEDDERS[opts.backend], opts)


def detect_watermark(
    input_path: Path, backend: WatermarkBackend, license_file: Path | None = None
) -> WatermarkResult:
    """Detect a watermark; the payload found is returned in ``payload_hash``."""
    if backend is WatermarkBackend.INTERNAL:
        return WatermarkResult(payload_hash=_INTERNAL_DETECTION_NOTE)
    cmd = [_DETECTORS[backend], "--input", str(input_path)]
    if license_file is not None:
        cmd += ["--license", str(license_file)]
    completed = _run(cmd)
    stdout = completed.stdout.decode("utf-8", errors="replace")
    return WatermarkResult(payload_hash=stdout.strip())