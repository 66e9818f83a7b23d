import subprocess
from pathlib import Path
from unittest import mock

import pytest

from postkit.watermark import (
    WatermarkBackend,
    WatermarkError,
    WatermarkOptions,
    detect_watermark,
    embed_watermark,
)


def _completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def frames_dir(tmp_path):
    d = tmp_path / "frames"
    d.mkdir()
    for i in range(3):
        (d / f"f{i}.tif").write_bytes(b"x")
    (d / "notes.txt").write_text("skip")
    return d


def _embed(opts, completed=None):
    with mock.patch("subprocess.run", return_value=completed or _completed()) as run:
        result = embed_watermark(opts)
    return result, run


def test_internal_embed(frames_dir, tmp_path):
    out = tmp_path / "out"
    opts = WatermarkOptions(
        operator_id="op1", session_id="sess1", input_dir=frames_dir, output_dir=out
    )
    result, run = _embed(opts)
    assert result.frames_processed == 3
    assert len(result.payload_hash) == 64
    assert all(c in "0123456789abcdef" for c in result.payload_hash)
    assert out.is_dir()

    cmd = run.call_args.args[0]
    assert cmd[:4] == ["ffmpeg", "-y", "-pattern_type", "glob"]
    assert cmd[cmd.index("-i") + 1] == str(frames_dir / "*.tif")
    assert cmd[-1] == str(out / "%06d.tif")
    vf = cmd[cmd.index("-vf") + 1]
    assert f"text='{result.payload_hash[:8]}:sess1'" in vf
    assert "white @ 0.08".replace(" ", "") in vf


def test_payload_hash_is_over_concatenated_ids(frames_dir, tmp_path):
    a, _ = _embed(WatermarkOptions(operator_id="ab", session_id="c",
                                   input_dir=frames_dir, output_dir=tmp_path / "a"))
    b, _ = _embed(WatermarkOptions(operator_id="a", session_id="bc",
                                   input_dir=frames_dir, output_dir=tmp_path / "b"))
    c, _ = _embed(WatermarkOptions(operator_id="a", session_id="bd",
                                   input_dir=frames_dir, output_dir=tmp_path / "c"))
    assert a.payload_hash == b.payload_hash
    assert a.payload_hash != c.payload_hash


def test_internal_strength(frames_dir, tmp_path):
    opts = WatermarkOptions(strength=1.0, input_dir=frames_dir, output_dir=tmp_path / "o")
    _, run = _embed(opts)
    cmd = run.call_args.args[0]
    assert "white @ 0.99".replace(" ", "") in cmd[cmd.index("-vf") + 1]


def test_internal_no_frames(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    opts = WatermarkOptions(input_dir=empty, output_dir=tmp_path / "out")
    with pytest.raises(WatermarkError, match="No image frames found"):
        embed_watermark(opts)


def test_internal_ffmpeg_failure(frames_dir, tmp_path):
    opts = WatermarkOptions(input_dir=frames_dir, output_dir=tmp_path / "out")
    with mock.patch("subprocess.run", return_value=_completed(1, stderr=b"broken")):
        with pytest.raises(WatermarkError, match="broken"):
            embed_watermark(opts)


def test_internal_ffmpeg_missing(frames_dir, tmp_path):
    opts = WatermarkOptions(input_dir=frames_dir, output_dir=tmp_path / "out")
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
        with pytest.raises(WatermarkError, match="Failed to run ffmpeg"):
            embed_watermark(opts)


def test_external_embed_command():
    opts = WatermarkOptions(
        backend=WatermarkBackend.NEXGUARD,
        operator_id="op",
        session_id="s",
        strength=0.5,
        input_dir=Path("/in"),
        output_dir=Path("/out"),
        license_file=Path("/lic"),
    )
    result, run = _embed(opts)
    cmd = run.call_args.args[0]
    assert cmd[0] == "nexguard_embedder"
    assert cmd[cmd.index("--input") + 1] == "/in"
    assert cmd[cmd.index("--operator") + 1] == "op"
    assert cmd[cmd.index("--strength") + 1] == "0.5"
    assert cmd[cmd.index("--license") + 1] == "/lic"
    assert result.frames_processed == 0
    assert result.payload_hash == ""


def test_external_embed_failure():
    opts = WatermarkOptions(backend=WatermarkBackend.CIVOLUTION)
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("civ")):
        with pytest.raises(WatermarkError, match="Failed to run civ_embedder"):
            embed_watermark(opts)


def test_detect_internal():
    result = detect_watermark(Path("/in"), WatermarkBackend.INTERNAL)
    assert result.payload_hash == "internal detection requires reference frames"


def test_detect_external_with_license():
    with mock.patch("subprocess.run", return_value=_completed(stdout=b"  payload42 \n")) as run:
        result = detect_watermark(Path("/in"), WatermarkBackend.NEXGUARD, Path("/lic"))
    cmd = run.call_args.args[0]
    assert cmd == ["nexguard_detector", "--input", "/in", "--license", "/lic"]
    assert result.payload_hash == "payload42"


def test_detect_external_without_license():
    with mock.patch("subprocess.run", return_value=_completed(stdout=b"mark7\n")) as run:
        result = detect_watermark(Path("/in"), WatermarkBackend.CIVOLUTION)
    assert run.call_args.args[0] == ["civ_detector", "--input", "/in"]
    assert result.payload_hash == "mark7"


def test_detect_external_failure():
    with mock.patch("subprocess.run", return_value=_completed(2, stderr=b"no mark")):
        with pytest.raises(WatermarkError, match="no mark"):
            detect_watermark(Path("/in"), WatermarkBackend.NEXGUARD)