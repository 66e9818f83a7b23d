import zipfile
from pathlib import Path

import pytest

from postkit.otioz_import import (
    OtiozClip,
    OtiozError,
    OtiozImportOptions,
    import_otioz,
    parse_otio_json,
)

VIDEO_JSON = """{
    "OTIO_SCHEMA": "Timeline.1",
    "tracks": {
        "children": [{
            "kind": "Video",
            "children": [{
                "OTIO_SCHEMA": "Clip.1",
                "name": "shot_01",
                "source_range": {
                    "duration": {
                        "OTIO_SCHEMA": "RationalTime.1",
                        "value": 48.0
                    }
                },
                "media_reference": {
                    "target_url": "media/shot_01.mxf"
                }
            }]
        }]
    }
}"""

AUDIO_JSON = """{
    "OTIO_SCHEMA": "Timeline.1",
    "tracks": {
        "children": [{
            "kind": "Audio",
            "children": [{
                "OTIO_SCHEMA": "Clip.2",
                "name": "audio_mix",
                "source_range": {
                    "duration": {
                        "OTIO_SCHEMA": "RationalTime.1",
                        "value": 120.0
                    }
                },
                "media_reference": {
                    "target_url": "media/audio.wav"
                }
            }]
        }]
    }
}"""

MULTI_JSON = """{
    "OTIO_SCHEMA": "Timeline.1",
    "tracks": { "children": [{
        "kind": "Video",
        "children": [
            { "OTIO_SCHEMA": "Clip.1", "name": "clip_a", "source_range": { "duration": { "OTIO_SCHEMA": "RationalTime.1", "value": 24.0 } }, "media_reference": { "target_url": "a.mxf" } },
            { "OTIO_SCHEMA": "Clip.1", "name": "clip_b", "source_range": { "duration": { "OTIO_SCHEMA": "RationalTime.1", "value": 48.0 } }, "media_reference": { "target_url": "b.mxf" } }
        ]
    }]}
}"""


def _single_clip_timeline(name, value, url):
    return (
        '{ "OTIO_SCHEMA": "Timeline.1", "tracks": { "children": [{ "kind": "Video", '
        '"children": [ { "OTIO_SCHEMA": "Clip.1", "name": "%s", "source_range": '
        '{ "duration": { "OTIO_SCHEMA": "RationalTime.1", "value": %s } }, '
        '"media_reference": { "target_url": "%s" } } ] }]} }' % (name, value, url)
    )


def test_parse_video_clip():
    clips = parse_otio_json(VIDEO_JSON)
    assert clips == [
        OtiozClip(
            name="shot_01",
            media_reference="media/shot_01.mxf",
            start_time=0.0,
            duration=48.0,
            track_kind="Video",
        )
    ]


def test_parse_audio_clip():
    clips = parse_otio_json(AUDIO_JSON)
    assert len(clips) == 1
    assert clips[0].track_kind == "Audio"
    assert clips[0].name == "audio_mix"
    assert clips[0].duration == 120.0


def test_parse_multiple_clips():
    clips = parse_otio_json(MULTI_JSON)
    assert [c.name for c in clips] == ["clip_a", "clip_b"]
    assert [c.duration for c in clips] == [24.0, 48.0]


def test_parse_no_clips():
    assert parse_otio_json('{"OTIO_SCHEMA": "Timeline.1"}') == []


def test_parse_kind_follows_nearest_track():
    text = (
        '{"kind": "Video", "children": [{"OTIO_SCHEMA": "Clip.1", "name": "v"}]},'
        '{"kind": "Audio", "children": [{"OTIO_SCHEMA": "Clip.1", "name": "a"}]}'
    )
    clips = parse_otio_json(text)
    assert [(c.name, c.track_kind) for c in clips] == [("v", "Video"), ("a", "Audio")]


def test_parse_missing_fields_default():
    clips = parse_otio_json('{"OTIO_SCHEMA": "Clip.1"}')
    assert clips[0].name == ""
    assert clips[0].media_reference == ""
    assert clips[0].duration == 0.0
    assert clips[0].track_kind == "Audio"


def test_import_plain_otio(tmp_path):
    input_file = tmp_path / "timeline.otio"
    input_file.write_text(_single_clip_timeline("shot1", "100.0", "shot1.mxf"))
    result = import_otioz(OtiozImportOptions(input_file=input_file, output_dir=tmp_path))
    assert len(result.clips) == 1
    assert result.video_tracks == 1
    assert result.audio_tracks == 0
    assert result.generated_cpl is None
    assert result.extracted_dir is None


def test_import_generates_cpl(tmp_path):
    input_file = tmp_path / "test.otio"
    input_file.write_text(_single_clip_timeline("s1", "50.0", "s1.mxf"))
    result = import_otioz(
        OtiozImportOptions(
            input_file=input_file,
            output_dir=tmp_path,
            generate_cpl=True,
            title="My Timeline",
            fps=24.0,
        )
    )
    assert result.generated_cpl == tmp_path / "CPL_from_otio.xml"
    cpl = result.generated_cpl.read_text()
    assert "My Timeline" in cpl
    assert "24 1" in cpl
    assert "Source file: test.otio" in cpl
    assert "1 clips imported" in cpl


def test_import_cpl_default_title(tmp_path):
    input_file = tmp_path / "t.otio"
    input_file.write_text(_single_clip_timeline("s1", "5.0", "s1.mxf"))
    result = import_otioz(
        OtiozImportOptions(
            input_file=input_file, output_dir=tmp_path, generate_cpl=True, fps=25.9
        )
    )
    cpl = result.generated_cpl.read_text()
    assert "<ContentTitleText>OTIOZ Import</ContentTitleText>" in cpl
    assert "<EditRate>25 1</EditRate>" in cpl


def test_invalid_extension(tmp_path):
    input_file = tmp_path / "test.txt"
    input_file.write_text("dummy")
    with pytest.raises(OtiozError, match="Expected .otioz or .otio file"):
        import_otioz(OtiozImportOptions(input_file=input_file, output_dir=tmp_path))


def test_missing_file():
    with pytest.raises(OtiozError, match="File not found"):
        import_otioz(OtiozImportOptions(input_file=Path("/nonexistent.otioz")))


def test_zip_parsing_invalid_file(tmp_path):
    input_file = tmp_path / "bad.otioz"
    input_file.write_text("not a zip file")
    with pytest.raises(OtiozError, match="No content.otio"):
        import_otioz(OtiozImportOptions(input_file=input_file, output_dir=tmp_path))


def test_import_bundle_with_media(tmp_path):
    bundle = tmp_path / "bundle.otioz"
    with zipfile.ZipFile(bundle, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("content.otio", MULTI_JSON)
        zf.writestr("media/a.mxf", b"AAAA")
        zf.writestr("media/sub/b.mxf", b"BB")
    out = tmp_path / "out"
    result = import_otioz(
        OtiozImportOptions(input_file=bundle, output_dir=out, extract_media=True)
    )
    assert [c.name for c in result.clips] == ["clip_a", "clip_b"]
    assert result.video_tracks == 2
    assert result.extracted_dir == out / "media"
    assert (out / "media" / "a.mxf").read_bytes() == b"AAAA"
    assert (out / "media" / "sub" / "b.mxf").read_bytes() == b"BB"


def test_import_bundle_without_content(tmp_path):
    bundle = tmp_path / "bundle.otioz"
    with zipfile.ZipFile(bundle, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("other.txt", "x")
    with pytest.raises(OtiozError, match="No content.otio"):
        import_otioz(OtiozImportOptions(input_file=bundle))