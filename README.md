# postkit

A library of building blocks for digital cinema (DCP) and IMF post-production
tools. Import the parts you need.

## Installation

```
pip install .
```

Several functions start external programs and need them on `PATH`:
`ffmpeg`, `ffprobe` and `ffplay` (probing, preview, trailer packaging,
ProRes detection, internal watermarking), `curl` (webhooks), and the vendor
watermark tools `nexguard_embedder`, `nexguard_detector`, `civ_embedder` and
`civ_detector` for the NexGuard and Civolution backends. Plugin hook scripts
are run with the current Python interpreter.

## What is inside

| Module | Purpose |
|---|---|
| `postkit.otioz_import` | Read `.otio` / `.otioz` timelines, list clips, optionally extract bundled media and write a stub CPL |
| `postkit.preferences` | Versioned JSON preferences with migrations, and the per-app config directory |
| `postkit.subtitle_retime` | Re-time SRT or TTML subtitles between frame rates |
| `postkit.plugin` | Discover plugins (`plugin.json`) and run lifecycle hook scripts |
| `postkit.webhook` | Build job-event JSON payloads and post them to a webhook via `curl`, with retries |
| `postkit.version_tracker` | SQLite-backed delivery history with JSON and CSV export |
| `postkit.probe` | Probe resolution, frame rate, audio presence and frame count with `ffprobe` |
| `postkit.profiles` | Encoding profiles for theatrical, streaming, archival and broadcast delivery |
| `postkit.prores` | Detect ProRes content and profile, and build `ffmpeg` extraction arguments |
| `postkit.shell_completion` | Basic bash, zsh, fish and PowerShell completion scripts |
| `postkit.preview` | Frame extraction, frame info, `ffplay` playback and rendering to image sequences |
| `postkit.trailer` | Assemble a trailer with ratings card and countdown leader |
| `postkit.watermark` | Embed and detect watermarks in frame sequences |
| `postkit.report` | QC reports rendered as text, JSON or HTML |
| `postkit.watch` | Watch a directory tree for created, modified and removed files |

Failures are raised as exceptions: `OtiozError`, `RetimeError`,
`ProResError`, `PreviewError`, `TrailerError` and `WatermarkError` in their
modules. `probe_video` returns `None` when a file cannot be probed, and
`send_webhook` reports the outcome in a `WebhookResult`.

## Examples

Re-time an SRT from 23.976 to 24 fps:

```python
from postkit.subtitle_retime import RetimeOptions, retime_subtitles

result = retime_subtitles(RetimeOptions(
    input_file="in.srt",
    output_file="out.srt",
    source_fps_num=24000,
    source_fps_den=1001,
    target_fps_num=24,
    target_fps_den=1,
    stretch=True,
))
print(result.entries_processed)
```

Migrate a preferences document:

```python
from postkit.preferences import PrefsMigration, json_insert_if_missing, migrate_preferences

migrations = [
    PrefsMigration(2, "Add colour field",
                   lambda j: json_insert_if_missing(j, "colour", '"rec709"')),
]
migrated = migrate_preferences('{"version": 1}', migrations)
```

Record a delivery:

```python
from postkit.version_tracker import DeliveryRecord, VersionTracker

with VersionTracker() as tracker:
    tracker.open("deliveries.db")
    tracker.record(DeliveryRecord(package_uuid="uuid-1", title="Test Film", destination="AMC"))
    print(tracker.deliveries_to("AMC"))
    tracker.export_csv("deliveries.csv")
```

Look up a delivery profile:

```python
from postkit.profiles import Platform, profile_for

print(profile_for(Platform.NETFLIX).colour_space)  # Rec.2020
```

Generate a completion script:

```python
from postkit.shell_completion import generate_completion_hint, parse_shell

print(generate_completion_hint(parse_shell("bash"), "mytool"))
```

## What it does not do

- There is no command-line program; everything is used from Python.
- There is no HTTP or REST server.
- `FileWatcher.add_action` stores actions in `FileWatcher.actions`; the
  watcher itself does not run them.
- The internal watermark backend overlays faint text with `ffmpeg`; its
  detection only returns a note that reference frames are needed.

## Running the tests

```
pip install ".[test]"
pytest
```