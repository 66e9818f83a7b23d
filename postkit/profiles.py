"""Encoding profiles for delivery platforms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Platform(Enum):
    """Delivery platform target."""

    THEATRICAL_DCI_2K = "TheatricalDci2k"
    THEATRICAL_DCI_4K = "TheatricalDci4k"
    NETFLIX = "Netflix"
    AMAZON_PRIME = "AmazonPrime"
    DISNEY = "Disney"
    APPLE = "Apple"
    HBO = "Hbo"
    ARCHIVAL_PRESERVATION = "ArchivalPreservation"
    BROADCAST = "Broadcast"


@dataclass(frozen=True)
class EncodingProfile:
    """Encoding settings for one delivery platform."""

    platform: Platform
    name: str
    description: str
    width: int
    height: int
    # Frame rate as text, e.g. "24", "23.976", "25".
    frame_rate: str
    # Target bitrate in Mbps; 0 means lossless.
    bitrate_mbps: float
    colour_space: str
    bit_depth: int
    # JPEG 2000 progression order.
    progression: str
    audio_sample_rate: int
    audio_bit_depth: int
    # Audio layout, e.g. "5.1", "7.1.4", "stereo".
    audio_channels: str
    # Subtitle format, e.g. "IMSC1", "PNG", "SRT".
    subtitle_format: str


_PROFILES: dict[Platform, EncodingProfile] = {
    profile.platform: profile
    for profile in (
        EncodingProfile(
            platform=Platform.THEATRICAL_DCI_2K,
            name="DCI 2K Theatrical",
            description="DCI-compliant 2K digital cinema package",
            width=2048,
            height=1080,
            frame_rate="24",
            bitrate_mbps=250.0,
            colour_space="XYZ",
            bit_depth=12,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="5.1",
            subtitle_format="PNG",
        ),
        EncodingProfile(
            platform=Platform.THEATRICAL_DCI_4K,
            name="DCI 4K Theatrical",
            description="DCI-compliant 4K digital cinema package",
            width=4096,
            height=2160,
            frame_rate="24",
            bitrate_mbps=500.0,
            colour_space="XYZ",
            bit_depth=12,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="7.1",
            subtitle_format="PNG",
        ),
        EncodingProfile(
            platform=Platform.NETFLIX,
            name="Netflix IMF",
            description="Netflix IMF delivery specification",
            width=3840,
            height=2160,
            frame_rate="23.976",
            bitrate_mbps=400.0,
            colour_space="Rec.2020",
            bit_depth=16,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="5.1",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.AMAZON_PRIME,
            name="Amazon Prime IMF",
            description="Amazon Prime Video IMF delivery specification",
            width=3840,
            height=2160,
            frame_rate="23.976",
            bitrate_mbps=350.0,
            colour_space="Rec.2020",
            bit_depth=16,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="5.1",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.DISNEY,
            name="Disney+ IMF",
            description="Disney+ IMF delivery specification",
            width=3840,
            height=2160,
            frame_rate="23.976",
            bitrate_mbps=400.0,
            colour_space="Rec.2020",
            bit_depth=16,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="7.1.4",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.APPLE,
            name="Apple TV+ IMF",
            description="Apple TV+ IMF delivery specification",
            width=3840,
            height=2160,
            frame_rate="23.976",
            bitrate_mbps=400.0,
            colour_space="P3-D65",
            bit_depth=16,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="7.1.4",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.HBO,
            name="HBO Max IMF",
            description="HBO Max IMF delivery specification",
            width=3840,
            height=2160,
            frame_rate="23.976",
            bitrate_mbps=350.0,
            colour_space="Rec.2020",
            bit_depth=16,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="5.1",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.ARCHIVAL_PRESERVATION,
            name="Archival / Preservation",
            description="Lossless archival preservation profile",
            width=4096,
            height=2160,
            frame_rate="24",
            bitrate_mbps=0.0,
            colour_space="XYZ",
            bit_depth=16,
            progression="LRCP",
            audio_sample_rate=96000,
            audio_bit_depth=24,
            audio_channels="7.1",
            subtitle_format="IMSC1",
        ),
        EncodingProfile(
            platform=Platform.BROADCAST,
            name="Broadcast",
            description="Standard broadcast delivery profile",
            width=1920,
            height=1080,
            frame_rate="25",
            bitrate_mbps=200.0,
            colour_space="Rec.709",
            bit_depth=10,
            progression="CPRL",
            audio_sample_rate=48000,
            audio_bit_depth=24,
            audio_channels="stereo",
            subtitle_format="SRT",
        ),
    )
}


def all_profiles() -> list[EncodingProfile]:
    """Return every available encoding profile, in platform order."""
    return [_PROFILES[platform] for platform in Platform]


def profile_for(platform: Platform) -> EncodingProfile:
    """Return the encoding profile for one platform."""
    return _PROFILES[platform]