import pytest

from postkit.profiles import EncodingProfile, Platform, all_profiles, profile_for


def test_all_profiles_count():
    assert len(all_profiles()) == 9


def test_profile_lookup():
    p = profile_for(Platform.NETFLIX)
    assert p.width == 3840
    assert p.colour_space == "Rec.2020"


def test_theatrical_2k_dci_compliant():
    p = profile_for(Platform.THEATRICAL_DCI_2K)
    assert p.width == 2048
    assert p.height == 1080
    assert p.bit_depth == 12
    assert p.bitrate_mbps == 250.0
    assert p.colour_space == "XYZ"


@pytest.mark.parametrize("platform", list(Platform))
def test_profile_for_matches_platform(platform):
    assert profile_for(platform).platform is platform


def test_all_profiles_cover_every_platform_once():
    platforms = [p.platform for p in all_profiles()]
    assert platforms == list(Platform)


def test_archival_is_lossless_lrcp():
    p = profile_for(Platform.ARCHIVAL_PRESERVATION)
    assert p.bitrate_mbps == 0.0
    assert p.progression == "LRCP"
    assert p.audio_sample_rate == 96000


def test_broadcast_profile():
    p = profile_for(Platform.BROADCAST)
    assert (p.width, p.height) == (1920, 1080)
    assert p.frame_rate == "25"
    assert p.audio_channels == "stereo"
    assert p.subtitle_format == "SRT"


def test_profiles_are_immutable():
    p = profile_for(Platform.APPLE)
    with pytest.raises(AttributeError):
        p.width = 1  # type: ignore[misc]
    assert profile_for(Platform.APPLE).width == 3840
    assert isinstance(p, EncodingProfile) and p.colour_space == "P3-D65"