import pytest

from fcpxsub.models import (
    Alignment,
    FrameRate,
    ProjectSettings,
    ResolutionPreset,
    Segment,
    SubtitleStyle,
    hex_to_fcpxml_color,
)


def test_frame_rate_timebases():
    assert FrameRate.FPS_23_976.frame_duration == "1001/24000s"
    assert FrameRate.FPS_24.frame_duration == "100/2400s"
    assert FrameRate.FPS_29_97.frame_duration == "1001/30000s"
    assert FrameRate.FPS_60.frame_duration == "100/6000s"
    assert FrameRate.FPS_25.fps == 25.0
    assert FrameRate.FPS_59_94.fps == pytest.approx(59.94, abs=0.001)
    assert FrameRate.FPS_30.display_name == "30 fps"


def test_frame_rate_from_value():
    assert FrameRate.from_value("29.97") is FrameRate.FPS_29_97
    assert FrameRate.from_value(25) is FrameRate.FPS_25
    assert FrameRate.from_value(23.976) is FrameRate.FPS_23_976
    assert FrameRate.from_value("FPS_60") is FrameRate.FPS_60
    assert FrameRate.from_value(FrameRate.FPS_50) is FrameRate.FPS_50
    for bad in ["31", "fast", 29.98]:
        with pytest.raises(ValueError):
            FrameRate.from_value(bad)


def test_format_name_lookup():
    assert ProjectSettings(1920, 1080, FrameRate.FPS_29_97).format_name == "FFVideoFormat1080p2997"
    assert ProjectSettings(1280, 720, FrameRate.FPS_24).format_name == "FFVideoFormat720p24"
    assert ProjectSettings(1920, 1080, FrameRate.FPS_23_976).format_name == "FFVideoFormat1080p23976"
    assert ProjectSettings(3840, 2160, FrameRate.FPS_30).format_name == "FFVideoFormatRateUndefined"
    assert ProjectSettings(1080, 1920, FrameRate.FPS_30).format_name == "FFVideoFormatRateUndefined"


def test_project_settings_requires_positive_dimensions():
    with pytest.raises(ValueError):
        ProjectSettings(width=0)
    with pytest.raises(ValueError):
        ProjectSettings(height=-1080)


def test_project_settings_time_to_fcpxml():
    assert ProjectSettings().time_to_fcpxml(1.5) == "4500/3000s"


def test_resolution_presets():
    assert ResolutionPreset.SHORTS_1080P.size == (1080, 1920)
    assert ResolutionPreset.DCI_4K.size == (4096, 2160)
    assert ResolutionPreset.CUSTOM.size is None
    assert ResolutionPreset.HD_720P.label == "720p (1280x720)"


def test_hex_to_fcpxml_color():
    assert hex_to_fcpxml_color("#FFFFFF") == "1.0000 1.0000 1.0000 1"
    assert hex_to_fcpxml_color("#FF0000") == "1.0000 0.0000 0.0000 1"
    assert hex_to_fcpxml_color("00ff80") == "0.0000 1.0000 0.5020 1"
    assert hex_to_fcpxml_color("not a color") == "0.0000 0.0000 0.0000 1"


def test_font_face_naming():
    assert SubtitleStyle(font_name="Avenir").font_face == "Avenir"
    assert SubtitleStyle(font_name="Avenir", bold=True).font_face == "Avenir Bold"
    assert SubtitleStyle(font_name="Avenir", italic=True).font_face == "Avenir Italic"
    assert SubtitleStyle(font_name="Avenir", bold=True, italic=True).font_face == "Avenir Bold Italic"


def test_style_dict_round_trip():
    style = SubtitleStyle(font_name="Futura", font_size=72, bold=True, alignment=Alignment.LEFT, stroke_width=0)
    data = style.to_dict()
    assert data["alignment"] == "left"
    assert SubtitleStyle.from_dict(data) == style


def test_style_from_dict_ignores_unknown_keys_and_keeps_defaults():
    style = SubtitleStyle.from_dict({"font_size": "48", "alignment": "RIGHT", "shadow": True})
    assert style.font_size == 48.0
    assert style.alignment is Alignment.RIGHT
    assert style.font_name == "Helvetica Neue"
    with pytest.raises(ValueError):
        SubtitleStyle.from_dict({"alignment": "justified"})


def test_style_from_dict_reads_booleans_strictly():
    assert SubtitleStyle.from_dict({"bold": "false", "italic": "True"}) == SubtitleStyle(bold=False, italic=True)
    assert SubtitleStyle.from_dict({"bold": True, "italic": " no "}) == SubtitleStyle(bold=True)
    for bad in ["maybe", 1, None]:
        with pytest.raises(ValueError):
            SubtitleStyle.from_dict({"bold": bad})


def test_segment_helpers():
    segment = Segment(start_time=3661.5, end_time=3663.25, text="Hi")
    assert segment.duration == pytest.approx(1.75)
    assert segment.formatted_start == "01:01:01.500"
    assert segment.formatted_end == "01:01:03.250"
