from fcpxsub.models import Alignment, SubtitleStyle, TemplateTextStyle
from fcpxsub.style_merge import build_text_style, default_text_style, format_attributes, merge_text_style

TEMPLATE_ATTRIBUTES = {
    "font": "Futura",
    "fontSize": "40",
    "fontFace": "Medium",
    "fontColor": "1 0.9 0.2 1",
    "strokeColor": "0.2 0.2 0.2 1",
    "strokeWidth": "3",
    "alignment": "left",
    "lineSpacing": "-5",
}


def test_user_style_wins_on_overlapping_keys():
    style = SubtitleStyle(font_name="Avenir Next", font_size=72, font_color_hex="#FF0000",
                          bold=True, alignment=Alignment.RIGHT)
    merged = merge_text_style(TEMPLATE_ATTRIBUTES, style)

    assert merged["font"] == "Avenir Next"
    assert merged["fontSize"] == "72"
    assert merged["fontFace"] == "Avenir Next Bold"
    assert merged["fontColor"] == "1.0000 0.0000 0.0000 1"
    assert merged["alignment"] == "right"


def test_template_only_attributes_are_kept():
    merged = merge_text_style(TEMPLATE_ATTRIBUTES, SubtitleStyle())

    assert merged["lineSpacing"] == "-5"


def test_zero_stroke_width_keeps_template_stroke():
    merged = merge_text_style(TEMPLATE_ATTRIBUTES, SubtitleStyle(stroke_width=0, stroke_color_hex="#FFFFFF"))

    assert merged["strokeColor"] == "0.2 0.2 0.2 1"
    assert merged["strokeWidth"] == "3"


def test_zero_stroke_width_without_template_stroke_adds_none():
    base = {key: value for key, value in TEMPLATE_ATTRIBUTES.items() if not key.startswith("stroke")}
    merged = merge_text_style(base, SubtitleStyle(stroke_width=0))

    assert "strokeColor" not in merged
    assert "strokeWidth" not in merged


def test_positive_stroke_width_overrides_template_stroke():
    merged = merge_text_style(TEMPLATE_ATTRIBUTES, SubtitleStyle(stroke_width=5.7, stroke_color_hex="#0000FF"))

    assert merged["strokeColor"] == "0.0000 0.0000 1.0000 1"
    assert merged["strokeWidth"] == "5"


def test_merged_attributes_are_sorted_by_key():
    merged = merge_text_style(TEMPLATE_ATTRIBUTES, SubtitleStyle())

    assert list(merged) == sorted(merged)


def test_merge_does_not_mutate_template_attributes():
    base = dict(TEMPLATE_ATTRIBUTES)
    merge_text_style(base, SubtitleStyle(font_size=90))

    assert base == TEMPLATE_ATTRIBUTES


def test_default_text_style_always_has_every_field():
    attributes = default_text_style(SubtitleStyle(stroke_width=0, italic=True))

    assert list(attributes) == ["font", "fontSize", "fontFace", "fontColor", "alignment", "strokeColor", "strokeWidth"]
    assert attributes["fontSize"] == "60"
    assert attributes["fontFace"] == "Helvetica Neue Italic"
    assert attributes["strokeWidth"] == "0"
    assert attributes["strokeColor"] == "0.0000 0.0000 0.0000 1"


def test_build_text_style_picks_branch():
    style = SubtitleStyle(font_size=72)

    assert build_text_style(style) == default_text_style(style)
    assert build_text_style(style, TemplateTextStyle(TEMPLATE_ATTRIBUTES)) == merge_text_style(TEMPLATE_ATTRIBUTES, style)


def test_format_attributes_escapes_values():
    assert format_attributes({"font": "Tom & Jerry's", "fontSize": "40"}) == \
        'font="Tom &amp; Jerry&apos;s" fontSize="40"'
