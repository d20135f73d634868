"""Builds the attributes of a title's <text-style> from a user style and an optional template."""

from typing import Dict, Mapping, Optional

from .models import SubtitleStyle, TemplateTextStyle
from .utils import escape_xml


def default_text_style(style: SubtitleStyle) -> Dict[str, str]:
    """
    Text-style attributes for a title built from the user style alone.

    Every field is always present; a zero stroke width is written as-is.
    The mapping keeps FCP's usual attribute order.
    """
    return {
        'font': style.font_name,
        'fontSize': str(int(style.font_size)),
        'fontFace': style.font_face,
        'fontColor': style.fcpxml_font_color,
        'alignment': style.alignment.fcpxml_value,
        'strokeColor': style.fcpxml_stroke_color,
        'strokeWidth': str(int(style.stroke_width)),
    }


def merge_text_style(base: Mapping[str, str], style: SubtitleStyle) -> Dict[str, str]:
    """
    Overlays the user style on a template's text-style attributes.

    Font, size, face, color and alignment always come from the user style.
    Stroke is only overridden when the user asks for one (width > 0); with a
    zero width the template's own stroke attributes are left in place.
    Attributes the user style does not cover are carried over untouched.

    Returns:
        A new mapping ordered by key.
    """
    attributes = dict(base)
    attributes['font'] = style.font_name
    attributes['fontSize'] = str(int(style.font_size))
    attributes['fontColor'] = style.fcpxml_font_color
    attributes['alignment'] = style.alignment.fcpxml_value
    attributes['fontFace'] = style.font_face
    if style.stroke_width > 0:
        attributes['strokeColor'] = style.fcpxml_stroke_color
        attributes['strokeWidth'] = str(int(style.stroke_width))
    return {key: attributes[key] for key in sorted(attributes)}


def build_text_style(style: SubtitleStyle, template_style: Optional[TemplateTextStyle] = None) -> Dict[str, str]:
    """Merged attributes when a template style is present, the user style alone otherwise."""
    if template_style is None:
        return default_text_style(style)
    return merge_text_style(template_style.all_attributes, style)


def format_attributes(attributes: Mapping[str, str]) -> str:
    """Serializes attributes as escaped key="value" pairs in mapping order."""
    return " ".join(f'{key}="{escape_xml(value)}"' for key, value in attributes.items())
