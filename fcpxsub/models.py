"""Data models for FCPXSub."""

import re
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .timecode import to_rational
from .utils import format_timestamp

_HEX_DIGITS = re.compile(r'[0-9A-Fa-f]+')
_TRUE_WORDS = ('true', 'yes', 'on')
_FALSE_WORDS = ('false', 'no', 'off')


@dataclass
class Segment:
    """Represents a single timed chunk of text."""
    start_time: float
    end_time: float
    text: str

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def formatted_start(self) -> str:
        return format_timestamp(self.start_time)

    @property
    def formatted_end(self) -> str:
        return format_timestamp(self.end_time)


@dataclass
class TranscriptionResult:
    """Holds the structured output from the ASR process."""
    language: Optional[str]
    segments: List[Segment] = field(default_factory=list)
    original_audio_path: Optional[str] = None


class FrameRate(Enum):
    """Frame rates Final Cut Pro accepts, keyed by their display value."""
    FPS_23_976 = "23.976"
    FPS_24 = "24"
    FPS_25 = "25"
    FPS_29_97 = "29.97"
    FPS_30 = "30"
    FPS_50 = "50"
    FPS_59_94 = "59.94"
    FPS_60 = "60"

    @classmethod
    def from_value(cls, value: Union["FrameRate", str, float, int]) -> "FrameRate":
        """
        Resolves a frame rate from its display value ("29.97", 25, "FPS_60").

        Raises:
            ValueError: If the value does not name one of the supported rates.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        if text in cls.__members__:
            return cls[text]
        try:
            number = float(text)
        except ValueError:
            raise ValueError(f"Unsupported frame rate: {value!r}") from None
        for rate in cls:
            if abs(float(rate.value) - number) < 1e-6:
                return rate
        raise ValueError(f"Unsupported frame rate: {value!r}")

    @property
    def timebase_numerator(self) -> int:
        return _TIMEBASES[self][0]

    @property
    def timebase_denominator(self) -> int:
        return _TIMEBASES[self][1]

    @property
    def frame_duration(self) -> str:
        """Duration of one frame as an FCPXML rational time string."""
        return f"{self.timebase_numerator}/{self.timebase_denominator}s"

    @property
    def fps(self) -> float:
        return self.timebase_denominator / self.timebase_numerator

    @property
    def display_name(self) -> str:
        return f"{self.value} fps"


# (numerator, denominator) per rate; never derived from fps.
_TIMEBASES: Dict[FrameRate, Tuple[int, int]] = {
    FrameRate.FPS_23_976: (1001, 24000),
    FrameRate.FPS_24: (100, 2400),
    FrameRate.FPS_25: (100, 2500),
    FrameRate.FPS_29_97: (1001, 30000),
    FrameRate.FPS_30: (100, 3000),
    FrameRate.FPS_50: (100, 5000),
    FrameRate.FPS_59_94: (1001, 60000),
    FrameRate.FPS_60: (100, 6000),
}


class ResolutionPreset(Enum):
    """Common timeline resolutions."""
    HD_720P = "720p"
    HD_1080P = "1080p"
    UHD_4K = "4k"
    DCI_4K = "dci4k"
    SHORTS_1080P = "shorts1080p"
    SHORTS_4K = "shorts4k"
    CUSTOM = "custom"

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return _PRESET_SIZES.get(self)

    @property
    def label(self) -> str:
        if self.size is None:
            return "Custom"
        width, height = self.size
        return f"{self.value} ({width}x{height})"


_PRESET_SIZES = {
    ResolutionPreset.HD_720P: (1280, 720),
    ResolutionPreset.HD_1080P: (1920, 1080),
    ResolutionPreset.UHD_4K: (3840, 2160),
    ResolutionPreset.DCI_4K: (4096, 2160),
    ResolutionPreset.SHORTS_1080P: (1080, 1920),
    ResolutionPreset.SHORTS_4K: (2160, 3840),
}


@dataclass(frozen=True)
class ProjectSettings:
    """Timeline resolution and frame rate of the generated project."""
    width: int = 1920
    height: int = 1080
    frame_rate: FrameRate = FrameRate.FPS_30

    def __post_init__(self):
        for name in ('width', 'height'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Project {name} must be a positive integer, got {value!r}")

    @property
    def format_name(self) -> str:
        """
        FCP's built-in format identifier for this resolution and rate.

        Only 720p and 1080p have named formats; everything else uses the
        rate-undefined marker and relies on the explicit width/height
        attributes of the format element.
        """
        fps = self.frame_rate.value.replace('.', '')
        if (self.width, self.height) == (1280, 720):
            return f"FFVideoFormat720p{fps}"
        if (self.width, self.height) == (1920, 1080):
            return f"FFVideoFormat1080p{fps}"
        return "FFVideoFormatRateUndefined"

    def time_to_fcpxml(self, seconds: float) -> str:
        return to_rational(seconds, self.frame_rate)


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @property
    def fcpxml_value(self) -> str:
        return self.value


def _to_bool(name: str, value: Any) -> bool:
    """Accepts real booleans and the words true/false, yes/no, on/off in any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"'{name}' must be true or false, got {value!r}")


def hex_to_fcpxml_color(hex_color: str) -> str:
    """
    Converts "#RRGGBB" to FCPXML's "R G B A" form with 0-1 components.

    Parsing is lenient: the leading '#' is optional and anything that is not
    a hex digit ends the number, so garbage reads as black. Alpha is always 1.
    """
    match = _HEX_DIGITS.match(hex_color.strip().lstrip('#'))
    rgb = int(match.group(), 16) if match else 0
    r = ((rgb >> 16) & 0xFF) / 255.0
    g = ((rgb >> 8) & 0xFF) / 255.0
    b = (rgb & 0xFF) / 255.0
    return f"{r:.4f} {g:.4f} {b:.4f} 1"


@dataclass(frozen=True)
class SubtitleStyle:
    """User-chosen look of every generated title."""
    font_name: str = "Helvetica Neue"
    font_size: float = 60
    font_color_hex: str = "#FFFFFF"
    bold: bool = False
    italic: bool = False
    alignment: Alignment = Alignment.CENTER
    stroke_color_hex: str = "#000000"
    stroke_width: float = 2
    vertical_position: float = -450  # negative = lower on screen

    @property
    def fcpxml_font_color(self) -> str:
        return hex_to_fcpxml_color(self.font_color_hex)

    @property
    def fcpxml_stroke_color(self) -> str:
        return hex_to_fcpxml_color(self.stroke_color_hex)

    @property
    def font_face(self) -> str:
        if self.bold and self.italic:
            return f"{self.font_name} Bold Italic"
        if self.bold:
            return f"{self.font_name} Bold"
        if self.italic:
            return f"{self.font_name} Italic"
        return self.font_name

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['alignment'] = self.alignment.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubtitleStyle":
        """
        Builds a style from a plain mapping, ignoring unknown keys.

        Raises:
            ValueError: If a value cannot be converted to the field's type.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if 'alignment' in values:
            values['alignment'] = Alignment(str(values['alignment']).lower())
        for name in ('font_size', 'stroke_width', 'vertical_position'):
            if name in values:
                values[name] = float(values[name])
        for name in ('bold', 'italic'):
            if name in values:
                values[name] = _to_bool(name, values[name])
        for name in ('font_name', 'font_color_hex', 'stroke_color_hex'):
            if name in values:
                values[name] = str(values[name])
        return cls(**values)


@dataclass(frozen=True)
class TemplateParam:
    """One <param> of a template title."""
    name: str
    key: str
    value: str
    # Every attribute of the source element, serialized in document order.
    raw_attributes: str


@dataclass(frozen=True)
class TemplateTextStyle:
    """The <text-style> of a template title, with every attribute kept."""
    all_attributes: Mapping[str, str] = field(default_factory=dict)

    @property
    def font(self) -> Optional[str]:
        return self.all_attributes.get('font')

    @property
    def font_size(self) -> Optional[str]:
        return self.all_attributes.get('fontSize')

    @property
    def font_face(self) -> Optional[str]:
        return self.all_attributes.get('fontFace')

    @property
    def font_color(self) -> Optional[str]:
        return self.all_attributes.get('fontColor')

    @property
    def alignment(self) -> Optional[str]:
        return self.all_attributes.get('alignment')

    @property
    def stroke_color(self) -> Optional[str]:
        return self.all_attributes.get('strokeColor')

    @property
    def stroke_width(self) -> Optional[str]:
        return self.all_attributes.get('strokeWidth')

    @property
    def bold(self) -> Optional[str]:
        return self.all_attributes.get('bold')

    @property
    def italic(self) -> Optional[str]:
        return self.all_attributes.get('italic')


@dataclass(frozen=True)
class FCPXMLTemplate:
    """A title configuration lifted from an FCP-exported FCPXML file."""
    name: str
    effect_uid: str
    effect_name: str
    params: Tuple[TemplateParam, ...] = ()
    text_style: Optional[TemplateTextStyle] = None
    # Pretty-printed source <title>; kept for inspection, never re-parsed.
    raw_title_xml: str = ""
    source_file: str = ""

    def summary(self) -> str:
        lines = [
            f"Template: {self.name or '(unnamed)'}",
            f"  Source file: {self.source_file or '(in memory)'}",
            f"  Effect UID: {self.effect_uid or '(none)'}",
            f"  Params ({len(self.params)}):",
        ]
        for param in self.params:
            lines.append(f"    - {param.name or '(unnamed)'} [{param.key}] = {param.value}")
        if self.text_style is None:
            lines.append("  Text style: (none, defaults are used)")
        else:
            lines.append("  Text style:")
            for key in sorted(self.text_style.all_attributes):
                lines.append(f"    {key} = {self.text_style.all_attributes[key]}")
        return "\n".join(lines)
