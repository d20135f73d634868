"""Generates FCPXML subtitle projects from transcription segments."""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .exceptions import FileSystemError
from .models import FCPXMLTemplate, ProjectSettings, Segment, SubtitleStyle
from .style_merge import build_text_style, default_text_style, format_attributes
from .utils import escape_xml

logger = logging.getLogger(__name__)

FCPXML_VERSION = "1.11"
FORMAT_ID = "r1"
EFFECT_ID = "r2"
SEQUENCE_TAIL_SECONDS = 2.0

BASIC_TITLE_NAME = "Basic Title"
BASIC_TITLE_UID = ".../Titles.localized/Bumper:Opener.localized/Basic Title.localized/Basic Title.moti"
POSITION_PARAM_KEY = "9999/999166631/999166633/1/100/101"

_TITLE_INDENT = " " * 28
_CHILD_INDENT = " " * 32
_TEXT_INDENT = " " * 36


@dataclass(frozen=True)
class DefaultTitle:
    """Titles use FCP's built-in Basic Title and a fixed Position param."""

    @property
    def effect_name(self) -> str:
        return BASIC_TITLE_NAME

    @property
    def effect_uid(self) -> str:
        return BASIC_TITLE_UID


@dataclass(frozen=True)
class TemplateTitle:
    """Titles reuse the effect, params and text style of an extracted template."""
    template: FCPXMLTemplate

    @property
    def effect_name(self) -> str:
        return self.template.effect_name

    @property
    def effect_uid(self) -> str:
        return self.template.effect_uid


TitleSource = Union[DefaultTitle, TemplateTitle]


def title_source_for(template: Optional[FCPXMLTemplate]) -> TitleSource:
    return DefaultTitle() if template is None else TemplateTitle(template)


class FCPXMLGenerator:
    """Turns timed segments into a complete FCPXML document, one title per segment."""

    def generate(
        self,
        segments: Sequence[Segment],
        style: SubtitleStyle,
        settings: ProjectSettings,
        template: Optional[FCPXMLTemplate] = None,
        project_name: str = "Subtitles",
    ) -> str:
        """
        Generates the FCPXML document text.

        The sequence runs two seconds past the end of the last segment. Each
        title sits in the spine at its segment's start with start="0s".

        Args:
            segments: Chronologically ordered segments; may be empty.
            style: Look applied to every title.
            settings: Resolution and frame rate of the project.
            template: Optional template extracted from an FCP export.
            project_name: Name of the event and project inside FCP.

        Returns:
            The full document, XML declaration and DOCTYPE included.
        """
        source = title_source_for(template)
        last_end = segments[-1].end_time if segments else 0.0
        sequence_duration = settings.time_to_fcpxml(last_end + SEQUENCE_TAIL_SECONDS)
        logger.debug(f"Generating FCPXML for {len(segments)} segments "
                     f"({settings.width}x{settings.height} @ {settings.frame_rate.display_name}, "
                     f"effect '{source.effect_name}').")

        parts: List[str] = [self._header(settings, source, sequence_duration, project_name)]
        for index, segment in enumerate(segments, start=1):
            parts.append(self._title(segment, index, style, settings, source))
        parts.append(self._footer())
        return "".join(parts)

    def save(self, content: str, output_path: str) -> None:
        """
        Writes generated FCPXML to disk as UTF-8, replacing the target atomically.

        Raises:
            FileSystemError: If the file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(output_path))
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=directory, suffix='.tmp', delete=False
            ) as f:
                temp_path = f.name
                f.write(content)
            os.replace(temp_path, output_path)
            logger.info(f"FCPXML saved to: {output_path}")
        except OSError as e:
            logger.error(f"Failed to write FCPXML to {output_path}: {e}", exc_info=True)
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise FileSystemError(f"Could not write FCPXML file {output_path}: {e}") from e

    def _header(self, settings: ProjectSettings, source: TitleSource, duration: str, project_name: str) -> str:
        name = escape_xml(project_name)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<!DOCTYPE fcpxml>\n'
            '\n'
            f'<fcpxml version="{FCPXML_VERSION}">\n'
            '    <resources>\n'
            f'        <format id="{FORMAT_ID}" name="{settings.format_name}" '
            f'frameDuration="{settings.frame_rate.frame_duration}" '
            f'width="{settings.width}" height="{settings.height}"/>\n'
            f'        <effect id="{EFFECT_ID}" name="{escape_xml(source.effect_name)}" '
            f'uid="{escape_xml(source.effect_uid)}"/>\n'
            '    </resources>\n'
            '    <library>\n'
            f'        <event name="{name}">\n'
            f'            <project name="{name}">\n'
            f'                <sequence format="{FORMAT_ID}" duration="{duration}" tcStart="0s" tcFormat="NDF">\n'
            '                    <spine>\n'
        )

    def _footer(self) -> str:
        return (
            '                    </spine>\n'
            '                </sequence>\n'
            '            </project>\n'
            '        </event>\n'
            '    </library>\n'
            '</fcpxml>\n'
        )

    def _title(self, segment: Segment, index: int, style: SubtitleStyle,
               settings: ProjectSettings, source: TitleSource) -> str:
        offset = settings.time_to_fcpxml(max(segment.start_time, 0.0))
        duration = settings.time_to_fcpxml(max(segment.duration, 0.0))
        style_id = f"ts{index}"
        text = escape_xml(segment.text)

        if isinstance(source, TemplateTitle):
            params = [f'<param {param.raw_attributes}/>' for param in source.template.params]
            attributes = build_text_style(style, source.template.text_style)
        elif isinstance(source, DefaultTitle):
            params = [f'<param name="Position" key="{POSITION_PARAM_KEY}" '
                      f'value="0 {int(style.vertical_position)}"/>']
            attributes = default_text_style(style)
        else:
            raise TypeError(f"Unknown title source: {source!r}")

        lines = [f'{_TITLE_INDENT}<title ref="{EFFECT_ID}" offset="{offset}" name="{text}" '
                 f'start="0s" duration="{duration}">']
        lines.extend(f'{_CHILD_INDENT}{param}' for param in params)
        lines.append(f'{_CHILD_INDENT}<text>')
        lines.append(f'{_TEXT_INDENT}<text-style ref="{style_id}">{text}</text-style>')
        lines.append(f'{_CHILD_INDENT}</text>')
        lines.append(f'{_CHILD_INDENT}<text-style-def id="{style_id}">')
        lines.append(f'{_TEXT_INDENT}<text-style {format_attributes(attributes)}/>')
        lines.append(f'{_CHILD_INDENT}</text-style-def>')
        lines.append(f'{_TITLE_INDENT}</title>')
        return "\n".join(lines) + "\n"
