"""Orchestrates media -> audio -> transcription -> FCPXML."""

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .audio_extractor import AudioExtractor
from .transcriber import Transcriber
from .fcpxml_generator import FCPXMLGenerator
from .models import FCPXMLTemplate, ProjectSettings, Segment, SubtitleStyle
from .exceptions import FCPXSubError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)


class ProcessingState(Enum):
    IDLE = "idle"
    EXTRACTING_AUDIO = "extracting_audio"
    TRANSCRIBING = "transcribing"
    GENERATING = "generating"
    COMPLETED = "completed"


ProgressCallback = Callable[[ProcessingState, float], None]


@dataclass
class PipelineResult:
    segments: List[Segment] = field(default_factory=list)
    fcpxml: str = ""
    output_path: Optional[str] = None
    language: Optional[str] = None


def default_project_name(media_path: Optional[str]) -> str:
    if not media_path:
        return "Video Subtitles"
    return f"{os.path.splitext(os.path.basename(media_path))[0]} Subtitles"


class SubtitlePipeline:
    """
    Manages the end-to-end process of turning a media file into an FCPXML subtitle project.
    """

    def __init__(
        self,
        config: dict,
        audio_extractor: AudioExtractor,
        transcriber: Transcriber,
        generator: Optional[FCPXMLGenerator] = None
    ):
        """
        Initializes the SubtitlePipeline.

        Args:
            config: A dictionary containing configuration settings.
            audio_extractor: An instance of AudioExtractor.
            transcriber: An instance of Transcriber.
            generator: FCPXMLGenerator to use; a new one is created if omitted.

        Raises:
            FCPXSubError: If 'temp_dir' is missing or not writable.
        """
        self.config = config
        self.audio_extractor = audio_extractor
        self.transcriber = transcriber
        self.generator = generator or FCPXMLGenerator()

        self.temp_dir = config.get('temp_dir')
        if not self.temp_dir:
            raise FCPXSubError("Configuration missing 'temp_dir'.")
        try:
            ensure_dir_exists(self.temp_dir)
            test_file = os.path.join(self.temp_dir, f".fcpxsub_write_test_{int(time.time())}")
            with open(test_file, "w") as f:
                f.write("test")
            os.remove(test_file)
        except (FileSystemError, OSError, ValueError) as e:
            raise FCPXSubError(f"Temporary directory '{self.temp_dir}' is invalid or not writable: {e}") from e

    def _resolve_output_path(self, media_path: str, output_path: Optional[str]) -> Optional[str]:
        """A directory (existing, or given with a trailing separator) receives '{stem}.fcpxml'."""
        if not output_path:
            return None
        if os.path.isdir(output_path) or output_path.endswith(os.sep):
            ensure_dir_exists(output_path)
            base_name = os.path.splitext(os.path.basename(media_path))[0]
            return os.path.join(output_path, f"{base_name}.fcpxml")
        parent = os.path.dirname(os.path.abspath(output_path))
        ensure_dir_exists(parent)
        return output_path

    def _cleanup_temp_files(self, *file_paths: Optional[str]) -> None:
        for file_path in file_paths:
            if file_path and os.path.exists(file_path):
                try:
                    os.remove(file_path)
                    logger.info(f"Cleaned up temporary file: {file_path}")
                except OSError as e:
                    logger.warning(f"Could not remove temporary file {file_path}: {e}", exc_info=False)

    def run(
        self,
        media_path: str,
        style: SubtitleStyle,
        settings: ProjectSettings,
        template: Optional[FCPXMLTemplate] = None,
        output_path: Optional[str] = None,
        project_name: Optional[str] = None,
        progress: Optional[ProgressCallback] = None
    ) -> PipelineResult:
        """
        Executes the full pipeline for a single media file.

        Args:
            media_path: Path to the input video or audio file.
            style: Subtitle style applied to every title.
            settings: Project resolution and frame rate.
            template: Optional title template extracted from an FCP export.
            output_path: File or directory to save the FCPXML to; nothing is saved if None.
            project_name: Event/project name inside FCP. Defaults to "{media name} Subtitles".
            progress: Optional callback receiving (stage, fraction of the stage done).

        Returns:
            A PipelineResult with the segments, the document and where it was saved.

        Raises:
            FCPXSubError: For any configuration or processing errors in the pipeline.
            FileNotFoundError: If the input media is not found.
        """
        notify = progress or (lambda stage, fraction: None)
        start_time = time.time()
        logger.info(f"--- Starting FCPXSub process for: {media_path} ---")
        resolved_output = self._resolve_output_path(media_path, output_path)
        base_name = os.path.splitext(os.path.basename(media_path))[0]
        temp_audio_name = f"{base_name}_{int(time.time())}.wav"
        extracted_audio_path = None

        try:
            logger.info("Step 1: Extracting Audio...")
            notify(ProcessingState.EXTRACTING_AUDIO, 0.0)
            extracted_audio_path = self.audio_extractor.extract_audio(media_path, self.temp_dir, temp_audio_name)
            notify(ProcessingState.EXTRACTING_AUDIO, 1.0)

            logger.info("Step 2: Transcribing Audio...")
            notify(ProcessingState.TRANSCRIBING, 0.0)
            transcription = self.transcriber.transcribe(extracted_audio_path)
            segments = list(transcription.segments)
            if not segments:
                logger.warning("Transcription produced no segments. The project will have an empty timeline.")
            else:
                logger.info(f"Transcription complete. Found {len(segments)} segments.")
            notify(ProcessingState.TRANSCRIBING, 1.0)

            logger.info("Step 3: Generating FCPXML...")
            notify(ProcessingState.GENERATING, 0.0)
            fcpxml = self.generator.generate(
                segments,
                style,
                settings,
                template=template,
                project_name=project_name or default_project_name(media_path)
            )
            if resolved_output:
                self.generator.save(fcpxml, resolved_output)
            notify(ProcessingState.GENERATING, 1.0)

            notify(ProcessingState.COMPLETED, 1.0)
            logger.info(f"--- FCPXSub process completed successfully in {time.time() - start_time:.2f} seconds ---")
            return PipelineResult(
                segments=segments,
                fcpxml=fcpxml,
                output_path=resolved_output,
                language=transcription.language
            )

        except (FCPXSubError, FileNotFoundError) as e:
            logger.error(f"FCPXSub process failed: {e}", exc_info=False)
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during processing: {e}", exc_info=True)
            raise FCPXSubError(f"An unexpected critical error occurred: {e}") from e
        finally:
            logger.info("Step 4: Cleaning up temporary files...")
            self._cleanup_temp_files(extracted_audio_path)

    def regenerate(
        self,
        segments: Sequence[Segment],
        style: SubtitleStyle,
        settings: ProjectSettings,
        template: Optional[FCPXMLTemplate] = None,
        project_name: Optional[str] = None
    ) -> str:
        """
        Re-runs generation only, after segment text or style was edited.

        Returns:
            The new document, or "" when there are no segments to regenerate.
        """
        if not segments:
            logger.info("No segments to regenerate FCPXML from.")
            return ""
        return self.generator.generate(
            segments,
            style,
            settings,
            template=template,
            project_name=project_name or default_project_name(None)
        )
