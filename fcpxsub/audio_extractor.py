"""Handles audio extraction from video and audio files using ffmpeg."""

import ffmpeg
import os
import logging
from .exceptions import AudioExtractionError, FileSystemError
from typing import Optional
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

# Whisper expects 16 kHz mono 16-bit PCM.
SAMPLE_RATE = 16000
CHANNELS = 1
AUDIO_CODEC = 'pcm_s16le'

class AudioExtractor:
    """Extracts a normalized audio track from any media file ffmpeg can read."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """
        Initializes the AudioExtractor.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def extract_audio(self, media_filepath: str, output_audio_dir: str, output_filename: Optional[str] = None) -> str:
        """
        Extracts the audio stream of a video or audio file to a 16 kHz mono WAV file.

        Args:
            media_filepath: Path to the input media file (mp4, mov, mkv, mp3, wav, m4a, flac...).
            output_audio_dir: Directory to save the extracted audio file.
            output_filename: Optional base name for the output audio file.
                             If None, uses the media filename.

        Returns:
            The full path to the extracted audio file (WAV format).

        Raises:
            FileNotFoundError: If the input media file does not exist.
            AudioExtractionError: If ffmpeg fails to extract the audio.
            FileSystemError: If the output directory cannot be created/accessed.
        """
        logger.info(f"Starting audio extraction for: {media_filepath}")
        if not os.path.exists(media_filepath):
            raise FileNotFoundError(f"Input media file not found: {media_filepath}")

        ensure_dir_exists(output_audio_dir)

        if output_filename is None:
            base_name = os.path.splitext(os.path.basename(media_filepath))[0]
        else:
            base_name = os.path.splitext(output_filename)[0]

        output_audio_path = os.path.join(output_audio_dir, f"{base_name}.wav")
        logger.debug(f"Output audio path set to: {output_audio_path}")

        if os.path.exists(output_audio_path):
            logger.warning(f"Output audio file already exists, overwriting: {output_audio_path}")
            try:
                os.remove(output_audio_path)
            except OSError as e:
                raise FileSystemError(f"Could not remove existing audio file {output_audio_path}: {e}") from e

        try:
            logger.info(f"Running ffmpeg to extract audio to {output_audio_path}...")
            (
                ffmpeg
                .input(media_filepath)
                .output(output_audio_path, vn=None, acodec=AUDIO_CODEC, ar=SAMPLE_RATE, ac=CHANNELS)
                .overwrite_output()
                .run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
            )
            logger.info(f"Successfully extracted audio to: {output_audio_path}")
            return output_audio_path
        except ffmpeg.Error as e:
            logger.error(f"ffmpeg error during audio extraction for {media_filepath}", exc_info=True)
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg stderr: {stderr_output}")
            self._remove_partial(output_audio_path)
            raise AudioExtractionError(f"ffmpeg failed: {stderr_output}") from e
        except OSError as e:
            # Raised by subprocess when the ffmpeg executable itself is missing.
            logger.error(f"Could not run ffmpeg ({self.ffmpeg_cmd}): {e}", exc_info=True)
            self._remove_partial(output_audio_path)
            raise AudioExtractionError(f"Could not run ffmpeg '{self.ffmpeg_cmd}'. Is it installed? ({e})") from e

    def _remove_partial(self, output_audio_path: str) -> None:
        if os.path.exists(output_audio_path):
            try:
                os.remove(output_audio_path)
            except OSError:
                logger.warning(f"Could not clean up partially created audio file: {output_audio_path}")
