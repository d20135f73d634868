"""Speech-to-text for FCPXSub, backed by OpenAI Whisper."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Optional

import torch
import whisper

from .models import Segment, TranscriptionResult
from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

AUTO_LANGUAGE = 'auto'
DEVICES = ('cuda', 'cpu')


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Maps '', None and 'auto' to None, which makes Whisper detect the language."""
    if not language or language.strip().lower() == AUTO_LANGUAGE:
        return None
    return language.strip()


def segments_from_whisper(raw_segments: Iterable[Mapping]) -> List[Segment]:
    """
    Converts Whisper's segment dicts into title-ready Segments.

    Entries missing 'start', 'end' or 'text' are skipped. Text is trimmed;
    blank text is kept so the segment list lines up with Whisper's output.
    """
    segments = []
    for raw in raw_segments:
        if not all(key in raw for key in ('start', 'end', 'text')):
            logger.warning(f"Skipping incomplete Whisper segment: {raw}")
            continue
        segments.append(Segment(
            start_time=float(raw['start']),
            end_time=float(raw['end']),
            text=str(raw['text']).strip()
        ))
    return segments


class Transcriber(ABC):
    """Turns an audio file into timed text segments."""

    @abstractmethod
    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Raises:
            TranscriptionError: If transcription fails.
            FileNotFoundError: If the audio file doesn't exist.
        """


class WhisperTranscriber(Transcriber):
    """Runs a local Whisper model, loaded once and reused for every file."""

    def __init__(
        self,
        model_name: str = "small",
        device: str = "cuda",
        fp16: bool = True,
        language: Optional[str] = None,
        download_root: Optional[str] = None
    ):
        """
        Args:
            model_name: Any model name whisper.load_model accepts ("small", "medium", ...).
            device: "cuda" or "cpu". CUDA falls back to CPU when no GPU is present.
            fp16: Half precision; only honoured on CUDA.
            language: Spoken language code such as "ko" or "en"; None or "auto" detects it.
            download_root: Model cache directory; None keeps Whisper's default.

        Raises:
            ValueError: For a device other than "cuda" or "cpu".
            TranscriptionError: If the model cannot be loaded.
        """
        if device not in DEVICES:
            raise ValueError(f"Invalid device specified: {device}. Choose 'cuda' or 'cpu'.")
        if device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            device = "cpu"

        self.model_name = model_name
        self.device = device
        self.fp16 = fp16 and device == "cuda"
        self.language = normalize_language(language)

        logger.info(f"Loading Whisper model '{model_name}' on {device} "
                    f"(FP16: {self.fp16}, language: {self.language or AUTO_LANGUAGE})")
        try:
            self.model = whisper.load_model(model_name, device=device, download_root=download_root)
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{model_name}': {e}", exc_info=True)
            raise TranscriptionError(f"Failed to load Whisper model '{model_name}': {e}") from e
        logger.info(f"Whisper model '{model_name}' loaded.")

    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """Transcribes a 16 kHz mono WAV into segments plus the detected language."""
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        logger.info(f"Transcribing {audio_path}")
        try:
            result = self.model.transcribe(
                audio_path,
                language=self.language,
                fp16=self.fp16,
                task='transcribe',
                verbose=None
            )
        except Exception as e:
            logger.error(f"Whisper transcription failed for {audio_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Whisper transcription failed for {audio_path}: {e}") from e

        segments = segments_from_whisper(result.get('segments', []))
        language = result.get('language')
        logger.info(f"Transcription done: {len(segments)} segments, language '{language or 'unknown'}'.")
        return TranscriptionResult(language=language, segments=segments, original_audio_path=audio_path)
