from pathlib import Path
from unittest.mock import patch

import ffmpeg
import pytest

from fcpxsub.audio_extractor import AudioExtractor
from fcpxsub.exceptions import AudioExtractionError


def test_missing_input_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        AudioExtractor().extract_audio(str(tmp_path / "missing.mp4"), str(tmp_path / "out"))


def test_extracts_mono_16k_wav(tmp_path: Path):
    media = tmp_path / "clip.mkv"
    media.touch()
    out_dir = tmp_path / "audio"

    with patch("fcpxsub.audio_extractor.ffmpeg") as mock_ffmpeg:
        stream = mock_ffmpeg.input.return_value
        path = AudioExtractor(ffmpeg_path="/opt/bin/ffmpeg").extract_audio(str(media), str(out_dir), "job_1.wav")

    assert path == str(out_dir / "job_1.wav")
    assert out_dir.is_dir()
    mock_ffmpeg.input.assert_called_once_with(str(media))
    stream.output.assert_called_once_with(path, vn=None, acodec="pcm_s16le", ar=16000, ac=1)
    run = stream.output.return_value.overwrite_output.return_value.run
    assert run.call_args.kwargs["cmd"] == "/opt/bin/ffmpeg"


def test_ffmpeg_failure_raises_with_stderr(tmp_path: Path):
    media = tmp_path / "clip.mp4"
    media.touch()

    with patch("fcpxsub.audio_extractor.ffmpeg") as mock_ffmpeg:
        mock_ffmpeg.Error = ffmpeg.Error
        run = mock_ffmpeg.input.return_value.output.return_value.overwrite_output.return_value.run
        run.side_effect = ffmpeg.Error("ffmpeg", b"", b"Invalid data found when processing input")

        with pytest.raises(AudioExtractionError) as excinfo:
            AudioExtractor().extract_audio(str(media), str(tmp_path / "audio"))

    assert "Invalid data found" in str(excinfo.value)
    assert not (tmp_path / "audio" / "clip.wav").exists()


def test_missing_ffmpeg_binary_raises(tmp_path: Path):
    media = tmp_path / "clip.mp4"
    media.touch()

    with patch("fcpxsub.audio_extractor.ffmpeg") as mock_ffmpeg:
        mock_ffmpeg.Error = ffmpeg.Error
        run = mock_ffmpeg.input.return_value.output.return_value.overwrite_output.return_value.run
        run.side_effect = FileNotFoundError("ffmpeg")

        with pytest.raises(AudioExtractionError):
            AudioExtractor(ffmpeg_path="/nowhere/ffmpeg").extract_audio(str(media), str(tmp_path / "audio"))
