#!/usr/bin/env python3
"""
FCPXSub Batch Processing Entry Point

Processes every video and audio file in a directory, ordered by size,
writing one FCPXML subtitle project per file into an FCPXML subfolder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

from tqdm import tqdm

from fcpxsub.config_loader import ConfigLoader, project_settings_from_config, subtitle_style_from_config
from fcpxsub.log_setup import setup_logging
from fcpxsub.audio_extractor import AudioExtractor
from fcpxsub.transcriber import WhisperTranscriber
from fcpxsub.template_parser import FCPXMLTemplateParser
from fcpxsub.pipeline import SubtitlePipeline
from fcpxsub.exceptions import FCPXSubError, ConfigurationError, FileSystemError
from fcpxsub.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = ('.mp4', '.mov', '.mkv', '.m4v', '.mp3', '.wav', '.m4a', '.flac')
OUTPUT_SUBDIR = "FCPXML"


def find_and_sort_media(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all supported media files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for media files.

    Returns:
        A list of (filepath, filesize) tuples sorted by filesize, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    media = []
    logger.info(f"Scanning directory for media files: {input_dir}")
    for filename in os.listdir(input_dir):
        if filename.lower().endswith(MEDIA_EXTENSIONS):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    media.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    media.sort(key=lambda item: item[1])
    logger.info(f"Found {len(media)} media files. Sorted by size (smallest first).")
    return media


def run_batch_processing() -> None:
    """Parses arguments, sets up, and runs the batch FCPXML generation."""
    parser = argparse.ArgumentParser(
        description="FCPXSub Batch: Generate FCPXML subtitle projects for all media files in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("-i", "--input-dir", required=True, help="Directory containing the input media files.")
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to the configuration YAML file.")
    parser.add_argument("-t", "--template", default=None, help="FCPXML exported from FCP whose first title is reused.")
    parser.add_argument("--temp-dir", default=None, help="Override the temporary directory specified in the config file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    parser.add_argument("--device", default=None, choices=["cuda", "cpu"], help="Override the processing device.")

    args = parser.parse_args()

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='fcpxsub_batch_init.log')

    try:
        config = ConfigLoader().load_config(args.config)
        settings = project_settings_from_config(config)
        style = subtitle_style_from_config(config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)

    setup_logging(
        log_level=log_level,
        log_dir=config.get('log_dir', 'logs'),
        log_file=config.get('log_file', 'fcpxsub_batch.log')
    )
    logger.info("Logging re-configured with settings from config file for batch processing.")

    if args.temp_dir:
        logger.info(f"Overriding temp_dir from config with CLI argument: {args.temp_dir}")
        config['temp_dir'] = args.temp_dir
    if args.device:
        logger.info(f"Overriding device from config with CLI argument: {args.device}")
        config['device'] = args.device

    template = None
    if args.template:
        try:
            template = FCPXMLTemplateParser().parse(args.template)
        except FCPXSubError as e:
            logger.critical(f"Could not load template: {e}")
            sys.exit(1)

    try:
        media_paths = [item[0] for item in find_and_sort_media(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not media_paths:
        logger.warning(f"No media files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    output_dir = os.path.join(args.input_dir, OUTPUT_SUBDIR)
    try:
        ensure_dir_exists(output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        sys.exit(1)

    # Components are initialized once so the Whisper model is loaded a single time.
    try:
        logger.info("Initializing FCPXSub components for batch processing...")
        device = config.get('device', 'cuda')
        pipeline = SubtitlePipeline(
            config=config,
            audio_extractor=AudioExtractor(ffmpeg_path=config.get('ffmpeg_path')),
            transcriber=WhisperTranscriber(
                model_name=config.get('whisper_model', 'small'),
                device=device,
                fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
                language=config.get('language'),
                download_root=config.get('model_dir')
            )
        )
        logger.info("Components initialized successfully.")
    except (FCPXSubError, ValueError) as e:
        logger.critical(f"Failed to initialize FCPXSub components: {e}", exc_info=True)
        sys.exit(1)

    total_files = len(media_paths)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()
    logger.info(f"--- Starting Batch FCPXML Generation for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for media_path in media_paths:
            media_filename = os.path.basename(media_path)
            pbar.set_description(f"Processing: {media_filename[:30]}...")
            try:
                result = pipeline.run(media_path, style, settings, template=template, output_path=output_dir)
                logger.info(f"Wrote {len(result.segments)} titles for {media_filename} to {result.output_path}")
                files_processed += 1
            except (FCPXSubError, FileNotFoundError) as e:
                logger.error(f"FCPXSub failed for '{media_filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                sys.exit(1)
            finally:
                pbar.update(1)

    logger.info("--- Batch FCPXML Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")
    sys.exit(1 if files_failed > 0 else 0)


if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("FCPXSub requires Python 3.8 or later.\n")
        sys.exit(1)

    run_batch_processing()
