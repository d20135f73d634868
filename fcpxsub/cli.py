"""Command-Line Interface handler for FCPXSub."""

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader, project_settings_from_config, subtitle_style_from_config
from .log_setup import setup_logging
from .models import FrameRate, ProjectSettings, ResolutionPreset, SubtitleStyle
from .style_presets import StylePresetStore
from .template_parser import FCPXMLTemplateParser
from .exceptions import FCPXSubError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_FILE = os.path.join(os.path.expanduser("~"), ".fcpxsub", "presets.yaml")
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CLIHandler:
    """Parses arguments and orchestrates the FCPXSub commands."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="fcpxsub",
            description="FCPXSub: Transcribe a video or audio file into a Final Cut Pro subtitle project (FCPXML).",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=LOG_LEVELS,
            help="Set the logging level for console and file output."
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        generate = subparsers.add_parser(
            "generate",
            help="Transcribe a media file and write an FCPXML project.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        generate.add_argument("-i", "--input", required=True, help="Path to the input video or audio file.")
        generate.add_argument(
            "-o", "--output",
            default=None,
            help="Output .fcpxml path or directory. Defaults to '<input name>.fcpxml' next to the input."
        )
        generate.add_argument("-c", "--config", default="config.yaml", help="Path to the configuration YAML file.")
        generate.add_argument("-t", "--template", default=None, help="FCPXML exported from FCP whose first title is reused.")
        generate.add_argument("--preset", default=None, help="Name of a saved style preset to use instead of the config style.")
        generate.add_argument("--project-name", default=None, help="Event/project name inside Final Cut Pro.")
        generate.add_argument(
            "--resolution",
            default=None,
            choices=[preset.value for preset in ResolutionPreset if preset.size],
            help="Timeline resolution preset."
        )
        generate.add_argument("--width", type=int, default=None, help="Timeline width in pixels (overrides --resolution).")
        generate.add_argument("--height", type=int, default=None, help="Timeline height in pixels (overrides --resolution).")
        generate.add_argument("--fps", default=None, choices=[rate.value for rate in FrameRate], help="Timeline frame rate.")
        generate.add_argument("--model", default=None, help="Whisper model name (e.g. small, medium).")
        generate.add_argument("--language", default=None, help="Spoken language code, or 'auto' to detect.")
        generate.add_argument("--device", default=None, choices=["cuda", "cpu"], help="Override the processing device.")
        generate.add_argument("--temp-dir", default=None, help="Override the temporary directory specified in the config file.")
        generate.set_defaults(handler=self._run_generate)

        inspect = subparsers.add_parser("inspect-template", help="Show what would be reused from an FCPXML template.")
        inspect.add_argument("template", help="FCPXML file exported from Final Cut Pro.")
        inspect.set_defaults(handler=self._run_inspect_template)

        presets = subparsers.add_parser(
            "presets",
            help="List, show, save or delete style presets.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        presets.add_argument("action", choices=["list", "show", "save", "delete"])
        presets.add_argument("name", nargs="?", default=None, help="Preset name for 'show', 'save' and 'delete'.")
        presets.add_argument("-c", "--config", default="config.yaml", help="Configuration whose 'style' section 'save' stores.")
        presets.add_argument("--file", default=DEFAULT_PRESETS_FILE, help="Style preset YAML file.")
        presets.set_defaults(handler=self._run_presets)

        return parser

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parses arguments, runs the chosen command and returns the process exit code."""
        args = self.parser.parse_args(argv)
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level, log_dir='logs', log_file='fcpxsub.log')

        try:
            return args.handler(args, log_level)
        except FCPXSubError as e:
            logger.error(f"An FCPXSub error occurred: {e}")
            return 1
        except FileNotFoundError as e:
            logger.error(str(e))
            return 1
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            return 1
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            return 2

    def _run_inspect_template(self, args: argparse.Namespace, log_level: int) -> int:
        template = FCPXMLTemplateParser().parse(args.template)
        print(template.summary())
        return 0

    def _run_presets(self, args: argparse.Namespace, log_level: int) -> int:
        store = StylePresetStore(args.file)
        if args.action == "list":
            for name in store.names():
                marker = "*" if name == store.last_selected else " "
                print(f"{marker} {name}")
            return 0
        if not args.name:
            self.parser.error(f"presets {args.action} requires a preset name")
        if args.action == "show":
            for key, value in store.get(args.name).to_dict().items():
                print(f"{key}: {value}")
        elif args.action == "save":
            store.save(args.name, subtitle_style_from_config(ConfigLoader().load_config(args.config)))
            print(f"Saved the style from {args.config} as preset '{args.name}'.")
        else:
            store.delete(args.name)
            print(f"Deleted preset '{args.name}'.")
        return 0

    def _run_generate(self, args: argparse.Namespace, log_level: int) -> int:
        config = ConfigLoader().load_config(args.config)

        log_dir = config.get('log_dir', 'logs')
        log_file = config.get('log_file', 'fcpxsub.log')
        setup_logging(log_level=log_level, log_dir=log_dir, log_file=log_file)
        logger.info("Logging re-configured with settings from config file.")

        if args.temp_dir:
            logger.info(f"Overriding temp_dir from config with CLI argument: {args.temp_dir}")
            config['temp_dir'] = args.temp_dir
        if args.device:
            logger.info(f"Overriding device from config with CLI argument: {args.device}")
            config['device'] = args.device
        if args.model:
            logger.info(f"Overriding whisper_model from config with CLI argument: {args.model}")
            config['whisper_model'] = args.model
        if args.language:
            logger.info(f"Overriding language from config with CLI argument: {args.language}")
            config['language'] = args.language

        if not os.path.isfile(args.input):
            raise FileNotFoundError(f"Input media file not found or is not a file: {args.input}")

        settings = self._project_settings(config, args)
        style = self._subtitle_style(config, args)
        template = FCPXMLTemplateParser().parse(args.template) if args.template else None
        output = args.output or os.path.splitext(args.input)[0] + ".fcpxml"

        # Imported here so the other commands work without loading torch/whisper.
        from .audio_extractor import AudioExtractor
        from .transcriber import WhisperTranscriber
        from .pipeline import SubtitlePipeline

        logger.info("Initializing FCPXSub components...")
        device = config.get('device', 'cuda')
        audio_extractor = AudioExtractor(ffmpeg_path=config.get('ffmpeg_path'))
        transcriber = WhisperTranscriber(
            model_name=config.get('whisper_model', 'small'),
            device=device,
            fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
            language=config.get('language'),
            download_root=config.get('model_dir')
        )
        pipeline = SubtitlePipeline(config=config, audio_extractor=audio_extractor, transcriber=transcriber)
        logger.info("Components initialized successfully.")

        result = pipeline.run(
            args.input,
            style,
            settings,
            template=template,
            output_path=output,
            project_name=args.project_name
        )
        logger.info(f"Wrote {len(result.segments)} titles to {result.output_path}")
        return 0

    def _project_settings(self, config: dict, args: argparse.Namespace) -> ProjectSettings:
        settings = project_settings_from_config(config)
        overrides = {}
        if args.resolution:
            overrides['width'], overrides['height'] = ResolutionPreset(args.resolution).size
        if args.width is not None:
            overrides['width'] = args.width
        if args.height is not None:
            overrides['height'] = args.height
        if args.fps:
            overrides['frame_rate'] = FrameRate.from_value(args.fps)
        if not overrides:
            return settings
        logger.info(f"Overriding project settings with CLI arguments: {overrides}")
        try:
            return dataclasses.replace(settings, **overrides)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _subtitle_style(self, config: dict, args: argparse.Namespace) -> SubtitleStyle:
        if not args.preset:
            return subtitle_style_from_config(config)
        store = StylePresetStore(config.get('presets_file', DEFAULT_PRESETS_FILE))
        logger.info(f"Using style preset '{args.preset}'.")
        return store.apply(args.preset)


def main(argv: Optional[List[str]] = None) -> None:
    sys.exit(CLIHandler().run(argv))
