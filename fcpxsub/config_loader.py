"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from .exceptions import ConfigurationError
from .models import FrameRate, ProjectSettings, ResolutionPreset, SubtitleStyle

logger = logging.getLogger(__name__)

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config


def _section(config: dict, name: str) -> dict:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping.")
    return section


def project_settings_from_config(config: dict) -> ProjectSettings:
    """
    Builds ProjectSettings from the 'project' section.

    'resolution' names a ResolutionPreset; explicit 'width'/'height' win over it.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    project = _section(config, 'project')
    defaults = ProjectSettings()
    try:
        width, height = defaults.width, defaults.height
        if project.get('resolution'):
            size = ResolutionPreset(str(project['resolution']).lower()).size
            if size is not None:
                width, height = size
        width = int(project.get('width', width))
        height = int(project.get('height', height))
        frame_rate = FrameRate.from_value(project.get('frame_rate', defaults.frame_rate))
        return ProjectSettings(width=width, height=height, frame_rate=frame_rate)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid 'project' configuration: {e}") from e


def subtitle_style_from_config(config: dict) -> SubtitleStyle:
    """
    Builds a SubtitleStyle from the 'style' section; missing keys keep their defaults.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    try:
        return SubtitleStyle.from_dict(_section(config, 'style'))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid 'style' configuration: {e}") from e
