"""Named subtitle style presets persisted to a YAML file."""

import logging
import os
from typing import Dict, List, Optional

import yaml

from .exceptions import ConfigurationError, FileSystemError, StylePresetError
from .models import SubtitleStyle
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "Default"


class StylePresetStore:
    """
    Keeps named SubtitleStyles and the last preset the user picked.

    Names are case-sensitive. The "Default" preset always exists and cannot
    be deleted. Every change is written straight back to the file.
    """

    def __init__(self, path: str):
        self.path = path
        self._styles: Dict[str, SubtitleStyle] = {}
        self._last_selected: Optional[str] = None
        self._load()

    @property
    def last_selected(self) -> str:
        if self._last_selected in self._styles:
            return self._last_selected
        return DEFAULT_PRESET

    def names(self) -> List[str]:
        return sorted(self._styles)

    def get(self, name: str) -> SubtitleStyle:
        try:
            return self._styles[name]
        except KeyError:
            raise StylePresetError(f"No style preset named '{name}'.") from None

    def apply(self, name: str) -> SubtitleStyle:
        """Returns the preset's style and remembers it as the last selection."""
        style = self.get(name)
        self._last_selected = name
        self._persist()
        return style

    def save(self, name: str, style: SubtitleStyle) -> None:
        if not name or not name.strip():
            raise StylePresetError("Preset name cannot be empty.")
        self._styles[name] = style
        self._last_selected = name
        self._persist()
        logger.info(f"Saved style preset '{name}'.")

    def delete(self, name: str) -> None:
        if name == DEFAULT_PRESET:
            raise StylePresetError(f"The '{DEFAULT_PRESET}' preset cannot be deleted.")
        if name not in self._styles:
            raise StylePresetError(f"No style preset named '{name}'.")
        del self._styles[name]
        if self._last_selected == name:
            self._last_selected = DEFAULT_PRESET
        self._persist()
        logger.info(f"Deleted style preset '{name}'.")

    def _load(self) -> None:
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except (yaml.YAMLError, OSError) as e:
                logger.error(f"Could not read style presets from {self.path}: {e}", exc_info=True)
                raise ConfigurationError(f"Could not read style presets from {self.path}: {e}") from e
            if not isinstance(data, dict) or not isinstance(data.get('presets', {}), dict):
                raise ConfigurationError(f"Invalid style preset file structure in {self.path}.")
            try:
                for name, values in (data.get('presets') or {}).items():
                    self._styles[str(name)] = SubtitleStyle.from_dict(values or {})
            except (TypeError, ValueError, AttributeError) as e:
                raise ConfigurationError(f"Invalid style preset in {self.path}: {e}") from e
            self._last_selected = data.get('last_selected')
            logger.info(f"Loaded {len(self._styles)} style presets from {self.path}")
        else:
            logger.debug(f"No style preset file at {self.path}; starting with defaults.")

        self._styles.setdefault(DEFAULT_PRESET, SubtitleStyle())

    def _persist(self) -> None:
        data = {
            'last_selected': self.last_selected,
            'presets': {name: self._styles[name].to_dict() for name in self.names()},
        }
        directory = os.path.dirname(os.path.abspath(self.path))
        ensure_dir_exists(directory)
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        except OSError as e:
            logger.error(f"Could not write style presets to {self.path}: {e}", exc_info=True)
            raise FileSystemError(f"Could not write style presets to {self.path}: {e}") from e
