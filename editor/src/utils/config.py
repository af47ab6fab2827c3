"""Configuration management for the Mesmerise editor"""

import os
import json
import logging
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

from utils.logger import loggerRaise
from constants import (
	CONFIG_DIR_NAME, CONFIG_FILE_NAME, CONFIG_ENV_VAR,
	VALUE_DEBOUNCE_MS, COLOR_DEBOUNCE_MS, FRAME_INTERVAL_MS,
	DEFAULT_EXPORT_FILENAME, MAX_RECENT_FILES,
)

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
	"""User settings persisted as JSON"""
	debounce_ms: int = VALUE_DEBOUNCE_MS
	color_debounce_ms: int = COLOR_DEBOUNCE_MS
	frame_interval_ms: int = FRAME_INTERVAL_MS
	export_filename: str = DEFAULT_EXPORT_FILENAME
	log_level: str = 'WARNING'
	recent_files: List[str] = field(default_factory=list)
	max_recent_files: int = MAX_RECENT_FILES


def default_config_path():
	"""Config file location ($MESMERISE_CONFIG overrides ~/.mesmerise/config.json)"""
	override = os.environ.get(CONFIG_ENV_VAR)
	if override:
		return override
	return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, CONFIG_FILE_NAME)


def load_config(path: Optional[str] = None) -> EditorConfig:
	"""Load settings from a config file

	A missing file yields defaults and unknown keys are ignored. Recent
	files that no longer exist are dropped.
	"""
	path = path or default_config_path()
	if not os.path.exists(path):
		logger.debug(f"No config at {path}, using defaults")
		return EditorConfig()

	try:
		with open(path, 'r', encoding='utf-8') as f:
			data = json.load(f)
		if not isinstance(data, dict):
			raise ValueError(f"Config root must be an object, got {type(data).__name__}")
	except (OSError, ValueError) as e:
		loggerRaise(e, "Error loading config")

	known = {f.name for f in fields(EditorConfig)}
	config = EditorConfig(**{key: value for key, value in data.items() if key in known})
	config.recent_files = [f for f in config.recent_files if os.path.exists(f)]

	logger.debug(f"Loaded config from {path}")
	return config


def save_config(config: EditorConfig, path: Optional[str] = None):
	"""Write settings back to the config file"""
	path = path or default_config_path()
	try:
		# Create config directory if it doesn't exist
		directory = os.path.dirname(path)
		if directory:
			os.makedirs(directory, exist_ok=True)

		data = asdict(config)
		data['recent_files'] = config.recent_files[:config.max_recent_files]

		with open(path, 'w', encoding='utf-8') as f:
			json.dump(data, f, indent=2)
	except OSError as e:
		loggerRaise(e, "Error saving config")


def add_to_recent_files(config: EditorConfig, filepath: str, path: Optional[str] = None):
	"""Move filepath to the front of the recent files list and save"""
	if filepath in config.recent_files:
		config.recent_files.remove(filepath)

	config.recent_files.insert(0, filepath)
	config.recent_files = config.recent_files[:config.max_recent_files]

	save_config(config, path)
