"""
General application configuration for gdiff.

Settings are read from the first JSON file returned by config_search_paths();
missing files fall back to the defaults below.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError

from gdiff.utils.logging_utils import logger

CONFIG_FILE_NAMES = ['.gdiff.json', 'gdiff.json']
USER_CONFIG_PATH = Path('~/.config/gdiff/gdiff.json')


class ConfigError(Exception):
    """Exception raised when a configuration file exists but cannot be used."""
    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class Theme(BaseModel):
    added: str = "#40ff40"
    removed: str = "#ff4040"
    context: str = "#fafafa"
    hunk: str = "#8888ff"
    line_num: str = "#888888"
    selected: str = "#4444ff"
    border: str = "#404040"


class AppConfig(BaseModel):
    theme: Theme = Theme()
    keybindings: Dict[str, str] = {}  # action name -> key overriding the default
    large_diff_threshold: int = 5000  # lines before the viewer warns
    max_context_lines: int = 3


def config_search_paths() -> List[Path]:
    return [Path(name) for name in CONFIG_FILE_NAMES] + [USER_CONFIG_PATH.expanduser()]


def load_config(paths: Optional[List[Union[str, Path]]] = None) -> AppConfig:
    """
    Load configuration from the first existing file.

    Args:
        paths: Candidate files, defaults to config_search_paths()

    Returns:
        The loaded configuration, or the defaults if no file exists

    Raises:
        ConfigError: If the first existing file is not valid JSON or fails validation
    """
    candidates = [Path(p) for p in paths] if paths is not None else config_search_paths()
    for path in candidates:
        if not path.is_file():
            continue
        logger.debug(f"Loading configuration from {path}")
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
            return AppConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration in {path}", {'path': str(path), 'error': str(e)}) from e
    return AppConfig()


def save_config(config: AppConfig, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2) + '\n', encoding='utf-8')
    logger.debug(f"Saved configuration to {path}")
