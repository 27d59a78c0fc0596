"""Loading of the optional `comics_config.json` file."""
import json
from pathlib import Path
from typing import Dict, Optional, Union

from comics_lib.errors import ConfigError

CONFIG_FILENAME = 'comics_config.json'

DEFAULT_DIRECTORY = Path.home() / 'Pictures' / 'Comics'
DEFAULT_MODE = 'fanout'
MODES = ('fanout', 'pipeline')
DEFAULT_TIMEOUT = 30.0
DEFAULT_FETCH_WORKERS = 2
DEFAULT_DOWNLOAD_WORKERS = 2
DEFAULT_QUEUE_SIZE = 4
DEFAULT_FILE_MODE = 0o644


def _strip_comments(value):
    if isinstance(value, dict):
        return {k: _strip_comments(v) for k, v in value.items() if not str(k).startswith('_')}
    return value


def load_config(path: Optional[Union[str, Path]] = None) -> Dict:
    """Read the JSON config at `path`.

    A missing file yields an empty config. A file that exists but cannot be
    read or decoded raises ConfigError; keys starting with '_' are dropped so
    the file can carry comments.
    """
    if path is None:
        path = Path(__file__).resolve().parent.parent / CONFIG_FILENAME
    path = Path(path)
    if not path.exists():
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}")
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return _strip_comments(cfg)


def parse_file_mode(value) -> int:
    """Accept permissions as an int (420) or an octal string ('0644', '0o600')."""
    if value is None:
        return DEFAULT_FILE_MODE
    if isinstance(value, bool):
        raise ConfigError(f"Invalid file_mode: {value!r}")
    if isinstance(value, int):
        mode = value
    else:
        try:
            mode = int(str(value), 8)
        except ValueError:
            raise ConfigError(f"Invalid file_mode: {value!r}")
    if not 0 <= mode <= 0o777:
        raise ConfigError(f"file_mode out of range: {oct(mode)}")
    return mode
