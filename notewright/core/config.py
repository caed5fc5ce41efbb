import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from pydantic import ValidationError

from .models import AppConfig
from ..errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger("Notewright.Config")

DEFAULT_CONFIG_FILENAME = "notewright.yaml"
USER_CONFIG_PATH = Path.home() / ".config" / "notewright" / "config.yaml"

def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level.")
    return data

def _merge_dicts(base: Dict, update: Dict):
    """Recursively merge update dict into base dict."""
    for k, v in update.items():
        if isinstance(v, dict) and k in base and isinstance(base[k], dict):
            _merge_dicts(base[k], v)
        else:
            base[k] = v

def find_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """Resolve the config file: explicit path, then ./notewright.yaml, then the user config."""
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        return path

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    if cwd_config.exists():
        return cwd_config
    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH
    return None

def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> AppConfig:
    """Load configuration from file, apply overrides and validate."""
    path = find_config_path(config_path)
    user_config = load_yaml(path) if path else {}
    if path:
        logger.debug("Loaded configuration from %s", path)

    if overrides:
        _merge_dicts(user_config, overrides)

    try:
        return AppConfig(**user_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
