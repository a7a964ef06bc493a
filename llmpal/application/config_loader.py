import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from llmpal.application.config_models import LlmpalConfig
from llmpal.domain.constants import CONFIG_FILENAMES
from llmpal.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _load_mapping(path: Path) -> dict[str, Any] | None:
    """
    Load a YAML or JSON config file and ensure the root is a mapping.

    Returns None when the file does not exist.
    """
    # Protect against TOCTOU race conditions.
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file: {path}: {e}", path=str(path)) from e

    try:
        if path.suffix == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Malformed config file: {path}: {e}", path=str(path)) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {path}", path=str(path))

    return data


def find_config_file(directory: Path) -> Path | None:
    """First existing config file in `directory`, by CONFIG_FILENAMES order."""
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(*, project_root: Path | None = None, user_home: Path | None = None) -> LlmpalConfig:
    """
    Load the configuration.

    Lookup (first hit wins, no merging):
      - project: project_root/.llmpal.yml | .llmpal.yaml | .llmpal.json
      - user:    user_home/.llmpal.yml | .llmpal.yaml | .llmpal.json
      - built-in defaults (no models, no rules)

    Raises:
        ConfigurationError: If the chosen file is unreadable, malformed, or
            does not match the schema
    """
    project_root = project_root or Path.cwd()
    directories = [project_root]
    if user_home is None:
        try:
            user_home = Path.home()
        except RuntimeError:
            logger.debug("Home directory cannot be determined, skipping user config")
    if user_home is not None:
        directories.append(user_home)

    for directory in directories:
        path = find_config_file(directory)
        if path is None:
            continue
        data = _load_mapping(path)
        if data is None:
            continue
        logger.debug(f"Using config file {path}")
        try:
            return LlmpalConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config file: {path}: {e}", path=str(path)) from e

    logger.debug("No config file found, using defaults")
    return LlmpalConfig()
