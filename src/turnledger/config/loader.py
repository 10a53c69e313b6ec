from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from turnledger.errors import ConfigurationError

from .models import AgentSettings

PROJECT_CONFIG_NAME = "turnledger.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Unable to read {path}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a YAML mapping in {path}")
    return data


def find_project_config(start: Path) -> Path | None:
    """Return the nearest ``turnledger.yaml`` at or above ``start``."""
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def load_project_config(path: Path) -> AgentSettings:
    config_path = path
    if config_path.is_dir():
        config_path = config_path / PROJECT_CONFIG_NAME
    if not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}")

    data = _load_yaml(config_path)
    for key in ("cassette_dir", "system_prompt_file"):
        value = data.get(key)
        if isinstance(value, str) and not Path(value).is_absolute():
            data[key] = str((config_path.parent / value).resolve())

    try:
        return AgentSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {config_path}: {exc}") from exc
