from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from turnledger.errors import ConfigurationError
from turnledger.tools.registry import load_tool

from .models import AgentSettings, ScenarioSettings

RECORD_ENV = "TURNLEDGER_RECORD"
CASSETTE_DIR_ENV = "TURNLEDGER_CASSETTE_DIR"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


def parse_flag(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be one of 1/true/yes/on or 0/false/no/off, got {value!r}")


def merge_settings(base: AgentSettings | None, override: AgentSettings | None) -> AgentSettings | None:
    if base is None and override is None:
        return None

    # tool objects must pass through unconverted
    merged: dict[str, Any] = {}
    for layer in (base, override):
        if layer is None:
            continue
        for name in AgentSettings.model_fields:
            value = getattr(layer, name)
            if value is not None:
                merged[name] = value

    return AgentSettings(**merged)


class ConfigBuilder:
    """Stack settings layers; later non-``None`` fields win one at a time."""

    def __init__(self) -> None:
        self._settings: AgentSettings | None = None

    def layer(self, settings: AgentSettings | Mapping[str, Any] | None) -> "ConfigBuilder":
        if settings is None:
            return self
        if not isinstance(settings, AgentSettings):
            try:
                settings = AgentSettings.model_validate(dict(settings))
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid agent settings: {exc}") from exc
        self._settings = merge_settings(self._settings, settings)
        return self

    def build(
        self,
        test_id: str = "",
        base_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ScenarioSettings:
        env = os.environ if environ is None else environ
        settings = self._settings or AgentSettings()
        base = base_dir or Path.cwd()

        record = settings.record
        if env.get(RECORD_ENV) is not None:
            record = parse_flag(RECORD_ENV, env[RECORD_ENV])

        cassette_dir: Path | None = None
        raw_dir = env.get(CASSETTE_DIR_ENV) or settings.cassette_dir
        if raw_dir:
            cassette_dir = Path(raw_dir)
            if not cassette_dir.is_absolute():
                cassette_dir = base / cassette_dir

        values: dict[str, Any] = {
            "test_id": test_id,
            "system_prompt": self._system_prompt(settings, base),
            "tools": self._tools(settings.tools or []),
            "record": bool(record),
            "judge_model": settings.judge_model,
            "judge_temperature": settings.judge_temperature,
            "cassette_dir": cassette_dir,
        }
        for key in ("model", "temperature", "agent_id", "turns_limit"):
            value = getattr(settings, key)
            if value is not None:
                values[key] = value
        return ScenarioSettings(**values)

    @staticmethod
    def _system_prompt(settings: AgentSettings, base: Path) -> str:
        parts: list[str] = []
        if settings.system_prompt_file:
            path = Path(settings.system_prompt_file)
            if not path.is_absolute():
                path = base / path
            try:
                parts.append(path.read_text(encoding="utf-8"))
            except OSError as exc:
                raise ConfigurationError(f"Unable to read system prompt file {path}") from exc
        if settings.system_prompt:
            parts.append(settings.system_prompt)
        return "\n".join(parts)

    @staticmethod
    def _tools(entries: list[Any]) -> list[Any]:
        tools: list[Any] = []
        for entry in entries:
            if isinstance(entry, str):
                tools.extend(load_tool(entry))
            else:
                tools.append(entry)
        return tools
