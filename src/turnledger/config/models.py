from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from turnledger.models import DEFAULT_MODEL, DEFAULT_TEMPERATURE


class AgentSettings(BaseModel):
    """One configuration layer; unset fields defer to the layer below."""

    system_prompt: str | None = None
    system_prompt_file: str | None = None
    model: str | None = None
    temperature: float | None = None
    # import paths ("pkg.module:attr" / "pkg.module") or tool objects
    tools: list[Any] | None = None
    record: bool | None = None
    judge_model: str | None = None
    judge_temperature: float | None = None
    cassette_dir: str | None = None
    agent_id: str | None = None
    turns_limit: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class ScenarioSettings(BaseModel):
    test_id: str = ""
    system_prompt: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    tools: list[Any] = Field(default_factory=list)
    record: bool = False
    judge_model: str | None = None
    judge_temperature: float | None = None
    cassette_dir: Path | None = None
    agent_id: str = ""
    turns_limit: int = 10

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)
