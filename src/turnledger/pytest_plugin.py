"""pytest integration: the ``agent`` marker and scenario fixtures.

Settings are layered project file, then module, class and function markers;
the closest marker wins field by field.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

import pytest

from turnledger.cassette.store import CassetteStore
from turnledger.config import ConfigBuilder, ScenarioSettings, find_project_config, load_project_config
from turnledger.dialog import DialogScenario
from turnledger.providers import AnthropicProvider, LLMProvider, NullProvider, OpenAICompatibleProvider
from turnledger.providers.openai import OPENAI_BASE_URL
from turnledger.simulation import ElevenLabsProvider, SimulationScenario, UnavailableSimulationProvider


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "agent(**settings): turnledger settings for the dialog and simulation fixtures "
        "(system_prompt, system_prompt_file, model, temperature, tools, record, judge_model, "
        "judge_temperature, cassette_dir, agent_id, turns_limit)",
    )


@pytest.fixture
def agent_settings(request: pytest.FixtureRequest) -> ScenarioSettings:
    builder = ConfigBuilder()
    project_file = find_project_config(request.config.rootpath)
    if project_file is not None:
        builder.layer(load_project_config(project_file))
    # iter_markers yields the closest marker first
    for marker in reversed(list(request.node.iter_markers("agent"))):
        builder.layer(marker.kwargs)
    return builder.build(test_id=request.node.nodeid, base_dir=Path(request.path).parent)


@pytest.fixture
def cassette_store(request: pytest.FixtureRequest, agent_settings: ScenarioSettings) -> CassetteStore:
    directory = agent_settings.cassette_dir or request.config.rootpath / "tests" / "cassettes"
    return CassetteStore(directory)


def provider_from_environment(environ: Mapping[str, str] | None = None) -> LLMProvider:
    env = os.environ if environ is None else environ
    api_key = env.get("LLM_API_KEY")
    if api_key:
        return OpenAICompatibleProvider(api_key, env.get("LLM_BASE_URL") or OPENAI_BASE_URL)
    anthropic_key = env.get("ANTHROPIC_API_KEY")
    if anthropic_key:
        return AnthropicProvider(anthropic_key)
    return NullProvider()


@pytest.fixture
def llm_provider() -> LLMProvider:
    return provider_from_environment()


@pytest.fixture
def judge_provider() -> LLMProvider | None:
    return None


@pytest.fixture
def dialog(
    agent_settings: ScenarioSettings,
    llm_provider: LLMProvider,
    cassette_store: CassetteStore,
    judge_provider: LLMProvider | None,
) -> DialogScenario:
    return DialogScenario.from_settings(agent_settings, llm_provider, cassette_store, judge_provider)


@pytest.fixture
def simulation(
    agent_settings: ScenarioSettings,
    cassette_store: CassetteStore,
    judge_provider: LLMProvider | None,
) -> SimulationScenario:
    api_key = os.environ.get("ELEVENLABS_API_KEY")
    provider = ElevenLabsProvider(api_key) if api_key else UnavailableSimulationProvider()
    return SimulationScenario.from_settings(agent_settings, provider, cassette_store, judge_provider)
