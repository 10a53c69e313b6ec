from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

import pytest

from turnledger.cassette.fingerprint import make_simulation_fingerprint
from turnledger.cassette.models import CassetteSource
from turnledger.cassette.resolver import CassetteResolver
from turnledger.cassette.store import CassetteStore
from turnledger.errors import InvalidResponseError, ProviderError
from turnledger.judge import JudgeSession
from turnledger.models import DEFAULT_MODEL, ProviderResult
from turnledger.providers.base import LLMProvider

from .expectations import SimulationExpectations
from .models import EvaluationCriterion, SimulatedUserConfig, SimulationRequest, SimulationResponse
from .provider import SimulationProvider

if TYPE_CHECKING:
    from turnledger.config.models import ScenarioSettings

logger = logging.getLogger(__name__)


def response_to_result(response: SimulationResponse) -> ProviderResult:
    return ProviderResult(content=json.dumps(response.to_dict(), ensure_ascii=False))


def result_to_response(result: ProviderResult) -> SimulationResponse:
    try:
        data = json.loads(result.content)
    except json.JSONDecodeError as exc:
        raise InvalidResponseError("Simulation cassette content is not valid JSON") from exc
    if not isinstance(data, dict):
        raise InvalidResponseError("Simulation cassette content must be a JSON object")
    return SimulationResponse.from_dict(data)


class SimulationScenario:
    """A whole conversation simulated server-side and stored as one cassette."""

    def __init__(
        self,
        provider: SimulationProvider,
        store: CassetteStore,
        *,
        agent_id: str = "",
        test_id: str = "",
        turns_limit: int = 10,
        record: bool = False,
        judge_provider: LLMProvider | None = None,
        judge_model: str | None = None,
        judge_temperature: float | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self.agent_id = agent_id
        self.test_id = test_id
        self.turns_limit = turns_limit
        self.record = record
        self.user_prompt = ""
        self.first_message = ""
        self.tool_mocks: dict[str, str] = {}
        self.dynamic_variables: dict[str, Any] = {}
        self.evaluation_criteria: list[EvaluationCriterion] = []
        self._judge_provider = judge_provider
        self._judge_model = judge_model
        self._judge_temperature = judge_temperature

    @classmethod
    def from_settings(
        cls,
        settings: "ScenarioSettings",
        provider: SimulationProvider,
        store: CassetteStore | None = None,
        judge_provider: LLMProvider | None = None,
    ) -> "SimulationScenario":
        return cls(
            provider,
            store or CassetteStore(settings.cassette_dir),
            agent_id=settings.agent_id,
            test_id=settings.test_id,
            turns_limit=settings.turns_limit,
            record=settings.record,
            judge_provider=judge_provider,
            judge_model=settings.judge_model,
            judge_temperature=settings.judge_temperature,
        )

    def with_agent_id(self, agent_id: str) -> "SimulationScenario":
        self.agent_id = agent_id
        return self

    def with_user_prompt(self, prompt: str) -> "SimulationScenario":
        self.user_prompt = prompt
        return self

    def with_first_message(self, message: str) -> "SimulationScenario":
        self.first_message = message
        return self

    def with_tool_mock(self, tool_name: str, reply: Any) -> "SimulationScenario":
        self.tool_mocks[tool_name] = json.dumps(reply, ensure_ascii=False)
        return self

    def with_dynamic_variable(self, name: str, value: str | int | float | bool) -> "SimulationScenario":
        self.dynamic_variables[name] = value
        return self

    def with_dynamic_variables(self, variables: Mapping[str, Any]) -> "SimulationScenario":
        self.dynamic_variables.update(variables)
        return self

    def with_evaluation(self, criteria_id: str, criteria: str) -> "SimulationScenario":
        self.evaluation_criteria.append(EvaluationCriterion(criteria_id, criteria))
        return self

    def with_turns_limit(self, limit: int) -> "SimulationScenario":
        self.turns_limit = limit
        return self

    def with_record(self, record: bool = True) -> "SimulationScenario":
        self.record = record
        return self

    def with_test_id(self, test_id: str) -> "SimulationScenario":
        self.test_id = test_id
        return self

    def with_judge_provider(self, provider: LLMProvider, model: str | None = None) -> "SimulationScenario":
        self._judge_provider = provider
        self._judge_model = model
        return self

    def build_request(self) -> SimulationRequest:
        return SimulationRequest(
            agent_id=self.agent_id,
            user_config=SimulatedUserConfig(self.user_prompt, self.first_message),
            evaluation_criteria=tuple(self.evaluation_criteria),
            tool_mocks=dict(self.tool_mocks),
            turns_limit=self.turns_limit,
            dynamic_variables=dict(self.dynamic_variables),
        )

    def fingerprint(self) -> str:
        return make_simulation_fingerprint(
            self.agent_id,
            self.user_prompt,
            self.first_message,
            self.tool_mocks,
            [criterion.to_dict() for criterion in self.evaluation_criteria],
            self.turns_limit,
            self.test_id,
            self.dynamic_variables,
        )

    def run(self, check: Callable[[SimulationExpectations], Any] | None = None) -> SimulationResponse:
        """Resolve the simulation and hand its expectations to ``check``.

        A provider failure skips the calling test instead of failing it.
        """
        request = self.build_request()
        fingerprint = self.fingerprint()
        resolver = CassetteResolver(self._store, record=self.record)

        try:
            result = resolver.resolve(
                fingerprint,
                lambda: response_to_result(self._provider.simulate_conversation(request)),
                lambda: {"request": request.to_dict()},
                {
                    "source": CassetteSource.SIMULATION.value,
                    "provider": type(self._provider).__name__,
                    "agent_id": self.agent_id,
                },
            )
        except ProviderError as exc:
            logger.warning("Simulation for agent %r unavailable: %s", self.agent_id, exc)
            pytest.skip(f"Simulation provider unavailable: {exc}")

        response = result_to_response(result)
        if check is not None:
            judge = None
            if self._judge_provider is not None:
                judge = JudgeSession(
                    self._judge_provider,
                    resolver,
                    default_model=self._judge_model or DEFAULT_MODEL,
                    default_temperature=0.0 if self._judge_temperature is None else self._judge_temperature,
                )
            check(SimulationExpectations(response, judge=judge, test_id=self.test_id))
        return response
