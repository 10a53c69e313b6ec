from __future__ import annotations

import json
import logging
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Deque, Iterable

from turnledger.cassette.fingerprint import make_fingerprint
from turnledger.cassette.models import CassetteSource
from turnledger.cassette.resolver import CassetteResolver
from turnledger.cassette.store import CassetteStore
from turnledger.errors import ToolResolutionError
from turnledger.judge import JudgeSession
from turnledger.models import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    Attachment,
    CompletionOptions,
    Message,
    ProviderResult,
    Role,
    ToolDefinition,
)
from turnledger.providers.base import LLMProvider
from turnledger.tools.registry import resolve_definitions

from .expectations import AnswerExpectations

if TYPE_CHECKING:
    from turnledger.config.models import ScenarioSettings

logger = logging.getLogger(__name__)


class DialogScenario:
    """A multi-turn conversation replayed from, or recorded into, cassettes.

    Each ``answer()`` executes exactly one turn: the outbound message list is
    the system prompt (when non-empty) followed by the transcript, and the turn
    is fingerprinted with the zero-based turn index. Turns are strictly
    sequential; the scenario is simply discarded when the test ends.
    """

    def __init__(
        self,
        provider: LLMProvider,
        store: CassetteStore,
        *,
        system_prompt: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        tools: Iterable[object] = (),
        test_id: str = "",
        record: bool = False,
        judge_provider: LLMProvider | None = None,
        judge_model: str | None = None,
        judge_temperature: float | None = None,
    ) -> None:
        self._provider = provider
        self._system_prompt = system_prompt
        self._options = CompletionOptions(model=model, temperature=float(temperature))
        self._tools: tuple[ToolDefinition, ...] = tuple(resolve_definitions(tools))
        self._test_id = test_id
        self._resolver = CassetteResolver(store, record=record)
        self._judge = JudgeSession(
            judge_provider or provider,
            self._resolver,
            default_model=judge_model or model,
            default_temperature=0.0 if judge_temperature is None else judge_temperature,
        )
        self._transcript: list[Message] = []
        self._turn_index = 0
        self._last_result: ProviderResult | None = None
        self._mock_results: Deque[ProviderResult] = deque()
        self._fingerprints: list[str] = []

    @classmethod
    def from_settings(
        cls,
        settings: "ScenarioSettings",
        provider: LLMProvider,
        store: CassetteStore | None = None,
        judge_provider: LLMProvider | None = None,
    ) -> "DialogScenario":
        return cls(
            provider,
            store or CassetteStore(settings.cassette_dir),
            system_prompt=settings.system_prompt,
            model=settings.model,
            temperature=settings.temperature,
            tools=settings.tools,
            test_id=settings.test_id,
            record=settings.record,
            judge_provider=judge_provider,
            judge_model=settings.judge_model,
            judge_temperature=settings.judge_temperature,
        )

    @property
    def transcript(self) -> list[Message]:
        return list(self._transcript)

    @property
    def turn_index(self) -> int:
        return self._turn_index

    @property
    def last_result(self) -> ProviderResult | None:
        return self._last_result

    @property
    def fingerprints(self) -> list[str]:
        return list(self._fingerprints)

    @property
    def tools(self) -> tuple[ToolDefinition, ...]:
        return self._tools

    def with_mock_result(self, result: ProviderResult) -> "DialogScenario":
        """Queue a result consumed by the next turn instead of the resolver."""
        self._mock_results.append(result)
        return self

    def user(self, text: str) -> "DialogScenario":
        self._transcript.append(Message.user(text))
        return self

    def user_with_attachments(
        self, text: str, attachments: Iterable[Attachment | str | Path]
    ) -> "DialogScenario":
        resolved = [Attachment.coerce(item) for item in attachments]
        self._transcript.append(Message.user(text, resolved))
        return self

    def tool_result(
        self,
        tool_name: str,
        payload: Any,
        tool_call_id: str | None = None,
    ) -> "DialogScenario":
        if tool_call_id is None:
            tool_call_id = self._resolve_tool_call_id(tool_name)
        else:
            self._check_tool_call_id(tool_name, tool_call_id)
        content = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
        self._transcript.append(Message.tool(tool_call_id, tool_name, content))
        return self

    def answer(self, check: Callable[[AnswerExpectations], Any] | None = None) -> "DialogScenario":
        turn_index = self._turn_index
        result = self._execute_turn()
        if check is not None:
            check(
                AnswerExpectations(
                    result,
                    turn_index=turn_index,
                    tools=self._tools,
                    judge=self._judge,
                    judge_identity=f"judge:{self._test_id}:{turn_index}",
                )
            )
        return self

    def build_messages(self) -> list[Message]:
        messages: list[Message] = []
        if self._system_prompt:
            messages.append(Message.system(self._system_prompt))
        messages.extend(self._transcript)
        return messages

    def _execute_turn(self) -> ProviderResult:
        if self._mock_results:
            result = self._mock_results.popleft()
            logger.debug("Turn %s served from mock queue", self._turn_index)
        else:
            result = self._resolve_turn()

        self._transcript.append(Message.assistant(result.content, result.tool_calls))
        self._last_result = result
        self._turn_index += 1
        return result

    def _resolve_turn(self) -> ProviderResult:
        messages = self.build_messages()
        options = self._options
        tools = list(self._tools)
        fingerprint = make_fingerprint(
            self._system_prompt,
            messages,
            options.model,
            options.temperature,
            tools,
            self._test_id,
            self._turn_index,
        )
        self._fingerprints.append(fingerprint)
        logger.debug("Turn %s of %r has fingerprint %s", self._turn_index, self._test_id, fingerprint)

        return self._resolver.resolve(
            fingerprint,
            lambda: self._provider.complete(messages, tools, options),
            lambda: {
                "messages": [message.to_dict() for message in messages],
                "options": options.to_dict(),
                "tools": [tool.to_dict() for tool in tools],
            },
            {
                "model": options.model,
                "temperature": options.temperature,
                "source": CassetteSource.FIXTURE.value,
                "provider": type(self._provider).__name__,
            },
        )

    def _last_assistant_index(self, tool_name: str) -> int:
        for index in range(len(self._transcript) - 1, -1, -1):
            if self._transcript[index].role is Role.ASSISTANT:
                return index
        raise ToolResolutionError(
            f"Cannot resolve tool_call_id for '{tool_name}': no previous answer() call."
        )

    def _resolve_tool_call_id(self, tool_name: str) -> str:
        index = self._last_assistant_index(tool_name)
        assistant = self._transcript[index]
        answered = {
            message.tool_call_id
            for message in self._transcript[index + 1 :]
            if message.role is Role.TOOL
        }
        matches = [call for call in assistant.tool_calls if call.name == tool_name]
        if not matches:
            raise ToolResolutionError(
                f"Cannot resolve tool_call_id: tool '{tool_name}' was not called in the last answer."
            )
        for call in matches:
            if call.id not in answered:
                return call.id
        return matches[0].id

    def _check_tool_call_id(self, tool_name: str, tool_call_id: str) -> None:
        assistant = self._transcript[self._last_assistant_index(tool_name)]
        call = next((call for call in assistant.tool_calls if call.id == tool_call_id), None)
        if call is None:
            raise ToolResolutionError(
                f"Tool call id '{tool_call_id}' was not issued by the last answer."
            )
        if call.name != tool_name:
            raise ToolResolutionError(
                f"Tool call id '{tool_call_id}' belongs to '{call.name}', not '{tool_name}'."
            )
