from __future__ import annotations

import logging

from turnledger.cassette.fingerprint import make_judge_fingerprint
from turnledger.cassette.models import CassetteSource
from turnledger.cassette.resolver import CassetteResolver
from turnledger.models import CompletionOptions, DEFAULT_MODEL, Message
from turnledger.providers.base import LLMProvider

from .models import JudgeVerdict

logger = logging.getLogger(__name__)

JUDGE_SYSTEM_PROMPT = """\
You are a strict test evaluator. You will receive an AI assistant's response and evaluation criteria.
Evaluate whether the response fully satisfies the criteria.
You MUST respond with ONLY a JSON object in this exact format, no other text:
{"pass": true, "reason": "brief explanation"}
or
{"pass": false, "reason": "brief explanation of what failed"}"""

_CONTENT_EXCERPT = 500


def build_judge_messages(content: str, content_label: str, criteria: str) -> list[Message]:
    user = f"## {content_label}:\n{content}\n\n## Evaluation criteria:\n{criteria}"
    return [Message.system(JUDGE_SYSTEM_PROMPT), Message.user(user)]


class JudgeSession:
    """Fingerprinted judge calls sharing one incrementing call index.

    ``identity`` is a judge-marked prefix (``judge:<test>:<turn>``); combined
    with the call index it keeps every judge cassette apart from each other and
    from dialog turns.
    """

    def __init__(
        self,
        provider: LLMProvider,
        resolver: CassetteResolver,
        *,
        default_model: str = DEFAULT_MODEL,
        default_temperature: float = 0.0,
    ) -> None:
        self.provider = provider
        self.resolver = resolver
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.call_index = 0

    def evaluate(
        self,
        identity: str,
        content: str,
        content_label: str,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> JudgeVerdict:
        options = CompletionOptions(
            model=model or self.default_model,
            temperature=self.default_temperature if temperature is None else temperature,
        )
        messages = build_judge_messages(content, content_label, criteria)
        fingerprint = make_judge_fingerprint(
            JUDGE_SYSTEM_PROMPT,
            messages,
            options.model,
            options.temperature,
            identity,
            self.call_index,
        )
        self.call_index += 1

        result = self.resolver.resolve(
            fingerprint,
            lambda: self.provider.complete(messages, [], options),
            lambda: {
                "messages": [message.to_dict() for message in messages],
                "options": options.to_dict(),
                "tools": [],
            },
            {
                "model": options.model,
                "temperature": float(options.temperature),
                "source": CassetteSource.JUDGE.value,
            },
        )
        verdict = JudgeVerdict.from_json(result.content)
        logger.debug("Judge %s verdict pass=%s reason=%s", fingerprint, verdict.passed, verdict.reason)
        return verdict

    def assert_passed(
        self,
        identity: str,
        content: str,
        content_label: str,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> JudgeVerdict:
        verdict = self.evaluate(identity, content, content_label, criteria, model, temperature)
        if not verdict.passed:
            raise AssertionError(
                "LLM judge failed assertion.\n"
                f"Criteria: {criteria}\n"
                f"Reason: {verdict.reason}\n"
                f"{content_label}: {content[:_CONTENT_EXCERPT]}"
            )
        return verdict
