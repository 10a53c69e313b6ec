from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx

from turnledger.errors import ConfigurationError, ProviderError
from turnledger.providers.http import post_json

from .models import SimulationRequest, SimulationResponse

ELEVENLABS_BASE_URL = "https://api.elevenlabs.io"


class SimulationProvider(Protocol):
    def simulate_conversation(self, request: SimulationRequest) -> SimulationResponse:
        ...


class ElevenLabsProvider:
    """ElevenLabs ConvAI: the platform plays both sides of the conversation."""

    label = "ElevenLabs"

    def __init__(
        self,
        api_key: str,
        base_url: str = ELEVENLABS_BASE_URL,
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("ElevenLabsProvider requires an API key")
        self.api_key = api_key
        self.base_url = base_url or ELEVENLABS_BASE_URL
        self.timeout = timeout
        self.client = client

    def simulate_conversation(self, request: SimulationRequest) -> SimulationResponse:
        url = (
            f"{self.base_url.rstrip('/')}/v1/convai/agents/"
            f"{quote(request.agent_id, safe='')}/simulate-conversation"
        )
        data = post_json(
            url,
            {"xi-api-key": self.api_key},
            request.to_dict(),
            self.timeout,
            self.label,
            client=self.client,
        )
        return SimulationResponse.from_dict(data)


class UnavailableSimulationProvider:
    """Stands in when no simulation API key is configured; live runs skip."""

    label = "ElevenLabs"

    def simulate_conversation(self, request: SimulationRequest) -> SimulationResponse:
        raise ProviderError(
            "ELEVENLABS_API_KEY is not set and no cassette exists for this simulation",
            provider=self.label,
        )
