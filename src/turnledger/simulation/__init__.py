from .expectations import SimulationExpectations
from .models import (
    EvaluationCriterion,
    EvaluationResult,
    SimulatedUserConfig,
    SimulationRequest,
    SimulationResponse,
    TranscriptEntry,
    TranscriptToolCall,
    TranscriptToolResult,
)
from .provider import (
    ELEVENLABS_BASE_URL,
    ElevenLabsProvider,
    SimulationProvider,
    UnavailableSimulationProvider,
)
from .scenario import SimulationScenario, response_to_result, result_to_response

__all__ = [
    "ELEVENLABS_BASE_URL",
    "ElevenLabsProvider",
    "EvaluationCriterion",
    "EvaluationResult",
    "SimulatedUserConfig",
    "SimulationExpectations",
    "SimulationProvider",
    "SimulationRequest",
    "SimulationResponse",
    "SimulationScenario",
    "TranscriptEntry",
    "TranscriptToolCall",
    "TranscriptToolResult",
    "UnavailableSimulationProvider",
    "response_to_result",
    "result_to_response",
]
