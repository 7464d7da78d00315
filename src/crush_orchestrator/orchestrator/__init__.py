"""Multi-strategy orchestration over an external model runner.

Strategies compose one or more sequential runner invocations; later
prompts embed earlier outputs, so there is no fan-out within a strategy.
Independent `execute` calls may run concurrently: the strategy registry
and pricing table are read-only after construction.
"""

from crush_orchestrator.orchestrator.engine import Orchestrator
from crush_orchestrator.orchestrator.models import (
    EstimateResult,
    ExecutionRequest,
    ExecutionResult,
    StrategyName,
    ValidationError,
)
from crush_orchestrator.orchestrator.runner.base import RunnerError

__all__ = [
    "EstimateResult",
    "ExecutionRequest",
    "ExecutionResult",
    "Orchestrator",
    "RunnerError",
    "StrategyName",
    "ValidationError",
]
