"""Execution strategies."""

from crush_orchestrator.orchestrator.strategies.balanced import BalancedStrategy
from crush_orchestrator.orchestrator.strategies.base import ExecutionTrace, Strategy
from crush_orchestrator.orchestrator.strategies.cost_optimized import CostOptimizedStrategy
from crush_orchestrator.orchestrator.strategies.fast import FastStrategy
from crush_orchestrator.orchestrator.strategies.quality import QualityStrategy

__all__ = [
    "BalancedStrategy",
    "CostOptimizedStrategy",
    "ExecutionTrace",
    "FastStrategy",
    "QualityStrategy",
    "Strategy",
]
