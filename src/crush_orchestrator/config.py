"""Runtime configuration for runner and strategies."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# The default template passes no output-token limit to the runner. Add a
# {max_tokens} flag for cost-optimized ceilings to be enforced by the runner;
# without one the budget is advisory and a warning is logged per execution.
DEFAULT_COMMAND_TEMPLATE = "{binary} run --model {model}"
SUPPORTED_PLACEHOLDERS = ("binary", "model", "max_tokens", "prompt")
OUTPUT_FORMATS = ("auto", "json", "text")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RunnerSettings:
    """External runner process settings."""

    binary_path: str = "crush"
    command_template: str = DEFAULT_COMMAND_TEMPLATE
    timeout_seconds: float = 120.0
    terminate_grace_seconds: float = 2.0
    pricing_overrides: str = ""
    output_format: str = "auto"

    @property
    def forwards_max_tokens(self) -> bool:
        return "{max_tokens}" in self.command_template


@dataclass(frozen=True, slots=True)
class ModelTierSettings:
    """Model ids used by strategies per capability tier."""

    fast: str = "grok-3-mini"
    quality: str = "claude-haiku-4-5"
    premium: str = "claude-sonnet-4-5"


@dataclass(frozen=True, slots=True)
class StrategySettings:
    """Strategy tuning knobs."""

    default_strategy: str = "balanced"
    quality_max_iterations: int = 3
    quality_threshold: float = 0.75
    cost_optimized_default_max_cost: float = 0.01
    cost_optimized_token_cap: int = 1000


@dataclass(frozen=True, slots=True)
class Settings:
    """Application settings grouped by concern."""

    runner: RunnerSettings = field(default_factory=RunnerSettings)
    models: ModelTierSettings = field(default_factory=ModelTierSettings)
    strategies: StrategySettings = field(default_factory=StrategySettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for local use."""

        return cls(
            runner=RunnerSettings(
                binary_path=os.getenv("CRUSH_BINARY_PATH", "crush"),
                command_template=os.getenv("CRUSH_COMMAND_TEMPLATE", DEFAULT_COMMAND_TEMPLATE),
                timeout_seconds=_env_float("CRUSH_TIMEOUT_SECONDS", 120.0),
                terminate_grace_seconds=_env_float("CRUSH_TERMINATE_GRACE_SECONDS", 2.0),
                pricing_overrides=os.getenv("CRUSH_PRICING", ""),
                output_format=os.getenv("CRUSH_OUTPUT_FORMAT", "auto").strip().lower(),
            ),
            models=ModelTierSettings(
                fast=os.getenv("CRUSH_FAST_MODEL", "grok-3-mini"),
                quality=os.getenv("CRUSH_QUALITY_MODEL", "claude-haiku-4-5"),
                premium=os.getenv("CRUSH_PREMIUM_MODEL", "claude-sonnet-4-5"),
            ),
            strategies=StrategySettings(
                default_strategy=os.getenv("CRUSH_DEFAULT_STRATEGY", "balanced").strip().lower(),
                quality_max_iterations=_env_int("CRUSH_QUALITY_MAX_ITERATIONS", 3),
                quality_threshold=_env_float("CRUSH_QUALITY_THRESHOLD", 0.75),
                cost_optimized_default_max_cost=_env_float(
                    "CRUSH_COST_OPTIMIZED_DEFAULT_MAX_COST",
                    0.01,
                ),
                cost_optimized_token_cap=_env_int("CRUSH_COST_OPTIMIZED_TOKEN_CAP", 1000),
            ),
            log_level=os.getenv("CRUSH_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error if any value is out of range."""

        if not self.runner.binary_path.strip():
            raise ValueError("CRUSH_BINARY_PATH must be non-empty.")
        _validate_command_template(self.runner.command_template)
        if self.runner.timeout_seconds <= 0:
            raise ValueError("CRUSH_TIMEOUT_SECONDS must be > 0.")
        if self.runner.terminate_grace_seconds < 0:
            raise ValueError("CRUSH_TERMINATE_GRACE_SECONDS must be >= 0.")
        if self.runner.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Invalid CRUSH_OUTPUT_FORMAT: {self.runner.output_format!r}. "
                f"Use one of {OUTPUT_FORMATS}.",
            )
        for name, model in (
            ("CRUSH_FAST_MODEL", self.models.fast),
            ("CRUSH_QUALITY_MODEL", self.models.quality),
            ("CRUSH_PREMIUM_MODEL", self.models.premium),
        ):
            if not model.strip():
                raise ValueError(f"{name} must be non-empty.")
        if self.strategies.quality_max_iterations < 2:
            raise ValueError("CRUSH_QUALITY_MAX_ITERATIONS must be >= 2.")
        if not 0.0 < self.strategies.quality_threshold <= 1.0:
            raise ValueError("CRUSH_QUALITY_THRESHOLD must be in (0, 1].")
        if self.strategies.cost_optimized_default_max_cost <= 0:
            raise ValueError("CRUSH_COST_OPTIMIZED_DEFAULT_MAX_COST must be > 0.")
        if self.strategies.cost_optimized_token_cap <= 0:
            raise ValueError("CRUSH_COST_OPTIMIZED_TOKEN_CAP must be > 0.")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid CRUSH_LOG_LEVEL: {self.log_level!r}. Use one of {LOG_LEVELS}.",
            )


def _validate_command_template(template: str) -> None:
    stripped = template.strip()
    if not stripped:
        raise ValueError("CRUSH_COMMAND_TEMPLATE must be non-empty.")
    if "{model}" not in stripped:
        raise ValueError("CRUSH_COMMAND_TEMPLATE must include {model}.")
    try:
        stripped.format(**{name: "" for name in SUPPORTED_PLACEHOLDERS})
    except (KeyError, IndexError) as error:
        raise ValueError(
            f"Unsupported CRUSH_COMMAND_TEMPLATE placeholder: {error}. "
            f"Use {', '.join('{' + name + '}' for name in SUPPORTED_PLACEHOLDERS)}.",
        ) from error


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {value!r}") from error
