"""Smoke check for the external runner: locate, probe, then one real invocation."""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
from dataclasses import dataclass, replace

from crush_orchestrator.config import RunnerSettings
from crush_orchestrator.orchestrator.runner.base import Invocation, RunnerError
from crush_orchestrator.orchestrator.runner.cli_runner import CliRunner

logger = logging.getLogger(__name__)

SMOKE_MAX_TOKENS = 200
PROBE_FLAGS = ("--version", "--help")


@dataclass(slots=True)
class RunnerSmokeResult:
    """Stages reached by one smoke check; later stages stay False on early exit."""

    executable: str
    model: str
    available: bool = False
    probe_ok: bool = False
    run_ok: bool = False
    skipped_run: bool = True
    error: str | None = None
    output_preview: str = ""
    cost: float | None = None

    @property
    def success(self) -> bool:
        return self.available and self.probe_ok and self.run_ok


def run_smoke_check(
    *,
    settings: RunnerSettings,
    model: str,
    prompt: str,
    expect_substring: str,
) -> RunnerSmokeResult:
    """Probe the runner executable, then run one synthetic invocation."""

    result = RunnerSmokeResult(executable=settings.binary_path, model=model)
    resolved = shutil.which(settings.binary_path)
    if resolved is None:
        result.error = f"Executable not found in PATH: {settings.binary_path}"
        return result
    result.available = True

    probe_error = _probe(resolved, timeout_seconds=settings.timeout_seconds)
    if probe_error is not None:
        result.error = f"{probe_error} (resolved executable: {resolved})"
        return result
    result.probe_ok = True

    result.skipped_run = False
    runner = CliRunner(settings=replace(settings, binary_path=resolved))
    invocation = Invocation(model_id=model, prompt=prompt, max_tokens=SMOKE_MAX_TOKENS)
    try:
        outcome = asyncio.run(runner.run(invocation))
    except RunnerError as error:
        logger.warning("Smoke invocation failed: %s", error)
        result.error = f"{error} (failure_class={error.failure_class.value})"
        result.output_preview = error.stderr_preview
        return result

    result.output_preview = _preview(outcome.output_text)
    result.cost = outcome.cost
    result.run_ok = expect_substring in outcome.output_text
    if not result.run_ok:
        result.error = f"Synthetic output missing expected substring: {expect_substring!r}"
    return result


def _probe(executable: str, *, timeout_seconds: float) -> str | None:
    """Return None when any probe flag exits cleanly, else the last problem."""

    problem = "Probe command failed."
    for flag in PROBE_FLAGS:
        try:
            completed = subprocess.run(  # noqa: S603
                [executable, flag],
                check=False,
                capture_output=True,
                timeout=timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            problem = f"Probe `{flag}` timed out after {timeout_seconds:g}s."
            continue
        except OSError as error:
            return f"Probe failed to start: {error}"
        if completed.returncode == 0:
            return None
    return problem


def _preview(text: str, limit: int = 240) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else f"{flat[:limit]}..."
