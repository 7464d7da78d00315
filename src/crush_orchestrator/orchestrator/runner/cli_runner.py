"""Subprocess-based runner for the external model CLI."""

from __future__ import annotations

import asyncio
import logging
import shlex
import time

from crush_orchestrator.config import RunnerSettings
from crush_orchestrator.orchestrator.failure_classifier import classify_runner_failure
from crush_orchestrator.orchestrator.models import FailureClass
from crush_orchestrator.orchestrator.output_parser import OutputDecodeError, decode_runner_stdout
from crush_orchestrator.orchestrator.pricing import PricingTable
from crush_orchestrator.orchestrator.runner.base import Invocation, RunnerError, RunnerResult
from crush_orchestrator.orchestrator.usage import resolve_usage

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124


class CliRunner:
    """Execute one invocation per spawned runner process."""

    def __init__(
        self,
        *,
        settings: RunnerSettings | None = None,
        pricing: PricingTable | None = None,
    ) -> None:
        self.settings = settings or RunnerSettings()
        self.pricing = pricing or PricingTable.with_overrides(self.settings.pricing_overrides)

    async def run(self, invocation: Invocation) -> RunnerResult:
        argv, prompt_in_argv = build_run_args(
            command_template=self.settings.command_template,
            binary=self.settings.binary_path,
            model=invocation.model_id,
            max_tokens=invocation.max_tokens,
            prompt=invocation.prompt,
        )
        stdin_payload = b"" if prompt_in_argv else invocation.prompt.encode("utf-8")

        logger.debug(
            "Runner start: model=%s max_tokens=%d prompt_chars=%d",
            invocation.model_id,
            invocation.max_tokens,
            len(invocation.prompt),
        )
        start_monotonic = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise RunnerError(
                f"Runner command not found: {argv[0]}",
                failure_class=FailureClass.SPAWN_FAILED,
            ) from error
        except OSError as error:
            raise RunnerError(
                f"Runner failed to start: {error}",
                failure_class=FailureClass.SPAWN_FAILED,
                transient=True,
            ) from error

        try:
            stdout_raw, stderr_raw = await asyncio.wait_for(
                process.communicate(stdin_payload),
                timeout=self.settings.timeout_seconds,
            )
        except asyncio.TimeoutError as error:
            await _terminate_process(process, grace_seconds=self.settings.terminate_grace_seconds)
            logger.warning(
                "Runner timed out: model=%s timeout=%.1fs",
                invocation.model_id,
                self.settings.timeout_seconds,
            )
            raise RunnerError(
                f"Runner timed out after {self.settings.timeout_seconds:.1f}s "
                f"for model={invocation.model_id}",
                failure_class=FailureClass.TIMEOUT,
                transient=True,
                exit_code=TIMEOUT_EXIT_CODE,
            ) from error
        except asyncio.CancelledError:
            await _terminate_process(process, grace_seconds=self.settings.terminate_grace_seconds)
            logger.warning("Runner canceled: model=%s", invocation.model_id)
            raise
        elapsed = time.monotonic() - start_monotonic

        try:
            stdout = stdout_raw.decode("utf-8")
            stderr = stderr_raw.decode("utf-8", errors="replace")
        except UnicodeDecodeError as error:
            raise RunnerError(
                f"Runner output is not valid UTF-8 for model={invocation.model_id}",
                failure_class=FailureClass.OUTPUT_INVALID,
                exit_code=process.returncode,
            ) from error

        if process.returncode != 0:
            classification = classify_runner_failure(
                exit_code=process.returncode,
                stdout=stdout,
                stderr=stderr,
            )
            logger.warning(
                "Runner failed: model=%s exit_code=%s class=%s rule=%s",
                invocation.model_id,
                process.returncode,
                classification.failure_class.value,
                classification.matched_rule,
            )
            raise RunnerError(
                f"Runner exited with code {process.returncode}: {_truncate(stderr)}",
                failure_class=classification.failure_class,
                transient=classification.transient,
                exit_code=process.returncode,
                stderr_preview=_truncate(stderr),
            )

        try:
            decoded = decode_runner_stdout(stdout, output_format=self.settings.output_format)
        except OutputDecodeError as error:
            raise RunnerError(
                f"Runner output could not be decoded for model={invocation.model_id}: {error}",
                failure_class=FailureClass.OUTPUT_INVALID,
                exit_code=process.returncode,
                stderr_preview=_truncate(stderr),
            ) from error

        usage = resolve_usage(
            prompt=invocation.prompt,
            output_text=decoded.text,
            payload=decoded.payload,
            stderr=stderr,
        )
        cost = self.pricing.cost_usd(
            model_id=invocation.model_id,
            tokens_in=usage.tokens_in,
            tokens_out=usage.tokens_out,
        )
        logger.info(
            "Runner completed: model=%s elapsed=%.2fs tokens_in=%d tokens_out=%d "
            "usage=%s cost=%.6f",
            invocation.model_id,
            elapsed,
            usage.tokens_in,
            usage.tokens_out,
            usage.usage_status,
            cost,
        )
        return RunnerResult(
            model_id=invocation.model_id,
            output_text=decoded.text,
            tokens_in=usage.tokens_in,
            tokens_out=usage.tokens_out,
            cost=cost,
            wall_time_seconds=elapsed,
        )


def build_run_args(
    *,
    command_template: str,
    binary: str,
    model: str,
    max_tokens: int,
    prompt: str,
) -> tuple[list[str], bool]:
    """Render command template into argv; report whether prompt went into argv."""

    stripped = command_template.strip()
    if not stripped:
        raise RunnerError(
            "Runner command template is empty.",
            failure_class=FailureClass.SPAWN_FAILED,
        )
    prompt_in_argv = "{prompt}" in stripped
    try:
        rendered = stripped.format(
            binary=shlex.quote(binary),
            model=shlex.quote(model),
            max_tokens=str(max_tokens),
            prompt=shlex.quote(prompt),
        )
    except (KeyError, IndexError) as error:
        raise RunnerError(
            f"Unsupported command template placeholder: {error}",
            failure_class=FailureClass.SPAWN_FAILED,
        ) from error

    argv = shlex.split(rendered)
    if not argv:
        raise RunnerError(
            "Runner command template rendered empty command.",
            failure_class=FailureClass.SPAWN_FAILED,
        )
    return argv, prompt_in_argv


async def _terminate_process(
    process: asyncio.subprocess.Process,
    *,
    grace_seconds: float,
) -> None:
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=grace_seconds)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()


def _truncate(value: str, *, limit: int = 240) -> str:
    compact = value.strip().replace("\n", " ")
    if len(compact) <= limit:
        return compact
    return compact[:limit] + "..."
