from __future__ import annotations

import dataclasses
import shutil

import allure
import pytest

from crush_orchestrator.orchestrator.smoke import run_smoke_check

pytestmark = [
    allure.epic("Runner"),
    allure.feature("Smoke Check"),
]


def test_smoke_runs_synthetic_invocation(echo_runner_settings) -> None:
    result = run_smoke_check(
        settings=echo_runner_settings,
        model="grok-3-mini",
        prompt="Reply with the single word: pong",
        expect_substring="pong",
    )

    assert result.success
    assert result.output_preview == "[grok-3-mini] Reply with the single word: pong"
    assert result.cost is not None
    assert result.cost > 0
    assert result.error is None


def test_smoke_reports_missing_expected_substring(echo_runner_settings) -> None:
    result = run_smoke_check(
        settings=echo_runner_settings,
        model="grok-3-mini",
        prompt="say something",
        expect_substring="pong",
    )

    assert result.available
    assert result.probe_ok
    assert not result.skipped_run
    assert not result.success
    assert "missing expected substring" in (result.error or "")


def test_smoke_reports_runner_failure_class(echo_runner_settings) -> None:
    settings = dataclasses.replace(
        echo_runner_settings,
        command_template=(
            f"{echo_runner_settings.command_template} --mode fail "
            "--stderr-message 'invalid api key'"
        ),
    )

    result = run_smoke_check(
        settings=settings,
        model="grok-3-mini",
        prompt="ping",
        expect_substring="pong",
    )

    assert not result.run_ok
    assert "failure_class=access_or_auth" in (result.error or "")
    assert result.output_preview == "invalid api key"


def test_smoke_skips_run_when_executable_missing(echo_runner_settings) -> None:
    settings = dataclasses.replace(echo_runner_settings, binary_path="no-such-crush-binary")

    result = run_smoke_check(
        settings=settings,
        model="grok-3-mini",
        prompt="ping",
        expect_substring="pong",
    )

    assert not result.available
    assert result.skipped_run
    assert result.error == "Executable not found in PATH: no-such-crush-binary"


@pytest.mark.skipif(shutil.which("false") is None, reason="needs a `false` executable")
def test_smoke_skips_run_when_version_check_fails(echo_runner_settings) -> None:
    settings = dataclasses.replace(echo_runner_settings, binary_path="false")

    result = run_smoke_check(
        settings=settings,
        model="grok-3-mini",
        prompt="ping",
        expect_substring="pong",
    )

    assert result.available
    assert not result.probe_ok
    assert result.skipped_run
    assert "Probe command failed." in (result.error or "")
