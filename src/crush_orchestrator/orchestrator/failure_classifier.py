"""Map a failed runner process to a failure class.

Rules are evaluated in order against lower-cased stderr followed by stdout;
the first rule with a matching pattern wins. Exit codes listed in
`TRANSIENT_EXIT_CODES` (signals, EX_TEMPFAIL) are transient when no
pattern rule fired.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from crush_orchestrator.orchestrator.models import FailureClass

RUNNER_FAILURE_CLASSIFIER_VERSION = 1
TRANSIENT_EXIT_CODES: tuple[int, ...] = (75, 137, 143)


@dataclass(frozen=True, slots=True)
class ClassifierRule:
    """Named set of stderr/stdout patterns mapped to one failure class."""

    name: str
    failure_class: FailureClass
    patterns: tuple[re.Pattern[str], ...]

    def search(self, haystack: str) -> str | None:
        for pattern in self.patterns:
            match = pattern.search(haystack)
            if match is not None:
                return match.group(0)
        return None


def _rule(name: str, failure_class: FailureClass, *patterns: str) -> ClassifierRule:
    return ClassifierRule(
        name=name,
        failure_class=failure_class,
        patterns=tuple(re.compile(pattern) for pattern in patterns),
    )


RULES: tuple[ClassifierRule, ...] = (
    _rule(
        "billing_or_quota",
        FailureClass.BILLING_OR_QUOTA,
        r"\bquota\b",
        r"resource_exhausted",
        r"insufficient (?:funds|balance|credits?)",
        r"\bbilling\b",
        r"payment required",
        r"out of credits",
        r"usage limit",
    ),
    _rule(
        "access_or_auth",
        FailureClass.ACCESS_OR_AUTH,
        r"\bunauthori[sz]ed\b",
        r"\bforbidden\b",
        r"permission denied",
        r"(?:invalid|missing) api[ _-]?key",
        r"api key not (?:set|found|configured)",
        r"authentication (?:failed|required|error)",
    ),
    _rule(
        "model_not_available",
        FailureClass.MODEL_NOT_AVAILABLE,
        r"(?:unknown|unsupported|invalid) model",
        r"model (?:not found|is not available|does not exist)",
        r"no provider (?:found |configured )?for model",
    ),
    _rule(
        "rate_limit_transient",
        FailureClass.BACKEND_TRANSIENT,
        r"too many requests",
        r"rate[ _-]?limit",
        r"\b429\b",
        r"\boverloaded\b",
        r"try again later",
    ),
    _rule(
        "generic_transient",
        FailureClass.BACKEND_TRANSIENT,
        r"temporar(?:ily|y) (?:unavailable|failure)",
        r"connection (?:reset|refused)",
        r"network (?:error|is unreachable)",
        r"could not resolve host",
        r"\b50[234]\b",
    ),
)


@dataclass(slots=True)
class RunnerFailureClassification:
    failure_class: FailureClass
    matched_rule: str
    matched_pattern: str | None = None

    @property
    def transient(self) -> bool:
        return self.failure_class == FailureClass.BACKEND_TRANSIENT


def classify_runner_failure(
    *,
    exit_code: int,
    stdout: str,
    stderr: str,
    transient_exit_codes: tuple[int, ...] = TRANSIENT_EXIT_CODES,
) -> RunnerFailureClassification:
    """Classify non-zero runner exit into a failure class."""

    haystack = f"{stderr}\n{stdout}".lower()
    for rule in RULES:
        matched = rule.search(haystack)
        if matched is not None:
            return RunnerFailureClassification(rule.failure_class, rule.name, matched)

    if exit_code in transient_exit_codes:
        return RunnerFailureClassification(FailureClass.BACKEND_TRANSIENT, "transient_exit_code")
    return RunnerFailureClassification(
        FailureClass.BACKEND_NON_RETRYABLE,
        "fallback_non_retryable",
    )
