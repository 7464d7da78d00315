"""Usage extraction helpers for runner output streams."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass

USAGE_PARSER_VERSION = "v1"
CHARS_PER_TOKEN = 4

_INPUT_TOKENS = re.compile(r"(?:input|prompt)[_ ]tokens?\s*[:=]\s*([\d,]+)", re.IGNORECASE)
_OUTPUT_TOKENS = re.compile(r"(?:output|completion)[_ ]tokens?\s*[:=]\s*([\d,]+)", re.IGNORECASE)

_STRUCTURED_INPUT_KEYS = ("input_tokens", "prompt_tokens", "tokens_in")
_STRUCTURED_OUTPUT_KEYS = ("output_tokens", "completion_tokens", "tokens_out")


@dataclass(slots=True)
class UsageExtraction:
    """Token usage resolved for one invocation."""

    tokens_in: int
    tokens_out: int
    usage_status: str
    usage_source: str
    parser_version: str = USAGE_PARSER_VERSION


def estimate_tokens(text: str) -> int:
    """Approximate token count from character length."""

    return math.ceil(len(text) / CHARS_PER_TOKEN)


def resolve_usage(
    *,
    prompt: str,
    output_text: str,
    payload: Mapping[str, object] | None,
    stderr: str,
) -> UsageExtraction:
    """Resolve token counts from structured payload, textual markers or estimation."""

    tokens_in: int | None = None
    tokens_out: int | None = None
    sources: list[str] = []

    if payload is not None:
        structured_in, structured_out = _extract_structured(payload)
        if structured_in is not None or structured_out is not None:
            sources.append("runner_json")
        tokens_in, tokens_out = structured_in, structured_out

    if tokens_in is None or tokens_out is None:
        textual_in = _extract_int(_INPUT_TOKENS, stderr)
        textual_out = _extract_int(_OUTPUT_TOKENS, stderr)
        if (tokens_in is None and textual_in is not None) or (
            tokens_out is None and textual_out is not None
        ):
            sources.append("runner_stderr")
        tokens_in = tokens_in if tokens_in is not None else textual_in
        tokens_out = tokens_out if tokens_out is not None else textual_out

    estimated = tokens_in is None or tokens_out is None
    if tokens_in is None:
        tokens_in = estimate_tokens(prompt)
    if tokens_out is None:
        tokens_out = estimate_tokens(output_text)

    if not sources:
        status, source = "estimated", "char_length"
    else:
        status = "estimated" if estimated else "reported"
        source = "+".join(sources)
    return UsageExtraction(
        tokens_in=tokens_in,
        tokens_out=tokens_out,
        usage_status=status,
        usage_source=source,
    )


def _extract_structured(payload: Mapping[str, object]) -> tuple[int | None, int | None]:
    containers: list[Mapping[str, object]] = []
    usage = payload.get("usage")
    if isinstance(usage, Mapping):
        containers.append(usage)
    containers.append(payload)

    tokens_in: int | None = None
    tokens_out: int | None = None
    for container in containers:
        if tokens_in is None:
            tokens_in = _first_int(container, _STRUCTURED_INPUT_KEYS)
        if tokens_out is None:
            tokens_out = _first_int(container, _STRUCTURED_OUTPUT_KEYS)
    return tokens_in, tokens_out


def _first_int(container: Mapping[str, object], keys: tuple[str, ...]) -> int | None:
    for key in keys:
        value = container.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value >= 0:
            return value
    return None


def _extract_int(pattern: re.Pattern[str], text: str) -> int | None:
    match = pattern.search(text)
    if match is None:
        return None
    raw = match.group(1).replace(",", "").strip()
    if not raw.isdigit():
        return None
    return int(raw)
