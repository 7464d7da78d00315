"""Defensive decoding of runner stdout into output text.

Output formats:

- `text`: stdout is the answer, verbatim (stripped).
- `json`: stdout must be a runner envelope; a missing text field is an error.
- `auto`: stdout is decoded as an envelope only when it is a JSON object
  whose keys all belong to the envelope vocabulary and which carries a text
  field. Anything else, including a model answer that happens to be JSON,
  is returned as plain text.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
_TEXT_KEYS = ("output", "result", "text", "content")
ENVELOPE_KEYS = frozenset(
    (
        *_TEXT_KEYS,
        "usage",
        "model",
        "is_error",
        "type",
        "subtype",
        "session_id",
        "stop_reason",
        "duration_ms",
        "num_turns",
        "total_cost_usd",
        "input_tokens",
        "output_tokens",
        "prompt_tokens",
        "completion_tokens",
        "tokens_in",
        "tokens_out",
    ),
)


class OutputDecodeError(ValueError):
    """Runner stdout could not be decoded into output text."""


@dataclass(slots=True)
class DecodedOutput:
    """Output text plus the JSON envelope it came from, if any."""

    text: str
    payload: dict[str, object] | None
    parser: str


def decode_runner_stdout(stdout_text: str, *, output_format: str = "auto") -> DecodedOutput:
    """Decode runner stdout according to the configured output format."""

    text = stdout_text.strip()
    if not text:
        raise OutputDecodeError("Runner produced empty output.")
    if output_format == "text":
        return DecodedOutput(text=text, payload=None, parser="plain_text")

    payload = _parse_object(text)
    if output_format == "json":
        if payload is None:
            raise OutputDecodeError("Runner output is not a JSON object.")
        return _from_envelope(payload)

    if payload is not None and _looks_like_envelope(payload):
        return _from_envelope(payload)
    return DecodedOutput(text=text, payload=None, parser="plain_text")


def _looks_like_envelope(payload: dict[str, object]) -> bool:
    return payload.keys() <= ENVELOPE_KEYS and _envelope_text(payload) is not None


def _from_envelope(payload: dict[str, object]) -> DecodedOutput:
    output = _envelope_text(payload)
    if output is None:
        raise OutputDecodeError(
            "Runner JSON envelope has no text field "
            f"(expected one of: {', '.join(_TEXT_KEYS)}).",
        )
    if payload.get("is_error") is True:
        raise OutputDecodeError(f"Runner reported error: {output[:240]}")
    return DecodedOutput(text=output, payload=payload, parser="json_envelope")


def _parse_object(text: str) -> dict[str, object] | None:
    if text.startswith("{"):
        direct = _try_load_dict(text)
        if direct is not None:
            return direct

    fenced = _FENCED_JSON.fullmatch(text)
    if fenced is not None:
        return _try_load_dict(fenced.group(1))
    return None


def _envelope_text(payload: dict[str, object]) -> str | None:
    for key in _TEXT_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _try_load_dict(raw: str) -> dict[str, object] | None:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed
