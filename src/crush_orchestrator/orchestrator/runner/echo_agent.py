"""Local demo runner for CLI runner integration tests."""

from __future__ import annotations

import argparse
import json
import sys
import time

MODES = ("echo", "verbatim", "json", "fail", "sleep", "empty", "garbage")


def main(argv: list[str] | None = None) -> int:
    """Mimic `crush run --model <model>` with deterministic output."""

    parser = argparse.ArgumentParser(prog="echo-agent")
    parser.add_argument("--version", action="version", version="echo-agent 1.0")
    subparsers = parser.add_subparsers(dest="command", required=True)
    run_parser = subparsers.add_parser("run")
    run_parser.add_argument("--model", required=True)
    run_parser.add_argument("--mode", choices=MODES, default="echo")
    run_parser.add_argument("--max-tokens", type=int, default=None)
    run_parser.add_argument("--exit-code", type=int, default=1)
    run_parser.add_argument("--stderr-message", default="echo agent failure")
    run_parser.add_argument("--sleep-seconds", type=float, default=0.0)
    run_parser.add_argument("prompt", nargs="?", default=None)
    args = parser.parse_args(argv)

    prompt = args.prompt if args.prompt is not None else sys.stdin.read()
    text = f"[{args.model}] {prompt.strip()}"

    if args.mode == "fail":
        sys.stderr.write(args.stderr_message + "\n")
        return args.exit_code
    if args.mode == "sleep":
        time.sleep(args.sleep_seconds)
    if args.mode == "empty":
        return 0
    if args.mode == "verbatim":
        sys.stdout.write(prompt)
        return 0
    if args.mode == "garbage":
        sys.stdout.buffer.write(b"\xff\xfe\xfa")
        return 0
    if args.mode == "json":
        sys.stdout.write(
            json.dumps(
                {
                    "output": text,
                    "model": args.model,
                    "usage": {
                        "input_tokens": len(prompt.split()),
                        "output_tokens": len(text.split()),
                    },
                },
            ),
        )
        return 0

    sys.stdout.write(text + "\n")
    sys.stderr.write(f"input tokens: {len(prompt.split())}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
