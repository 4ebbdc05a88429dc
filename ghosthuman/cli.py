from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from ghosthuman.core.config import get_settings
from ghosthuman.core.logging import configure_logging
from ghosthuman.schemas.humanize import HumanizeResponse, QualityMetricsSchema
from ghosthuman.services.generation import GenerationServiceError
from ghosthuman.services.humanizer import HumanizeOptions, HumanizeResult, get_humanizer_service
from ghosthuman.services.prompts import VALID_STRENGTHS, VALID_TONES
from ghosthuman.services.text_metrics import compute_quality_metrics


def _add_humanize_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--text", default=None, help="Text to humanize.")
    parser.add_argument("--input-file", default=None, help="UTF-8 text file to humanize.")
    parser.add_argument("--tone", choices=VALID_TONES, default="professional")
    parser.add_argument("--strength", choices=VALID_STRENGTHS, default="medium")
    parser.add_argument(
        "--preserve-key-points",
        action="store_true",
        help="Ask the rewrite to keep every distinct argument and conclusion.",
    )


def _add_score_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--original", default=None, help="Original text.")
    parser.add_argument("--original-file", default=None, help="File holding the original text.")
    parser.add_argument("--rewritten", default=None, help="Rewritten text.")
    parser.add_argument("--rewritten-file", default=None, help="File holding the rewritten text.")


def _add_serve_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")


def _load_text(text: str | None, path: str | None, *, label: str) -> str:
    if text and path:
        raise ValueError(f"Use either --{label} or --{label}-file, not both.")
    if path:
        text = Path(path).read_text(encoding="utf-8")
    if not text or not text.strip():
        raise ValueError(f"Provide non-empty --{label} or --{label}-file.")

    max_chars = get_settings().max_input_chars
    if len(text) > max_chars:
        raise ValueError(f"Text is too long. Maximum {max_chars:,} characters allowed.")
    return text.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghosthuman",
        description="Rewrite AI-sounding prose and score the result with local readability heuristics.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_humanize = sub.add_parser("humanize", help="Rewrite text through the generation backend and score it.")
    _add_humanize_args(p_humanize)

    p_score = sub.add_parser("score", help="Score an original/rewritten pair locally (no network).")
    _add_score_args(p_score)

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    _add_serve_args(p_serve)

    return parser


async def _run_humanize(text: str, options: HumanizeOptions) -> HumanizeResult:
    service = get_humanizer_service()
    try:
        return await service.humanize(text, options)
    finally:
        aclose = getattr(service.client, "aclose", None)
        if aclose is not None:
            await aclose()


def _humanize_from_args(args: argparse.Namespace) -> dict:
    text = _load_text(args.text, args.input_file, label="text")
    options = HumanizeOptions(tone=args.tone, strength=args.strength, preserve_key_points=args.preserve_key_points)
    result = asyncio.run(_run_humanize(text, options))
    return HumanizeResponse.from_result(result).model_dump(by_alias=True)


def _score_from_args(args: argparse.Namespace) -> dict:
    original = _load_text(args.original, args.original_file, label="original")
    rewritten = _load_text(args.rewritten, args.rewritten_file, label="rewritten")
    metrics = compute_quality_metrics(original, rewritten)
    return QualityMetricsSchema.from_metrics(metrics).model_dump(by_alias=True)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(stream=sys.stderr)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("ghosthuman.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    try:
        if args.command == "humanize":
            payload = _humanize_from_args(args)
        elif args.command == "score":
            payload = _score_from_args(args)
        else:
            raise RuntimeError(f"Unknown command: {args.command}")
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except GenerationServiceError as exc:
        hint = " (check OPENAI_API_KEY)" if exc.credentials_problem else ""
        print(f"error: generation failed{hint}: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
