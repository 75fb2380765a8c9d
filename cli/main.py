"""
CLI for makeitshorter.

Commands:
  count                Count words the way the pipeline counts them.
  target               Compute the target word count for a length preference.
  enhance              Rewrite text to a target length (online or --offline).
  serve                Run the backend with Flask's dev server.

Text comes from --file, positional TEXT, or stdin.

Usage:
  python -m cli.main enhance --length concise --tone friendly --offline < draft.txt
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path

from app.config import load_settings


def _read_text(args: argparse.Namespace) -> str:
    if getattr(args, "file", None):
        return Path(args.file).read_text(encoding="utf-8")
    if getattr(args, "text", None):
        return " ".join(args.text)
    return sys.stdin.read()


def cmd_count(args: argparse.Namespace) -> int:
    from service.text_utils import count_words

    print(count_words(_read_text(args)))
    return 0


def cmd_target(args: argparse.Namespace) -> int:
    from service.targets import target_for_text

    print(target_for_text(_read_text(args), args.length, args.words))
    return 0


def cmd_enhance(args: argparse.Namespace) -> int:
    from service import make_options, make_pipeline
    from service.batching import BatchProgress
    from service.persona import Persona, Preferences

    override = {}
    if args.backend:
        override["BACKEND_URL"] = args.backend
    if args.offline:
        override["OFFLINE_MODE"] = True
    if args.fail_fast:
        override["FALLBACK_POLICY"] = "fail_fast"
    settings = load_settings(override)

    prefs = Preferences(
        persona=Persona(
            style=args.style,
            formality=args.formality,
            traits=tuple(t.strip() for t in args.traits.split(",") if t.strip()),
            context=args.context,
        ),
        tone=args.tone,
        length=args.length,
    )

    def progress(p: BatchProgress) -> None:
        print(f"Processing batch {p.index} of {p.total}...", file=sys.stderr)

    pipeline = make_pipeline(settings, seed=args.seed)
    pipeline.batcher.on_progress = progress
    out = pipeline.run(
        _read_text(args),
        prefs,
        make_options(settings),
        custom_target=args.words,
        input_type=args.type,
    )
    if not out.ok:
        print(f"ERROR: {out.error}", file=sys.stderr)
        return 1
    if out.warning:
        print(out.warning, file=sys.stderr)
    if out.subject is not None:
        print(f"Subject: {out.subject}\n")
    print(out.body)
    print(f"\n[{out.word_count} words, target {out.target_words}, via {out.source}]", file=sys.stderr)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from app import create_app

    app = create_app()
    port = args.port or app.config["SETTINGS"].PORT
    app.run(host=args.host, port=port)
    return 0


def _add_text_args(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("text", nargs="*", help="Text to process (default: stdin)")
    sp.add_argument("--file", help="Read text from a file")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="makeitshorter",
        description="Rewrite text to an exact word count"
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("count", help="Count words")
    _add_text_args(sp)
    sp.set_defaults(func=cmd_count)

    sp = sub.add_parser("target", help="Compute target word count")
    _add_text_args(sp)
    sp.add_argument("--length", default="balanced", choices=["concise", "balanced", "detailed"])
    sp.add_argument("--words", type=int, help="Explicit target (overrides --length)")
    sp.set_defaults(func=cmd_target)

    sp = sub.add_parser("enhance", help="Rewrite text to a target length")
    _add_text_args(sp)
    sp.add_argument("--length", default="balanced", choices=["concise", "balanced", "detailed"])
    sp.add_argument("--words", type=int, help="Explicit target (overrides --length)")
    sp.add_argument("--tone", default="professional")
    sp.add_argument("--type", default="email", choices=["email", "generic"])
    sp.add_argument("--style", default="gen-z")
    sp.add_argument("--formality", default="balanced")
    sp.add_argument("--traits", default="Tech-savvy,Concise")
    sp.add_argument("--context", default="Tech Company")
    sp.add_argument("--backend", help="Backend base URL (default: BACKEND_URL)")
    sp.add_argument("--offline", action="store_true", help="Use the offline generator only")
    sp.add_argument("--fail-fast", action="store_true", help="Report transport failures instead of degrading")
    sp.add_argument("--seed", type=int, help="Seed for the offline generator and padding")
    sp.set_defaults(func=cmd_enhance)

    sp = sub.add_parser("serve", help="Run the backend (dev server)")
    sp.add_argument("--host", default="0.0.0.0")
    sp.add_argument("--port", type=int)
    sp.set_defaults(func=cmd_serve)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
