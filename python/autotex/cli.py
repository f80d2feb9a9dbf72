import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from autotex import __version__
from autotex.config import get_settings
from autotex.detector import DraftDetector
from autotex.document import TextDocument
from autotex.report import highlight_drafts, hover_message, region_summary
from autotex.scoring import score_text


def _configure_logging(level_name: str):
    # stdout carries results; every log line goes to stderr.
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(stream=sys.stderr, level=level, force=True)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_text(path: Path) -> str:
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _load_detector(args) -> tuple:
    text = _read_text(args.input)
    document = TextDocument(text, uri=args.input.resolve().as_uri())

    detector = DraftDetector()
    baseline: Optional[Path] = getattr(args, "baseline", None)
    if baseline is not None:
        detector.update_saved_state(document.uri, _read_text(baseline))
    return detector, document


def _flags(args, settings):
    use_automatic = settings.automatic_detection and not args.no_auto
    use_manual = settings.manual_blocks and not args.no_manual
    return use_automatic, use_manual


def handle_detect(args):
    settings = get_settings()
    detector, document = _load_detector(args)
    use_automatic, use_manual = _flags(args, settings)

    if args.actionable:
        regions = detector.actionable_regions(document, use_automatic, use_manual)
    else:
        regions = detector.detect_draft_regions(document, use_automatic, use_manual)

    if args.json:
        print(json.dumps([region_summary(r) for r in regions], indent=2))
        return

    print(f"Found {len(regions)} draft region(s):", file=sys.stderr)
    for region in regions:
        start, end = region.range.start, region.range.end
        print(f"[{region.type.value}] lines {start.line + 1}-{end.line + 1}")
        print(hover_message(region, settings))
        print()


def handle_score(args):
    if args.file is not None:
        text = _read_text(args.file)
    elif args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read()

    result = score_text(text)
    print(json.dumps(result.model_dump(), indent=2))


def handle_highlight(args):
    settings = get_settings()
    detector, document = _load_detector(args)
    use_automatic, use_manual = _flags(args, settings)
    regions = detector.detect_draft_regions(document, use_automatic, use_manual)

    result = highlight_drafts(document, regions, include_score=not args.no_score)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
        print(f"✅ Saved highlighted document to {args.output}", file=sys.stderr)
        print(f"Stats: {len(regions)} regions highlighted.", file=sys.stderr)
    else:
        print(result)


def _add_detection_flags(parser: argparse.ArgumentParser):
    parser.add_argument("input", type=Path, help="Document to scan")
    parser.add_argument("-b", "--baseline", type=Path, help="Last-saved version of the document (enables diff mode)")
    parser.add_argument("--no-auto", action="store_true", help="Disable automatic detection")
    parser.add_argument("--no-manual", action="store_true", help="Disable ```autotex block extraction")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="autotex", description="AutoTeX: rough-draft detection for LaTeX documents")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Log level (default: AUTOTEX_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_detect = subparsers.add_parser("detect", help="List draft regions in a document")
    _add_detection_flags(p_detect)
    p_detect.add_argument("--json", action="store_true", help="Output regions as JSON")
    p_detect.add_argument("--actionable", action="store_true", help="Only regions ready for rewriting")
    p_detect.set_defaults(func=handle_detect)

    p_score = subparsers.add_parser("score", help="Score a text fragment")
    p_score.add_argument("text", nargs="?", help="Text to score (default: stdin)")
    p_score.add_argument("-f", "--file", type=Path, help="Read the fragment from a file")
    p_score.set_defaults(func=handle_score)

    p_highlight = subparsers.add_parser("highlight", help="Mark draft regions with CriticMarkup {==...==}")
    _add_detection_flags(p_highlight)
    p_highlight.add_argument("-o", "--output", type=Path, help="Output path (default: stdout)")
    p_highlight.add_argument("--no-score", action="store_true", help="Omit the {>>type NN%%<<} comments")
    p_highlight.set_defaults(func=handle_highlight)

    args = parser.parse_args(argv)
    _configure_logging(args.log_level or get_settings().log_level)
    args.func(args)


if __name__ == "__main__":
    main()
