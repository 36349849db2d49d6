"""Command-line interface for the Inkwell reader core.

WHY: Highlighting and focus pacing are easiest to try, debug and script
from a terminal: annotate a chapter with a term list, see how it is
segmented, watch focus playback at a given speed, or ask Gemini to
classify, explain or import something.

HOW: argparse subcommands, one handler each. Pure core commands run
synchronously; collaborator commands and focus playback run on
asyncio.run(). Status messages go to stderr, results to stdout.

RULES:
- A FILE argument of "-" reads stdin
- annotate takes term lists from a JSON file (nouns/verbs/adjectives or
  properNouns/topicHotWords keys, as returned by the classifier)
- focus prints each sentence as it becomes active and exits when
  playback auto-stops on the last sentence
- Collaborator failures print a message and exit 1; analyze degrades to
  plain text like the reader does
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from inkwell.api.client import GeminiClient, InkwellAPIError
from inkwell.api.models import AnalyticalAnalysis, CreativeAnalysis
from inkwell.config import (
    DEFAULT_ADJECTIVE_COLOR,
    DEFAULT_NOUN_COLOR,
    DEFAULT_RATE,
    DEFAULT_VERB_COLOR,
    document_mime_type,
)
from inkwell.core.annotator import annotate_analytical, annotate_creative
from inkwell.core.models import AppMode, CategoryConfig, HighlightConfig, PlaybackState
from inkwell.core.playback import PlaybackScheduler
from inkwell.core.segmenter import segment
from inkwell.session import ReaderSession

_MODES = {
    "creative": AppMode.NOVEL,
    "novel": AppMode.NOVEL,
    "analytical": AppMode.PAPER,
    "paper": AppMode.PAPER,
    "standard": AppMode.STANDARD,
}


def _status(msg: str) -> None:
    """Print a status message to stderr (stdout stays pipeable)."""
    print(msg, file=sys.stderr, flush=True)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _load_terms(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Terms file must contain a JSON object")
    return data


def _highlight_config(args: argparse.Namespace) -> HighlightConfig:
    enabled = {c.strip() for c in args.categories.split(",") if c.strip()}
    return HighlightConfig(
        nouns=CategoryConfig("noun" in enabled, args.noun_color),
        verbs=CategoryConfig("verb" in enabled, args.verb_color),
        adjectives=CategoryConfig("adj" in enabled, args.adjective_color),
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def cmd_annotate(args: argparse.Namespace) -> int:
    text = _read_text(args.file)
    try:
        terms = _load_terms(args.terms)
    except ValueError as e:
        _status("Error: invalid terms file: {}".format(e))
        return 1
    if _MODES[args.mode] == AppMode.PAPER:
        analysis = AnalyticalAnalysis.from_dict(terms)
        html = annotate_analytical(text, analysis.proper_nouns, analysis.topic_hot_words)
    else:
        analysis = CreativeAnalysis.from_dict(terms)
        html = annotate_creative(
            text, analysis.nouns, analysis.verbs, analysis.adjectives,
            _highlight_config(args),
        )
    print(html)
    return 0


def cmd_segment(args: argparse.Namespace) -> int:
    units = segment(_read_text(args.file))
    for index, unit in enumerate(units):
        print("{:>4}  {}".format(index, unit.strip()))
    _status("{} unit(s)".format(len(units)))
    return 0


async def _play(text: str, rate: float) -> List[int]:
    """Run focus playback to completion, printing each active unit."""
    loop = asyncio.get_running_loop()
    finished = loop.create_future()
    scheduler = PlaybackScheduler(text, rate=rate)
    shown: List[int] = []

    def on_state(state: PlaybackState) -> None:
        if not shown or shown[-1] != state.index:
            shown.append(state.index)
            print(scheduler.current_unit.strip(), flush=True)
        if not state.playing and not finished.done():
            finished.set_result(None)

    scheduler.subscribe(on_state)
    if not scheduler.units:
        return shown
    try:
        scheduler.play()
        await finished
    finally:
        scheduler.close()
    return shown


def cmd_focus(args: argparse.Namespace) -> int:
    text = _read_text(args.file)
    try:
        shown = asyncio.run(_play(text, args.rate))
    except KeyboardInterrupt:
        _status("\nStopped.")
        return 130
    _status("Played {} unit(s)".format(len(shown)))
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    session = ReaderSession(
        content=_read_text(args.file),
        mode=_MODES[args.mode],
        highlight_config=_highlight_config(args),
    )
    _status("Analyzing in {} mode...".format(session.mode.value))
    view = asyncio.run(session.analyze())
    if view.degraded:
        _status("Analysis failed; showing plain text.")
    if view.summary:
        _status("Summary: {}".format(view.summary))
    if view.keywords:
        _status("Keywords: {}".format(", ".join(view.keywords)))
    print(view.html)
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    context = _read_text(args.context_file) if args.context_file else ""
    session = ReaderSession(content=context)
    print(asyncio.run(session.explain(args.term)))
    return 0


async def _import(path: Path, mime_type: str) -> Dict[str, str]:
    async with GeminiClient() as client:
        document = await client.parse_document(path.read_bytes(), mime_type)
    return {"title": document.title, "author": document.author, "content": document.content}


def cmd_import(args: argparse.Namespace) -> int:
    path = Path(args.file)
    mime_type = document_mime_type(path.name)
    if mime_type is None:
        _status("Error: unsupported file type '{}'".format(path.suffix))
        return 1
    _status("Parsing {}...".format(path.name))
    try:
        result = asyncio.run(_import(path, mime_type))
    except (InkwellAPIError, ValueError) as e:
        _status("Error: {}".format(e))
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from inkwell.server.app import run_api
    run_api(host=args.host, port=args.port)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_highlight_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--categories",
        default="noun",
        help="Comma-separated creative categories to highlight: noun, verb, adj "
             "(default: %(default)s).",
    )
    parser.add_argument("--noun-color", default=DEFAULT_NOUN_COLOR)
    parser.add_argument("--verb-color", default=DEFAULT_VERB_COLOR)
    parser.add_argument("--adjective-color", default=DEFAULT_ADJECTIVE_COLOR)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can parse argument lists without running anything.
    """
    parser = argparse.ArgumentParser(
        prog="inkwell",
        description="Highlight terms, segment sentences and pace focus reading.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("annotate", help="Annotate text with a term list.")
    p.add_argument("file", help="Text file, or - for stdin.")
    p.add_argument("--mode", choices=sorted(_MODES), default="creative")
    p.add_argument("--terms", help="JSON file with classifier term lists.")
    _add_highlight_options(p)
    p.set_defaults(handler=cmd_annotate)

    p = sub.add_parser("segment", help="Print sentence units.")
    p.add_argument("file", help="Text file, or - for stdin.")
    p.set_defaults(handler=cmd_segment)

    p = sub.add_parser("focus", help="Play sentences at a reading speed.")
    p.add_argument("file", help="Text file, or - for stdin.")
    p.add_argument(
        "--rate",
        type=float,
        default=DEFAULT_RATE,
        help="Characters per second, clamped to 2–15 (default: %(default)s).",
    )
    p.set_defaults(handler=cmd_focus)

    p = sub.add_parser("analyze", help="Classify text with Gemini and annotate it.")
    p.add_argument("file", help="Text file, or - for stdin.")
    p.add_argument("--mode", choices=sorted(_MODES), default="creative")
    _add_highlight_options(p)
    p.set_defaults(handler=cmd_analyze)

    p = sub.add_parser("explain", help="Explain a term with Gemini.")
    p.add_argument("term")
    p.add_argument("--context-file", help="File whose start is used as context.")
    p.set_defaults(handler=cmd_explain)

    p = sub.add_parser("import", help="Extract title, author and text from a document.")
    p.add_argument("file")
    p.set_defaults(handler=cmd_import)

    p = sub.add_parser("serve", help="Run the HTTP API.")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m inkwell`` and the inkwell console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    sys.exit(args.handler(args))


if __name__ == "__main__":
    main()
