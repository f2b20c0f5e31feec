#!/usr/bin/env python3
"""Replay editor steps and print tracker snapshots as JSONL.

Each step is one of:
    type:TEXT      type TEXT at the caret, one character per transaction
    backspace[:N]  delete N characters before the caret (default 1)
    move:POS       move the caret to POS
    force          enter abbreviation mode at the caret
    reset          drop the tracker (Escape)
    tab            expand the tracked abbreviation

Usage:
    python3 scripts/trace_abbreviation.py --text '<body>|</body>' 'type:ul>li*3' tab
    python3 scripts/trace_abbreviation.py --syntax css --text 'a{|}' 'type:p10' \
      --output trace.jsonl
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from emmet_assist.config import ConfigError, EmmetConfig, load_config, merge_config
from emmet_assist.document import EditorState
from emmet_assist.emmet_bridge import EmmetExpander
from emmet_assist.io_utils import dumps, save_jsonl
from emmet_assist.tracker import TrackerSession, tracker_to_dict

log = logging.getLogger("trace_abbreviation")

CARET_MARK = "|"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay typing steps and print abbreviation tracker snapshots."
    )
    parser.add_argument("steps", nargs="*", help="Steps to replay (see module docs)")
    parser.add_argument(
        "--text",
        default="",
        help=f"Initial document; '{CARET_MARK}' marks the caret (default: end of text)",
    )
    parser.add_argument("--file", type=Path, default=None, help="Read initial document from file")
    parser.add_argument("--syntax", default="html", help="Document syntax (default: html)")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--output", type=Path, default=None, help="Write JSONL here instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def initial_state(text: str, config: EmmetConfig) -> EditorState:
    caret = text.find(CARET_MARK)
    if caret == -1:
        return EditorState.create(text, config)
    return EditorState.create(text.replace(CARET_MARK, "", 1), config, caret=caret)


def run_step(session: TrackerSession, step: str) -> dict[str, object]:
    name, _, arg = step.partition(":")
    commit = None
    if name == "type":
        session.type_text(arg)
    elif name == "backspace":
        session.backspace(int(arg) if arg else 1)
    elif name == "move":
        session.move_caret(int(arg))
    elif name == "force":
        session.force()
    elif name == "reset":
        session.reset()
    elif name == "tab":
        commit = session.tab()
    else:
        raise ValueError(f"unknown step: {step!r}")

    preview = session.preview()
    return {
        "step": step,
        "text": session.state.text,
        "caret": session.state.caret,
        "tracker": tracker_to_dict(session.tracker),
        "preview": preview.text if preview is not None else None,
        "expanded": commit.insert_text if commit is not None else None,
    }


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config) if args.config is not None else EmmetConfig()
        config = merge_config(config, {"syntax": args.syntax})
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    text = args.file.read_text(encoding="utf-8") if args.file is not None else args.text
    session = TrackerSession(initial_state(text, config), EmmetExpander())

    snapshots: list[dict[str, object]] = []
    for step in args.steps:
        try:
            snapshot = run_step(session, step)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        log.debug("%s -> %s", step, snapshot["tracker"])
        snapshots.append(snapshot)

    if args.output is not None:
        save_jsonl(snapshots, args.output)
        print(f"Wrote {len(snapshots)} snapshots to {args.output}", file=sys.stderr)
    else:
        for snapshot in snapshots:
            sys.stdout.buffer.write(dumps(snapshot) + b"\n")


if __name__ == "__main__":
    main()
