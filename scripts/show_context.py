#!/usr/bin/env python3
"""Print the syntax context and activation options at a document position.

Usage:
    python3 scripts/show_context.py page.html --pos 42
    python3 scripts/show_context.py --text '<div style="col">' --pos 15
    python3 scripts/show_context.py styles.scss --pos 10 --syntax scss
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from emmet_assist.activation import ActivationOptions, get_activation_context
from emmet_assist.config import ConfigError, EmmetConfig, load_config, merge_config
from emmet_assist.context import get_context, get_tag_context
from emmet_assist.context_types import context_tag_to_dict, context_to_dict
from emmet_assist.document import EditorState
from emmet_assist.io_utils import dumps

log = logging.getLogger("show_context")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show the syntax context and activation options at a position."
    )
    parser.add_argument("file", nargs="?", type=Path, default=None, help="Document to inspect")
    parser.add_argument("--text", default=None, help="Inline document text instead of a file")
    parser.add_argument(
        "--pos",
        type=int,
        default=None,
        help="Character offset to inspect (default: end of document)",
    )
    parser.add_argument("--syntax", default=None, help="Document syntax (default: from file suffix or html)")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def activation_to_dict(options: ActivationOptions | None) -> dict[str, object] | None:
    if options is None:
        return None
    return {
        "syntax": options.syntax,
        "type": options.type,
        "context": (
            {"name": options.context.name, "attributes": options.context.attributes}
            if options.context is not None
            else None
        ),
    }


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if args.text is not None:
        text = args.text
    elif args.file is not None:
        if not args.file.exists():
            print(f"Error: file not found: {args.file}", file=sys.stderr)
            sys.exit(1)
        text = args.file.read_text(encoding="utf-8")
    else:
        print("Error: pass a file or --text", file=sys.stderr)
        sys.exit(1)

    syntax = args.syntax
    if syntax is None:
        syntax = args.file.suffix.lstrip(".").lower() if args.file is not None and args.file.suffix else "html"

    try:
        config = load_config(args.config) if args.config is not None else EmmetConfig()
        config = merge_config(config, {"syntax": syntax})
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    pos = len(text) if args.pos is None else args.pos
    if not 0 <= pos <= len(text):
        print(f"Error: position {pos} is outside of document (0..{len(text)})", file=sys.stderr)
        sys.exit(1)

    state = EditorState.create(text, config, caret=pos)
    log.debug("Probing %s document of %d chars at %d", syntax, len(text), pos)
    result = {
        "pos": pos,
        "syntax": syntax,
        "context": context_to_dict(get_context(state, pos)),
        "tag": context_tag_to_dict(get_tag_context(state, pos)),
        "activation": activation_to_dict(get_activation_context(state, pos)),
    }
    sys.stdout.buffer.write(dumps(result, pretty=True))
    sys.stdout.buffer.write(b"\n")


if __name__ == "__main__":
    main()
