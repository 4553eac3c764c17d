"""CLI for fencediv - fenced div regions in markdown documents."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.model import Range
from .core.parser import parse_fenced_divs, split_lines
from .runtime import Runtime, build_runtime
from .serialize import describe, div_to_dict, info_to_dict
from .settings import StylingRule


def _read_document(path: str) -> str:
    doc = Path(path)
    if not doc.exists():
        raise FileNotFoundError(f"Document not found: {doc}")
    return doc.read_text(encoding="utf-8")


def _parse_selection(args: argparse.Namespace) -> list[Range]:
    """Build selection ranges from --cursor / --selection, caret at 0 by default."""
    ranges = [Range.caret(pos) for pos in args.cursor or []]
    for spec in args.selection or []:
        a, sep, b = spec.partition(":")
        if not sep:
            raise ValueError(f"Selection must look like FROM:TO, got {spec!r}")
        ranges.append(Range(int(a), int(b)))
    return ranges or [Range(0, 0)]


def cmd_parse(args: argparse.Namespace, rt: Runtime) -> int:
    """Print the full region tree of a document."""
    text = _read_document(args.file)
    infos = list(parse_fenced_divs(split_lines(text)))

    if args.json:
        print(json.dumps([info_to_dict(info) for info in infos], indent=2))
        return 0

    def show(info: Any, depth: int) -> None:
        label = info.bare_class_name or info.fenced_attrs or ""
        print(f"{'  ' * depth}{info.from_}-{info.to} (text at {info.text_start_pos}) {label}".rstrip())
        for child in info.content:
            if not isinstance(child, str):
                show(child, depth + 1)

    for info in infos:
        show(info, 0)
    if not args.quiet:
        print(f"{len(infos)} top-level region(s)")
    return 0


def cmd_render(args: argparse.Namespace, rt: Runtime) -> int:
    """Render the divs the selection does not touch."""
    text = _read_document(args.file)
    session = rt.open_session(text, _parse_selection(args))

    if args.json:
        output = [
            {"div": div_to_dict(d.div), "html": d.html} for d in session.decorations
        ]
        print(json.dumps(output, indent=2))
        return 0

    for decoration in session.decorations:
        if not args.quiet:
            print(f"<!-- {describe(decoration.div)} -->")
        print(decoration.html)
    return 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch a document and report region changes."""
    from .watch import watch_document

    doc = Path(args.file)
    session = rt.open_session(_read_document(args.file))
    debounce_ms = args.debounce_ms if args.debounce_ms is not None else rt.config.watch.debounce_ms

    return watch_document(
        doc_path=doc,
        session=session,
        debounce_ms=debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_rules_ls(args: argparse.Namespace, rt: Runtime) -> int:
    """List styling rules."""
    if args.json:
        print(json.dumps(rt.settings.to_serializable(), indent=2))
        return 0
    if rt.settings.global_styling and not args.quiet:
        print("global:")
        for line in rt.settings.global_styling.splitlines():
            print(f"  {line}")
    for rule_id, rule in rt.settings.special_styling.items():
        print(f"{rule_id}\t{rule}\t{' '.join(rule.style.split())}")
    return 0


def cmd_rules_add(args: argparse.Namespace, rt: Runtime) -> int:
    """Add a styling rule."""
    rule = StylingRule(args.type, args.name, args.style)
    if rule.is_empty():
        print("Error: rule name and style must be non-empty", file=sys.stderr)
        return 1
    rule_id = rt.settings.add_rule(rule, rt.idgen)
    rt.save_settings()
    if not args.quiet:
        print(f"Styling saved for \"{rule}\"")
    print(rule_id)
    return 0


def cmd_rules_rm(args: argparse.Namespace, rt: Runtime) -> int:
    """Delete a styling rule."""
    rule = rt.settings.special_styling.get(args.rule_id)
    if rule is None or not rt.settings.delete_rule(args.rule_id):
        print(f"Error: Rule {args.rule_id} not found", file=sys.stderr)
        return 1
    rt.save_settings()
    if not args.quiet:
        print(f"Styling deleted for \"{rule}\"")
    return 0


def cmd_style_set(args: argparse.Namespace, rt: Runtime) -> int:
    """Set the global style applied to every div."""
    rt.settings.global_styling = args.style
    rt.save_settings()
    if not args.quiet:
        print("Global styling setting saved")
    return 0


def cmd_style_clear(args: argparse.Namespace, rt: Runtime) -> int:
    """Clear the global style."""
    rt.settings.global_styling = ""
    rt.save_settings()
    if not args.quiet:
        print("Global styling cleared")
    return 0


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = args.token
    token = None

    if token_arg == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.serve.host
    port = args.port or rt.config.serve.port
    print(f"Starting server on http://{host}:{port}")

    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fencediv", description="Fenced div regions in markdown documents"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"fencediv {__version__} (python {platform.python_version()}, platform {sys.platform})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/fencediv.toml, next to the document)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to style settings YAML (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # parse command
    parser_parse = subparsers.add_parser("parse", help="Print fenced div regions of a document")
    parser_parse.add_argument("file", help="Markdown document")

    # render command
    parser_render = subparsers.add_parser("render", help="Render divs outside the selection as HTML")
    parser_render.add_argument("file", help="Markdown document")
    parser_render.add_argument(
        "--cursor", type=int, action="append", help="Caret offset (repeatable)"
    )
    parser_render.add_argument(
        "--selection", action="append", help="Selection range FROM:TO (repeatable)"
    )

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Watch a document for changes")
    parser_watch.add_argument("file", help="Markdown document")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, 150)"
    )

    # rules command
    parser_rules = subparsers.add_parser("rules", help="Manage styling rules")
    rules_sub = parser_rules.add_subparsers(dest="rules_cmd", required=True)
    rules_sub.add_parser("ls", help="List styling rules")
    parser_rules_add = rules_sub.add_parser("add", help="Add a styling rule")
    parser_rules_add.add_argument("type", choices=["class", "id"], help="Match on class or id")
    parser_rules_add.add_argument("name", help="Class or id name")
    parser_rules_add.add_argument("style", help="Style text")
    parser_rules_rm = rules_sub.add_parser("rm", help="Delete a styling rule")
    parser_rules_rm.add_argument("rule_id", help="Rule ID")

    # style command
    parser_style = subparsers.add_parser("style", help="Manage the global style")
    style_sub = parser_style.add_subparsers(dest="style_cmd", required=True)
    parser_style_set = style_sub.add_parser("set", help="Set the global style")
    parser_style_set.add_argument("style", help="Style text")
    style_sub.add_parser("clear", help="Clear the global style")

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default=None, help="Host to bind to (default: 127.0.0.1)")
    parser_serve.add_argument("--port", type=int, default=None, help="Port to bind to (default: 8766)")
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    return parser


def main() -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    doc_path = Path(args.file) if getattr(args, "file", None) else None

    handlers = {
        "parse": cmd_parse,
        "render": cmd_render,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }

    if args.cmd == "rules":
        rules_handlers = {
            "ls": cmd_rules_ls,
            "add": cmd_rules_add,
            "rm": cmd_rules_rm,
        }
        handler = rules_handlers.get(args.rules_cmd)
    elif args.cmd == "style":
        style_handlers = {
            "set": cmd_style_set,
            "clear": cmd_style_clear,
        }
        handler = style_handlers.get(args.style_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            rt = build_runtime(
                settings_path=args.settings,
                config_path=args.config,
                doc_path=doc_path,
            )
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
