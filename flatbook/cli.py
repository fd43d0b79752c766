from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import List

from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from .aggregate import DEFAULT_SCOPE
from .convert import STATUS_FAILED, Conversion, infer_kind, run_conversion


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _write_outputs(conversion: Conversion, out_dir: Path, stem: str) -> List[Path]:
    html_path = out_dir / f"{stem}.html"
    css_path = out_dir / f"{stem}.css"
    json_path = out_dir / f"{stem}.json"
    html_path.write_text(conversion.html, encoding="utf-8")
    css_path.write_text(conversion.css, encoding="utf-8")
    json_path.write_text(
        json.dumps(conversion.to_payload(), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return [html_path, css_path, json_path]


def _convert_one(input_path: Path, args: argparse.Namespace, out_dir: Path) -> int:
    try:
        kind = infer_kind(input_path.name, args.type)
    except ValueError as exc:
        sys.stderr.write(f"{input_path}: {exc}\n")
        return 2

    existing = out_dir / f"{input_path.stem}.html"
    if existing.exists() and not args.overwrite:
        sys.stderr.write(f"{existing} already exists. Use --overwrite to regenerate.\n")
        return 2

    outcome = run_conversion(input_path.read_bytes(), kind, scope=args.scope)
    if outcome.status == STATUS_FAILED or outcome.conversion is None:
        sys.stderr.write(f"{input_path}: {outcome.error}\n")
        return 2
    for warning in outcome.warnings:
        sys.stderr.write(f"{input_path}: {warning}\n")
    _write_outputs(outcome.conversion, out_dir, input_path.stem)
    return 0


def _convert(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose)
    inputs = [Path(value) for value in args.inputs]
    missing = [path for path in inputs if not path.exists()]
    if missing:
        for path in missing:
            sys.stderr.write(f"Input file not found: {path}\n")
        return 2

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    if len(inputs) == 1:
        status = _convert_one(inputs[0], args, out_dir)
        if status == 0:
            print(f"Wrote {inputs[0].stem}.html and {inputs[0].stem}.css to {out_dir}")
        return status

    failures = 0
    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
    )
    with progress:
        task = progress.add_task("Converting", total=len(inputs))
        for input_path in inputs:
            progress.update(task, description=input_path.name)
            if _convert_one(input_path, args, out_dir) != 0:
                failures += 1
            progress.advance(task, 1)

    print(f"Converted {len(inputs) - failures} of {len(inputs)} files into {out_dir}")
    return 2 if failures else 0


def _serve(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose)
    server_util = importlib.import_module("flatbook.server")
    server_util.run(host=args.host, port=args.port, scope=args.scope)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flatbook")
    subparsers = parser.add_subparsers(dest="command")

    convert = subparsers.add_parser(
        "convert", help="Flatten EPUB or Markdown files into HTML + CSS"
    )
    convert.add_argument("inputs", nargs="+", help="Input .epub or .md files")
    convert.add_argument(
        "--out",
        "--output",
        required=True,
        dest="out",
        help="Output directory",
    )
    convert.add_argument(
        "--type",
        choices=("epub", "markdown"),
        help="Input type (default: inferred from the file suffix)",
    )
    convert.add_argument(
        "--scope",
        default=DEFAULT_SCOPE,
        help=f"Container selector for scoped CSS (default: {DEFAULT_SCOPE})",
    )
    convert.add_argument(
        "--overwrite", action="store_true", help="Overwrite existing output"
    )
    convert.add_argument("--verbose", action="store_true", help="Debug logging")
    convert.set_defaults(func=_convert)

    serve = subparsers.add_parser("serve", help="Serve the converter and reader page")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=1912)
    serve.add_argument("--scope", default=DEFAULT_SCOPE)
    serve.add_argument("--verbose", action="store_true", help="Debug logging")
    serve.set_defaults(func=_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
