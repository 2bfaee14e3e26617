"""CLI for formatting KDL documents."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Sequence

from kdlkit import KdlError, KdlFormatter, KdlReader, StringStyle

DEFAULT_INPUT = Path(".")
DEFAULT_OUTPUT_DIR = Path("out/")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse KDL documents and write them back in a normalized layout.")
    parser.add_argument(
        "input",
        nargs="?",
        default=str(DEFAULT_INPUT),
        help="Path to a .kdl file or a directory of .kdl files (defaults to the current directory).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory where formatted files should be written (defaults to out/).",
    )
    parser.add_argument(
        "--indent",
        default="    ",
        help="Indentation characters to use (default: four spaces).",
    )
    parser.add_argument(
        "--preserve",
        action="store_true",
        help="Keep string styles, number spellings, semicolons and slashdashed entries as written.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report files whose formatting would change; write nothing.",
    )
    parser.add_argument(
        "--validate",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Check values annotated with reserved type names (default: enabled).",
    )
    return parser.parse_args(argv)


def collect_inputs(path: Path) -> list[Path]:
    if path.is_dir():
        files = sorted(p for p in path.glob("*.kdl") if p.is_file())
        if not files:
            raise FileNotFoundError(f"No .kdl files found in directory: {path}")
        return files
    if path.is_file():
        return [path]
    raise FileNotFoundError(f"Input path does not exist: {path}")


def format_text(text: str, formatter: KdlFormatter, validate: bool = True) -> str:
    document = KdlReader.read(
        text,
        config={
            "validate_reserved_types": validate,
            "keep_skipped_entries": StringStyle.PRESERVE in formatter.string_style,
        },
    )
    return formatter.format_document(document)


def generate(files: Iterable[Path], output_dir: Path, formatter: KdlFormatter, validate: bool, check: bool) -> int:
    """Format every file; returns the number of files that were not already formatted."""
    changed = 0
    if not check:
        output_dir.mkdir(parents=True, exist_ok=True)
    for source in files:
        text = source.read_text(encoding="utf-8")
        try:
            formatted = format_text(text, formatter, validate=validate)
        except KdlError as exc:
            raise RuntimeError(f"Failed to parse {source}: {exc}") from exc
        if check:
            if formatted != text:
                changed += 1
                print(f"Would reformat {source}")
            continue
        destination = output_dir / source.name
        destination.write_text(formatted, encoding="utf-8")
        if formatted != text:
            changed += 1
        try:
            display_path = destination.relative_to(Path.cwd())
        except ValueError:
            display_path = destination
        print(f"Wrote {display_path}")
    return changed


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    string_style = StringStyle.ALLOW_BARE | StringStyle.PRESERVE if args.preserve else StringStyle.ALLOW_BARE
    formatter = KdlFormatter(indent=args.indent, string_style=string_style)
    files = collect_inputs(Path(args.input))
    changed = generate(files, Path(args.output_dir), formatter, validate=args.validate, check=args.check)
    return 1 if args.check and changed else 0


if __name__ == "__main__":
    sys.exit(main())
