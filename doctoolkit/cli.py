#!/usr/bin/env python3
"""
doctoolkit CLI

Command-line interface for the office document utilities.

Usage:
    python -m doctoolkit process-zara reference.xlsx ship1.xlsx,ship2.xlsx out.xlsx
    python -m doctoolkit read-excel data.xlsx
    python -m doctoolkit convert-to-pdf a.xlsx,b.xlsx out.pdf
    python -m doctoolkit merge-excel a.xlsx,b.xlsx merged.xlsx --mode rows
    python -m doctoolkit json-to-excel records.json out.xlsx
    python -m doctoolkit md-to-word notes.md out.docx

Results are printed to stdout as JSON; progress goes to stderr.
"""

import argparse
import json
import sys

from .converters.excel_io import ReadRetryPolicy
from .core import DocToolkit


def _split_paths(value: str) -> list[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


def _split_names(value: str) -> list[str]:
    # Positions line up with the data files; blank entries stay blank.
    return [n.strip() for n in value.split(",")]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doctoolkit",
        description=(
            "Office document utilities\n\n"
            "Reconciles shipment workbooks against a reference code table,\n"
            "merges and converts Excel workbooks, and builds Word documents\n"
            "from Markdown."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--retries", type=int, default=3, help="Read attempts per workbook (default: 3)")
    parser.add_argument(
        "--retry-delay", type=float, default=0.1,
        help="Seconds to wait between read attempts (default: 0.1)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--formats", action="store_true", help="Show supported formats and exit")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("process-zara", help="Reconcile shipment files against a reference table")
    p.add_argument("reference", help="Reference workbook (description, code)")
    p.add_argument("data", type=_split_paths, help="Comma-separated shipment workbooks")
    p.add_argument("output", help="Output .xlsx path")
    names = p.add_mutually_exclusive_group()
    names.add_argument(
        "--names", type=_split_names, default=None,
        help="Comma-separated original file names used to label rows, in data file order "
             "(leave an entry blank to use the data file name)",
    )
    names.add_argument(
        "--name", dest="name_list", action="append", default=None,
        help="Original file name for the next data file; repeat once per file "
             "(use for names containing commas)",
    )

    p = sub.add_parser("read-excel", help="Print the first sheet of a workbook as JSON")
    p.add_argument("path", help="Workbook to read")

    p = sub.add_parser("convert-to-pdf", help="Render workbooks to a PDF")
    p.add_argument("sources", type=_split_paths, help="Comma-separated workbooks")
    p.add_argument("output", help="Output .pdf path")

    p = sub.add_parser("merge-excel", help="Merge workbooks into one")
    p.add_argument("sources", type=_split_paths, help="Comma-separated workbooks")
    p.add_argument("output", help="Output .xlsx path")
    p.add_argument("--mode", choices=("sheets", "rows"), default="sheets", help="Merge mode (default: sheets)")
    p.add_argument("--no-file-name", action="store_true", help="Do not label merged data with file names")

    p = sub.add_parser("json-to-excel", help="Write a JSON array of records to a workbook")
    p.add_argument("source", help="JSON file holding an array of objects")
    p.add_argument("output", help="Output .xlsx path")

    p = sub.add_parser("md-to-word", help="Convert Markdown to a Word document")
    p.add_argument("source", help="Markdown or text file")
    p.add_argument("output", help="Output .docx path")
    p.add_argument("--tables-only", action="store_true", help="Treat every block as a Markdown table")
    p.add_argument("--plain", action="store_true", help="Write lines as plain paragraphs")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.formats:
        _show_formats()
        return 0

    if not args.command:
        parser.print_help()
        print("\nError: No command provided.", file=sys.stderr)
        return 1

    try:
        policy = ReadRetryPolicy(max_attempts=args.retries, delay_seconds=args.retry_delay)
        toolkit = DocToolkit(retry_policy=policy, quiet=args.quiet)
        output = _dispatch(toolkit, args)
    except Exception as e:
        print(f"[ERROR] {args.command}: {e}", file=sys.stderr)
        print(json.dumps({"success": False, "error": str(e)}))
        return 1

    print(json.dumps(output, ensure_ascii=False, default=str))
    return 0


def _dispatch(toolkit: DocToolkit, args) -> dict:
    if args.command == "process-zara":
        processed = toolkit.process_shipment_files(
            args.reference, args.data, args.output,
            original_names=args.names or args.name_list,
        )
        return processed.to_dict()

    if args.command == "read-excel":
        rows = toolkit.read_excel_file(args.path)
        return {"success": True, "data": rows, "file_path": args.path}

    if args.command == "convert-to-pdf":
        result = toolkit.convert_excel_to_pdf(args.sources, args.output)
        return {
            "success": True,
            "output_path": result.output_path,
            "page_count": result.page_count,
            "message": result.message,
        }

    if args.command == "merge-excel":
        path = toolkit.merge_excel_files(
            args.sources, args.output,
            include_file_name=not args.no_file_name,
            merge_mode=args.mode,
        )
        return {
            "success": True,
            "output_path": path,
            "message": f"Successfully merged {len(args.sources)} Excel files",
        }

    if args.command == "json-to-excel":
        with open(args.source, "r", encoding="utf-8") as f:
            records = json.load(f)
        path = toolkit.write_json_to_excel(records, args.output)
        return {"success": True, "output_path": path}

    if args.command == "md-to-word":
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
        if args.plain:
            path = toolkit.text_to_word(text, args.output)
        else:
            path = toolkit.markdown_to_word(text, args.output, tables_only=args.tables_only)
        return {"success": True, "output_path": path}

    raise ValueError(f"Unknown command: {args.command}")


def _show_formats():
    """Display all supported formats."""
    print("\nSupported Formats:")
    print("-" * 40)
    for category, extensions in DocToolkit.supported_formats().items():
        print(f"\n  {category}:")
        print(f"    {' '.join(extensions)}")
    print()


if __name__ == "__main__":
    sys.exit(main())
