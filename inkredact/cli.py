"""
Command-line entry point: apply saved redaction data to a PDF.
"""
import argparse
import logging
import sys
from typing import List, Optional

from .config import load_settings
from .core.annotations import AnnotationError, AnnotationPersistence, EditStore
from .core.document import PDFDocumentReader, PDFExporter
from .utils import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkredact",
        description="Burn whiteouts, text stamps and freehand strokes into a PDF.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="more log output (repeat for debug)")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_cmd = sub.add_parser("apply", help="apply a redaction file to a PDF")
    apply_cmd.add_argument("pdf", help="source PDF")
    apply_cmd.add_argument("redactions", help="JSON redaction data")
    apply_cmd.add_argument("-o", "--output", required=True, help="output PDF")
    apply_cmd.add_argument("--apply-redactions", action="store_true",
                           help="also remove the content under every whiteout")

    stats_cmd = sub.add_parser("stats", help="count annotations in a redaction file")
    stats_cmd.add_argument("redactions", help="JSON redaction data")
    return parser


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def cmd_apply(args) -> int:
    settings = load_settings()
    if args.apply_redactions:
        settings.apply_redactions = True

    reader = PDFDocumentReader()
    try:
        store = EditStore(page_count=reader.load_pdf(args.pdf))
    finally:
        reader.close()
    store.load(AnnotationPersistence().loads(_read_text(args.redactions)))

    PDFExporter(settings).export_annotations_to_pdf(
        args.pdf, args.output, store.all_annotations()
    )
    print(f"Wrote {args.output} ({len(store)} annotation(s))")
    return 0


def cmd_stats(args) -> int:
    store = EditStore()
    store.load(AnnotationPersistence().loads(_read_text(args.redactions)))
    for kind, count in store.stats().items():
        print(f"{kind}: {count}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    configure_logging(level)

    handler = cmd_apply if args.command == "apply" else cmd_stats
    try:
        return handler(args)
    except AnnotationError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
