"""
md2doc - Markdown to rich document converter

Converts a Markdown file into a Word document, appends it to a Google Doc,
or prints the document operations it would issue.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from converter.driver import ConversionDriver, ConversionOutcome
from converter.sink import DocumentSink, RecordingSink
from core.config import ConversionConfig
from core.errors import ConfigurationError, Md2DocError
from gdocs.sink import GoogleDocsSink
from word.sink import DocxSink

__version__ = "0.1.0"

logger = logging.getLogger("cli")

MARKDOWN_EXTENSIONS = (".md", ".markdown")
DOCS_SCOPES = ["https://www.googleapis.com/auth/documents"]

# Loggers of the md2doc packages
PACKAGE_LOGGERS = ("cli", "converter", "core", "gdocs", "markup", "word")


def setup_logging(verbose: bool = False, quiet: bool = False, default_level: int = logging.INFO) -> None:
    """Configure stderr logging for the md2doc packages from the CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = default_level

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    for name in PACKAGE_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level)
        package_logger.handlers = [handler]


def build_docs_service(credentials_file: str):
    """Build an authorized Docs API service from an authorized-user token file."""
    credentials = Credentials.from_authorized_user_file(credentials_file, DOCS_SCOPES)
    return build("docs", "v1", credentials=credentials, cache_discovery=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2doc",
        description="Convert Markdown into a Word document or a Google Doc.",
        epilog="Examples:\n"
        "  md2doc input.md -o output.docx\n"
        "  md2doc input.md --google-doc DOCUMENT_ID --credentials token.json\n"
        "  md2doc input.md --dry-run",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input_file", help="Input Markdown file (.md, .markdown)")

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("-o", "--output", help="Output Word document (.docx)")
    target.add_argument("--google-doc", metavar="DOCUMENT_ID", help="Append to the end of this Google Doc")
    target.add_argument(
        "--dry-run", action="store_true", default=False, help="Print the document operations as JSON instead"
    )

    parser.add_argument(
        "--credentials",
        default="token.json",
        help="Authorized-user token file for --google-doc (default: token.json)",
    )
    parser.add_argument("--commit-every", type=int, default=None, help="Commit after every N top-level blocks")
    parser.add_argument("--header-shading", default=None, help="Fill colour (#RRGGBB) for table header rows")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", default=False, help="Show detailed debug output")
    parser.add_argument("-q", "--quiet", action="store_true", default=False, help="Suppress all non-error output")
    return parser


def build_config(args: argparse.Namespace) -> ConversionConfig:
    overrides = {}
    if args.commit_every is not None:
        overrides["commit_every"] = args.commit_every
    if args.header_shading is not None:
        overrides["table_header_shading"] = args.header_shading
    return ConversionConfig(**overrides)


async def build_sink(args: argparse.Namespace) -> DocumentSink:
    if args.dry_run:
        return RecordingSink()
    if args.google_doc:
        service = build_docs_service(args.credentials)
        return await GoogleDocsSink.at_end(service, args.google_doc)
    return DocxSink(path=args.output)


async def run(args: argparse.Namespace, markdown_source: str, config: ConversionConfig) -> ConversionOutcome:
    sink = await build_sink(args)
    outcome = await ConversionDriver(config=config).convert(markdown_source, sink)

    if isinstance(sink, RecordingSink):
        print(json.dumps(sink.to_dicts(), indent=2, ensure_ascii=False))
    elif outcome.ok and isinstance(sink, GoogleDocsSink):
        logger.info(f"Updated {sink.link}")
    elif outcome.ok:
        logger.info(f"Successfully converted to {args.output}")
    return outcome


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        setup_logging(quiet=True)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(verbose=args.verbose, quiet=args.quiet, default_level=config.get_logging_level())

    input_path = Path(args.input_file)
    if input_path.suffix.lower() not in MARKDOWN_EXTENSIONS:
        logger.error(f"Only Markdown files are supported. Got: {input_path.suffix or input_path.name}")
        sys.exit(1)
    if not input_path.is_file():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)
    if args.output and Path(args.output).suffix.lower() != ".docx":
        logger.error(f"Unsupported output format: {Path(args.output).suffix}. Supported formats: .docx")
        sys.exit(1)

    markdown_source = input_path.read_text(encoding="utf-8")

    try:
        outcome = asyncio.run(run(args, markdown_source, config))
    except Md2DocError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)

    if not outcome.ok:
        logger.error(f"{outcome.error}")
        sys.exit(1)


if __name__ == "__main__":
    main()
