"""Main module for the webp-upload CLI."""

import sys
import json
import argparse
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.exceptions import UploadServiceError
from .core.logging_config import configure_server_logging, get_logger
from .core.models import ConversionOptions
from .core.services import WebPTranscoderService

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="webp-upload",
        description="WebP Upload - convert images to WebP and host them on S3",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the upload API
  webp-upload serve --host 0.0.0.0 --port 8000

  # Convert a local file the same way the API does
  webp-upload convert photo.jpg photo.webp --quality 85

  # Show dimensions, format and EXIF of an image
  webp-upload inspect photo.jpg
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP upload API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level for the service and uvicorn",
    )

    convert_parser = subparsers.add_parser("convert", help="Convert a local image to WebP")
    convert_parser.add_argument("input", type=Path, help="Source image")
    convert_parser.add_argument("output", type=Path, help="Destination .webp file")
    convert_parser.add_argument(
        "--quality", type=int, default=80, help="WebP quality 1-100 (default: 80)"
    )
    convert_parser.add_argument("--width", type=int, default=None, help="Maximum width")
    convert_parser.add_argument("--height", type=int, default=None, help="Maximum height")
    convert_parser.add_argument(
        "--keep-metadata", action="store_true", help="Keep EXIF and ICC profile"
    )

    inspect_parser = subparsers.add_parser("inspect", help="Print image metadata as JSON")
    inspect_parser.add_argument("input", type=Path, help="Image to inspect")

    subparsers.add_parser("version", help="Show version information")

    return parser


def serve(host: str, port: int, log_level: str) -> None:
    import uvicorn

    configure_server_logging(log_level)
    uvicorn.run(
        "webp_upload.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
        log_config=None,
    )


def convert_image(args: argparse.Namespace) -> int:
    options = ConversionOptions(
        quality=args.quality,
        width=args.width,
        height=args.height,
        keep_metadata=args.keep_metadata,
    )
    try:
        converted = WebPTranscoderService().transcode(args.input.read_bytes(), options)
    except (OSError, UploadServiceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    args.output.write_bytes(converted)
    logger.info(f"Wrote {args.output} ({len(converted)} bytes)")
    return 0


def inspect_image(args: argparse.Namespace) -> int:
    try:
        metadata = WebPTranscoderService().inspect(args.input.read_bytes())
    except (OSError, UploadServiceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(metadata, indent=2, ensure_ascii=False, default=str))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the webp-upload command-line interface.

    Sub-commands: ``serve`` runs the API, ``convert`` and ``inspect`` use the
    same transcoder locally, ``version`` prints the version.
    """
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "serve":
        serve(args.host, args.port, args.log_level)

    elif args.command == "convert":
        sys.exit(convert_image(args))

    elif args.command == "inspect":
        sys.exit(inspect_image(args))

    elif args.command == "version":
        print("WebP Upload")
        print(f"Version {__version__}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
