"""Command-line interface for image-variants."""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .core import PipelineError, SourceImage, UploaderConfig, get_logger
from .core.factories import UploaderFactory
from .core.logging_config import set_level


def build_parser() -> argparse.ArgumentParser:
    """
    Build the ``image-variants`` argument parser.

    Settings not given on the command line fall back to the
    ``IMAGE_VARIANTS_*`` environment variables.
    """
    parser = argparse.ArgumentParser(
        prog="image-variants",
        description="Resize, crop and upload variants of an image to S3",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload the variants described in variants.json
  image-variants upload --source photo.jpg --config variants.json \\
                        --bucket my-bucket --static-url https://cdn.example.com/

  # Use asyncio uploads with at most 4 variants in flight
  image-variants upload --source photo.jpg --config variants.json \\
                        --bucket my-bucket --processor asyncio --resize-limit 4

  # Show version
  image-variants version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upload_parser = subparsers.add_parser(
        "upload", help="Render the configured variants of an image and upload them"
    )
    upload_parser.add_argument("--source", required=True, help="Source image file")
    upload_parser.add_argument(
        "--config", required=True, help="JSON batch configuration ('files' array)"
    )
    upload_parser.add_argument(
        "--mimetype", default=None, help="Source mimetype, e.g. image/png (default: file extension)"
    )
    upload_parser.add_argument("--bucket", default=None, help="Destination S3 bucket")
    upload_parser.add_argument("--prefix", default=None, help="Destination S3 prefix")
    upload_parser.add_argument(
        "--static-url", default=None, help="Public URL prefix prepended to storage paths"
    )
    upload_parser.add_argument("--endpoint-url", default=None, help="Custom S3 endpoint URL")
    upload_parser.add_argument("--region", default=None, help="S3 region")
    upload_parser.add_argument(
        "--processor",
        type=str,
        default=None,
        choices=["serial", "multithread", "asyncio"],
        help="Concurrency strategy to use (default: multithread)",
    )
    upload_parser.add_argument(
        "--resize-limit", type=int, default=None, help="Maximum variants processed concurrently"
    )
    upload_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers.add_parser("version", help="Show version information")
    return parser


def load_batch_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def run_upload(args: argparse.Namespace) -> Dict[str, Any]:
    """Run one batch from parsed arguments and return the JSON-ready result."""
    config = UploaderConfig.from_env(
        static_url=args.static_url,
        resize_limit=args.resize_limit,
        bucket=args.bucket,
        prefix=args.prefix,
        endpoint_url=args.endpoint_url,
        region=args.region,
        processor=args.processor,
        debug=args.debug or None,
    )

    if config.debug:
        set_level("DEBUG")

    if args.mimetype:
        with open(args.source, "rb") as fh:
            source = SourceImage.from_bytes(fh.read(), mimetype=args.mimetype, filename=args.source)
    else:
        source = SourceImage.from_path(args.source)

    orchestrator = UploaderFactory.create_orchestrator(config)
    results = orchestrator.run_batch(source, load_batch_config(args.config))
    return {key: result.model_dump() for key, result in results.items()}


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the ``image-variants`` command.

    ``upload`` prints the resulting ``{key: {url, filename}}`` mapping as
    JSON. Failures are logged and exit with status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "upload":
        logger = get_logger("processor")
        try:
            results = run_upload(args)
        except KeyboardInterrupt:
            logger.warning("Upload interrupted by user.")
            sys.exit(1)
        except PipelineError as e:
            logger.error(f"Upload failed: {type(e).__name__}: {e}")
            sys.exit(1)
        except Exception as e:
            logger.error(f"Upload failed: {e}", exc_info=True)
            sys.exit(1)
        print(json.dumps(results, indent=2, sort_keys=True))

    elif args.command == "version":
        print("Image Variants CLI")
        print(f"Version {__version__}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
