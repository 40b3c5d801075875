# main.py

"""Entry point for the product detector CLI."""

import argparse
import asyncio
import logging
import sys

from product_detector.config.logging_config import setup_logging

logger = logging.getLogger("product_detector.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="product-detector",
        description="Extract product data from e-commerce pages.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging on stderr.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    detect = commands.add_parser(
        "detect", help="Detect the product on a page.",
    )
    detect.add_argument("url", help="Product page URL.")
    detect.add_argument(
        "--file",
        default=None,
        help="Read saved HTML instead of fetching (URL still used "
        "for classification and relative links).",
    )
    detect.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    detect.add_argument(
        "--watch",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Keep re-detecting for SECONDS, printing each report.",
    )
    return parser


def _run_detect(args: argparse.Namespace) -> None:
    """Run one-shot or watched detection and exit."""
    from product_detector.cli.runner import detect_once, watch

    if args.watch is not None:
        exit_code = asyncio.run(
            watch(args.url, args.watch, args.file, args.output_format)
        )
    else:
        exit_code = detect_once(args.url, args.file, args.output_format)
    sys.exit(exit_code)


def main() -> None:
    """Parse arguments and dispatch the selected command."""
    args = _build_parser().parse_args()
    log_file = setup_logging(verbose=args.verbose)
    logger.info("product-detector starting, log file: %s", log_file)

    try:
        if args.command == "detect":
            _run_detect(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
