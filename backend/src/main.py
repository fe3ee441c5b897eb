"""pixsort command line — pixel-sort an image through a mask."""

import argparse
import logging
import os
import sys
from pathlib import Path

import sentry_sdk

from _version import __version__
from diagnostics import init_diagnostics
from effects.pixelsort import PARAMS
from engine import pipeline
from security import strip_pii, validate_input, validate_output_path

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def _init_sentry():
    """Consent-gated Sentry init: no DSN unless ~/.pixsort/telemetry_consent says yes."""
    consent_path = os.path.expanduser("~/.pixsort/telemetry_consent")
    dsn = ""
    if os.path.exists(consent_path) and Path(consent_path).read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"pixsort@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        traces_sample_rate=0.1,
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixsort",
        description="Sort pixels by brightness inside the opaque regions of a mask.",
    )
    parser.add_argument("base", help="Image to sort")
    parser.add_argument("mask", help="Mask image; alpha != 0 marks pixels to sort")
    parser.add_argument("output", help="Output image (format from extension)")
    parser.add_argument(
        "--split-probability",
        type=float,
        default=PARAMS["split_probability"]["default"],
        help="Chance an opaque pixel splits the current run (default: %(default)s)",
    )
    parser.add_argument(
        "--close-trailing-runs",
        action="store_true",
        help="Sort runs that reach the right edge instead of dropping them",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=PARAMS["max_workers"]["default"],
        help="Row worker threads, 0 = CPU count (default: %(default)s)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Reproducible splitting")
    parser.add_argument(
        "--quality", type=int, default=95, help="JPEG quality (default: %(default)s)"
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    init_diagnostics(args.log_level)
    _init_sentry()

    errors = (
        [f"base: {e}" for e in validate_input(args.base)]
        + [f"mask: {e}" for e in validate_input(args.mask)]
        + [f"output: {e}" for e in validate_output_path(args.output)]
    )
    if not 0.0 <= args.split_probability <= 1.0:
        errors.append(f"--split-probability must be in [0, 1], got {args.split_probability}")
    if not 1 <= args.quality <= 100:
        errors.append(f"--quality must be in [1, 100], got {args.quality}")
    if errors:
        for e in errors:
            print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    logger.info("pixsort %s: %s through %s", __version__, args.base, args.mask)
    params = {
        "split_probability": args.split_probability,
        "close_trailing_runs": args.close_trailing_runs,
        "max_workers": args.workers,
    }
    try:
        result = pipeline.run(
            args.base,
            args.mask,
            args.output,
            params,
            seed=args.seed,
            quality=args.quality,
        )
    except Exception as e:
        print(f"error: pixel sort failed: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_FAILED

    total_ms = sum(result["timings"].values())
    print(
        f"{result['output_path']}: {result['width']}x{result['height']} in {total_ms:.0f}ms",
        flush=True,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
