"""CLI entry point: run one ordering pass locally, as a launch would.

Usage:
    pizza-skill              # dry run unless DRY_MODE=false
    pizza-skill --live       # place the order for real
"""

import argparse

from loguru import logger

from .client import DominosClient
from .config import get_settings
from .graph import run_order
from .logging import setup_logging
from .responses import speech_for
from .vault import SecretVault


def main(argv: list[str] | None = None) -> int:
    """Run the ordering pipeline once and print what Alexa would say."""
    parser = argparse.ArgumentParser(description="Order a pizza the way the skill does.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--live", action="store_true", help="place and pay for the order")
    mode.add_argument("--dry-run", action="store_true", help="stop before placing the order")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file or None)

    dry_run = None
    if args.live:
        dry_run = False
    elif args.dry_run:
        dry_run = True

    vault = SecretVault(region_name=settings.aws_region)
    with DominosClient.from_settings(settings) as client:
        result = run_order(vault, client, settings, dry_run=dry_run)

    logger.info("CLI run finished: {}", result.outcome.value)
    print(f"Alexa: {speech_for(result.outcome)}")
    return 0 if result.error is None else 1


if __name__ == "__main__":
    raise SystemExit(main())
