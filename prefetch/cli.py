from __future__ import annotations

import argparse
import sys

from crowstorm.errors import ConfigError
from crowstorm.logging_conf import get_logger, setup_logging
from crowstorm.settings import load_settings
from prefetch.pipeline import run

logger = get_logger("prefetch.cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments; defaults come from the environment settings."""
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Download the configured reference data files")
    parser.add_argument("--sources", default=str(settings.source_list))
    parser.add_argument("--data-dir", default=str(settings.data_dir))
    parser.add_argument("--url-template", default=settings.query_url_template)
    parser.add_argument("--timeout", type=float, default=settings.fetch_timeout)
    parser.add_argument("--workers", type=int, default=settings.fetch_workers)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline once. Exit 0 if every fetch succeeded, 1 if any failed, 2 on config errors."""
    setup_logging()
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        report = run(
            args.sources,
            args.data_dir,
            url_template=args.url_template,
            timeout=args.timeout,
            max_workers=args.workers,
        )
    except ConfigError as e:
        logger.error("prefetch.config_error", extra={"event": "config_error", "error": str(e)})
        return 2
    return 0 if report.failed == 0 else 1
