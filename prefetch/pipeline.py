"""Startup prefetch pipeline: load the source list, then fetch every entry.

Runs to completion before the server binds its port. A source list that
cannot be read raises ConfigError and stops startup; individual download
failures are logged and tolerated so the server still starts with
whatever data arrived.
"""
from __future__ import annotations

from pathlib import Path

import httpx

from crowstorm.errors import ConfigError
from crowstorm.logging_conf import get_logger
from prefetch.fetcher import DEFAULT_TIMEOUT_S, fetch_all
from prefetch.sources import DEFAULT_QUERY_URL, load_sources
from prefetch.types import PrefetchReport

__all__ = ["run"]

logger = get_logger("prefetch")


def run(
    config_path: str | Path,
    data_dir: str | Path,
    *,
    url_template: str = DEFAULT_QUERY_URL,
    timeout: float = DEFAULT_TIMEOUT_S,
    max_workers: int = 1,
    client: httpx.Client | None = None,
) -> PrefetchReport:
    data_dir = Path(data_dir)
    entries = load_sources(config_path, data_dir=data_dir, url_template=url_template)

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"cannot create data directory {data_dir}: {e}") from e

    report = PrefetchReport(
        results=fetch_all(
            entries.values(), timeout=timeout, max_workers=max_workers, client=client
        )
    )
    logger.info(
        "prefetch.summary",
        extra={
            "event": "prefetch_summary",
            "requested": len(entries),
            "succeeded": report.succeeded,
            "failed": report.failed,
            "failures": [
                {"url": r.url, "error_code": r.error_code} for r in report.results if not r.ok
            ],
        },
    )
    return report
