from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import contextmanager
from pathlib import Path

import httpx

from crowstorm.errors import (
    FetchError,
    FetchNetworkError,
    FetchStatusError,
    FetchTimeoutError,
    FetchWriteError,
)
from crowstorm.logging_conf import get_logger
from prefetch.types import FetchResult, SourceEntry

__all__ = ["DEFAULT_TIMEOUT_S", "fetch", "fetch_all"]

logger = get_logger("prefetch.fetcher")

DEFAULT_TIMEOUT_S = 30.0


@contextmanager
def _client_scope(client: httpx.Client | None, timeout: float) -> Iterator[httpx.Client]:
    """Yield the injected client, or a temporary one closed on exit."""
    if client is not None:
        yield client
        return
    with httpx.Client(follow_redirects=True, timeout=timeout) as owned:
        yield owned


def _download(
    client: httpx.Client,
    url: str,
    destination: Path,
    timeout: float,
    cancelled: threading.Event,
) -> int:
    """Stream `url` into `destination` and return the number of bytes written.

    The destination is truncated once the response headers are in and is
    left as-is if the transfer then fails. Once `cancelled` is set no further
    chunk is written.
    """
    written = 0
    try:
        with client.stream("GET", url, follow_redirects=True, timeout=timeout) as response:
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchStatusError(f"HTTP {response.status_code} from {response.url}") from e
            if cancelled.is_set():
                raise FetchTimeoutError(f"transfer exceeded {timeout}s")
            try:
                out = open(destination, "wb")
            except OSError as e:
                raise FetchWriteError(f"cannot open {destination}: {e}") from e
            with out:
                for chunk in response.iter_bytes():
                    if cancelled.is_set():
                        raise FetchTimeoutError(f"transfer exceeded {timeout}s")
                    try:
                        out.write(chunk)
                        out.flush()
                    except OSError as e:
                        raise FetchWriteError(f"cannot write {destination}: {e}") from e
                    written += len(chunk)
    except httpx.TimeoutException as e:
        raise FetchTimeoutError(f"timed out after {timeout}s: {e}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchNetworkError(str(e) or type(e).__name__) from e
    return written


def _download_within(client: httpx.Client, url: str, destination: Path, timeout: float) -> int:
    """Run `_download` on a worker thread and stop waiting after `timeout` seconds.

    httpx only bounds each connect/read step, so connect, time to first byte
    and the gaps between chunks are covered here by one deadline. A transfer
    still blocked in a read at the deadline is told to stop and finishes on
    its own once httpx's per-read timeout fires; it writes nothing further.
    """
    cancelled = threading.Event()
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prefetch-transfer")
    try:
        future = pool.submit(_download, client, url, destination, timeout, cancelled)
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError as e:
            cancelled.set()
            raise FetchTimeoutError(f"transfer exceeded {timeout}s") from e
    finally:
        pool.shutdown(wait=False)


def fetch(
    url: str,
    destination: str | Path,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    client: httpx.Client | None = None,
) -> FetchResult:
    """Fetch one URL into `destination`, attempted exactly once.

    Transport, status and write failures come back as a failed FetchResult;
    nothing is raised for them.
    """
    destination = Path(destination)
    started = time.perf_counter()
    try:
        with _client_scope(client, timeout) as c:
            written = _download_within(c, url, destination, timeout)
    except FetchError as e:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.warning(
            "prefetch.fetch_failed",
            extra={
                "event": "fetch_failed",
                "url": url,
                "destination": str(destination),
                "error_code": e.code,
                "error": str(e),
                "elapsed_ms": elapsed_ms,
            },
        )
        return FetchResult(
            url=url,
            destination=destination,
            ok=False,
            error_code=e.code,
            error_message=str(e),
            elapsed_ms=elapsed_ms,
        )

    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "prefetch.fetch_ok",
        extra={
            "event": "fetch_ok",
            "url": url,
            "destination": str(destination),
            "bytes": written,
            "elapsed_ms": elapsed_ms,
        },
    )
    return FetchResult(
        url=url,
        destination=destination,
        ok=True,
        bytes_written=written,
        elapsed_ms=elapsed_ms,
    )


def fetch_all(
    entries: Iterable[SourceEntry],
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    max_workers: int = 1,
    client: httpx.Client | None = None,
) -> list[FetchResult]:
    """Fetch every entry once and return results in entry order.

    - Failures are isolated per entry and never stop the others
    - With `max_workers > 1` entries are fetched on a thread pool
    """
    items = list(entries)
    with _client_scope(client, timeout) as c:

        def _one(entry: SourceEntry) -> FetchResult:
            return fetch(entry.remote_url, entry.local_path, timeout=timeout, client=c)

        if max_workers <= 1 or len(items) <= 1:
            return [_one(entry) for entry in items]
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="prefetch") as pool:
            return list(pool.map(_one, items))
