from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class SourceEntry:
    """One remote data source and the local file it is saved to."""

    identifier: str
    remote_url: str
    local_path: Path


@dataclass
class FetchResult:
    """Outcome of fetching one source. Only ever logged, never persisted."""

    url: str
    destination: Path
    ok: bool
    bytes_written: int = 0
    error_code: str | None = None
    error_message: str | None = None
    elapsed_ms: float = 0.0


@dataclass
class PrefetchReport:
    results: list[FetchResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded
