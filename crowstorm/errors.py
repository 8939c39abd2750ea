from __future__ import annotations

__all__ = [
    "CrowStormError",
    "UnsafePathError",
    "AssetNotFoundError",
    "ConfigError",
    "FetchError",
    "FetchTimeoutError",
    "FetchStatusError",
    "FetchNetworkError",
    "FetchWriteError",
]


class CrowStormError(Exception):
    """Base class for server and prefetch errors.

    The `code` attribute is a stable machine code used in responses and logs.
    """

    code: str = "crowstorm_error"


# ------------------------
# Request handling
# ------------------------
class UnsafePathError(CrowStormError, ValueError):
    """Requested asset path was rejected by the traversal guard."""

    code = "unsafe_path"


class AssetNotFoundError(CrowStormError, LookupError):
    code = "not_found"


# ------------------------
# Startup
# ------------------------
class ConfigError(CrowStormError):
    """The source list could not be read; startup must stop."""

    code = "config_error"


class FetchError(CrowStormError):
    code = "fetch_error"


class FetchTimeoutError(FetchError):
    code = "timeout"


class FetchStatusError(FetchError):
    code = "http_status"


class FetchNetworkError(FetchError):
    code = "network_error"


class FetchWriteError(FetchError):
    code = "write_error"
