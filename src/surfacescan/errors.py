"""Exception hierarchy shared by the fetcher, probes and orchestrator."""


class ScanError(Exception):
    """Base class for all scan errors."""


class InputError(ScanError, ValueError):
    """The target URL is malformed. Raised before any network activity."""


class ProbeFailure(ScanError):
    """A single probe could not complete (timeout or network error)."""


class GlobalTimeout(ScanError, TimeoutError):
    """The whole scan exceeded its wall-clock deadline."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Scan timed out after {seconds:g}s")
