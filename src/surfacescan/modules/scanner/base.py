"""Base contract for scan probes."""

from abc import ABC, abstractmethod

from surfacescan.tools.http import HTTPClient

from .models import ProbeResult, Target


class Probe(ABC):
    """One independently executable check.

    Implementations must not share mutable state with other probes; the
    returned :class:`ProbeResult` is their only output. Raising any exception
    means the probe contributes nothing to the report.
    """

    name: str

    @abstractmethod
    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        """Run the probe against one target."""
