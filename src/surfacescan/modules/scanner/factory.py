"""Probe factory helpers."""

from .base import Probe
from .cors import CORSProber
from .data_exposure import DataExposureProber
from .discovery import URLDiscoverer
from .headers import HeaderInspector
from .models import ScanConfig
from .secrets import SecretScanner
from .sensitive_paths import SensitivePathProber


def create_default_probes(config: ScanConfig) -> list[Probe]:
    """Return the standard concurrent probe set."""
    return [
        URLDiscoverer(timeout=config.discovery_timeout, bundle_timeout=config.bundle_timeout),
        SensitivePathProber(timeout=config.path_timeout),
        HeaderInspector(timeout=config.homepage_timeout),
        SecretScanner(timeout=config.homepage_timeout, bundle_timeout=config.bundle_timeout),
        CORSProber(timeout=config.cors_timeout),
    ]


def create_data_exposure_prober(config: ScanConfig) -> DataExposureProber:
    return DataExposureProber(
        schema_timeout=config.schema_timeout,
        table_timeout=config.table_timeout,
    )
