"""Scanner module for SurfaceScan - passive attack-surface probes and orchestration."""

from .base import Probe
from .cors import CORSProber
from .data_exposure import DataExposureProber
from .discovery import URLDiscoverer
from .factory import create_data_exposure_prober, create_default_probes
from .headers import HeaderInspector
from .models import (
    DataExposure,
    ExposedTable,
    Finding,
    ProbeResult,
    ScanConfig,
    ScanReport,
    Summary,
    Target,
)
from .orchestrator import ScanOrchestrator
from .redaction import redact_rows, redact_value
from .reporting import print_report, report_to_dict, write_json_report
from .secrets import SecretScanner, classify_token
from .sensitive_paths import SensitivePathProber
from .target import normalize_target

__all__ = [
    "CORSProber",
    "DataExposure",
    "DataExposureProber",
    "ExposedTable",
    "Finding",
    "HeaderInspector",
    "Probe",
    "ProbeResult",
    "ScanConfig",
    "ScanOrchestrator",
    "ScanReport",
    "SecretScanner",
    "SensitivePathProber",
    "Summary",
    "Target",
    "URLDiscoverer",
    "classify_token",
    "create_data_exposure_prober",
    "create_default_probes",
    "normalize_target",
    "print_report",
    "redact_rows",
    "redact_value",
    "report_to_dict",
    "write_json_report",
]
