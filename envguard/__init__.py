"""EnvGuard: keep environment variables in sync with the code that reads them.

Finds every ``process.env`` read in JavaScript/TypeScript sources, every
declaration in ``.env`` files and serverless manifests, and reports missing,
unused and undocumented variables per scope.
"""
from .config.loader import EnvGuardConfig, load_config
from .models import Issue, IssueKind, ScanResult, Severity
from .pipeline import run_fix, run_scan
from .version import __version__

__all__ = [
    "EnvGuardConfig",
    "load_config",
    "Issue",
    "IssueKind",
    "ScanResult",
    "Severity",
    "run_fix",
    "run_scan",
    "__version__",
]
