"""Public API for SIAM core startup and error-code registration."""

from packages.siam_core.registration import (
    CodeAssembly,
    ErrorCodeRecord,
    assemble_code_records,
    register_service_codes,
)
from packages.siam_core.startup import (
    APISERVER_SERVICE,
    StartupResult,
    configure_process_logging,
    run_apiserver_startup,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "APISERVER_SERVICE",
    "CodeAssembly",
    "ErrorCodeRecord",
    "StartupResult",
    "assemble_code_records",
    "configure_process_logging",
    "register_service_codes",
    "run_apiserver_startup",
]
