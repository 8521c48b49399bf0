"""Apiserver startup: logging, trace context, error codes, then database."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from sqlalchemy import Engine

from packages.siam_core.registration import CodeAssembly, register_service_codes
from packages.siam_shared.config import LoggingSettings, SiamSettings
from packages.siam_shared.errors import CodeRegistry, get_registry
from packages.siam_shared.logging import FileOutput, configure_logging, ensure_trace, get_logger
from resources.substrates.postgres import PostgresSettings, create_postgres_engine

APISERVER_SERVICE = "apiserver"

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StartupResult:
    """Everything the apiserver needs after a successful startup pass."""

    registry: CodeRegistry
    assembly: CodeAssembly
    engine: Engine | None = None


def configure_process_logging(settings: LoggingSettings, *, stream: TextIO | None = None) -> None:
    """Install root logging handlers from the logging settings subtree.

    ``stream`` overrides the console target, which is stdout by default.
    """
    file_output = None
    if settings.file.enabled:
        file_output = FileOutput(
            directory=settings.file.directory,
            name=settings.service,
            max_size_mb=settings.file.max_size_mb,
            max_backups=settings.file.max_backups,
        )
    configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
        file=file_output,
        stream=stream,
    )
    if settings.enable_trace:
        ensure_trace()


def run_apiserver_startup(
    settings: SiamSettings,
    *,
    registry: CodeRegistry | None = None,
    engine_factory: Callable[[PostgresSettings], Engine] = create_postgres_engine,
) -> StartupResult:
    """Run apiserver startup in order: logging, code registration, database.

    Registry invariant violations surface as ``FatalConfigurationError`` and
    are left for the caller to turn into a process exit.
    """
    configure_process_logging(settings.logging)
    target = registry if registry is not None else get_registry()

    assembly = register_service_codes(
        APISERVER_SERVICE, settings=settings, registry=target
    )

    engine: Engine | None = None
    if settings.postgres.enabled:
        engine = engine_factory(settings.postgres)
        _LOGGER.info(
            "postgres engine created",
            extra={"host": settings.postgres.host, "database": settings.postgres.database},
        )

    _LOGGER.info(
        "apiserver startup complete",
        extra={"codes": len(target.codes()), "postgres": engine is not None},
    )
    return StartupResult(registry=target, assembly=assembly, engine=engine)
