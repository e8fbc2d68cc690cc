"""
Error taxonomy for the fleetify migration toolkit.

Every failure raised by the generator, runner and seeder derives from
`FleetifyError` so the CLI can turn it into a non-zero exit with a readable
message. `log_error` records the context and the full cause chain before an
error propagates.
"""

from __future__ import annotations

import logging
from typing import Optional

from fleetify.utils.logging import get_logger

log = get_logger(__name__)

MAX_CAUSE_DEPTH = 10


class FleetifyError(Exception):
    """Base class for all toolkit errors."""


class DatabaseConnectionError(FleetifyError):
    """The database could not be reached or configured."""


class NotFoundError(FleetifyError):
    """A referenced model, migration or seed generator does not exist."""


class ModelNotFoundError(NotFoundError):
    pass


class MigrationNotFoundError(NotFoundError):
    pass


class MigrationsDirNotFoundError(NotFoundError):
    pass


class SeedNotFoundError(NotFoundError):
    pass


class RollbackNotFoundError(NotFoundError):
    pass


class ConflictError(FleetifyError):
    """A file that must not be overwritten already exists."""


class ModelExistsError(ConflictError):
    pass


class ModelParseError(FleetifyError):
    """A model module could not be parsed into column descriptors."""


class ModelLoadError(FleetifyError):
    """A model module could not be imported to register its seed generator."""


class InvalidTableNameError(FleetifyError):
    """A table name is not a plain SQL identifier."""


class EmptyMigrationError(FleetifyError):
    """A migration file has no forward statements to apply."""


class MigrationExecutionError(FleetifyError):
    """A migration or rollback statement failed; its transaction was rolled back."""

    def __init__(self, message: str, migration: str, statement_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.migration = migration
        self.statement_index = statement_index


class SeedError(FleetifyError):
    """A seed generator returned unusable data."""


class SeedInsertError(SeedError):
    """A seed row could not be inserted; the remaining batch was aborted."""

    def __init__(self, message: str, table: str, record_index: int) -> None:
        super().__init__(message)
        self.table = table
        self.record_index = record_index


def cause_chain(exc: BaseException) -> list[BaseException]:
    """
    Return `exc` followed by its explicit causes (or implicit contexts).

    The walk stops after `MAX_CAUSE_DEPTH` links.
    """
    chain: list[BaseException] = []
    current: Optional[BaseException] = exc
    while current is not None and len(chain) < MAX_CAUSE_DEPTH:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def log_error(context: str, exc: BaseException, logger: Optional[logging.Logger] = None) -> None:
    """
    Log an error with its operation context and cause chain.

    Parameters
    ----------
    context : str
        Short label for the failing operation (e.g. "Migration Execution Error").
    exc : BaseException
        The error about to propagate.
    logger : logging.Logger | None
        Logger to write to; defaults to this module's logger.
    """
    target = logger or log
    chain = cause_chain(exc)
    target.error(
        f"[{context}] {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "context": context,
            "error_type": type(exc).__name__,
            "cause_chain": [f"{type(e).__name__}: {e}" for e in chain],
        },
    )


__all__ = [
    "FleetifyError",
    "DatabaseConnectionError",
    "NotFoundError",
    "ModelNotFoundError",
    "MigrationNotFoundError",
    "MigrationsDirNotFoundError",
    "SeedNotFoundError",
    "RollbackNotFoundError",
    "ConflictError",
    "ModelExistsError",
    "ModelParseError",
    "ModelLoadError",
    "InvalidTableNameError",
    "EmptyMigrationError",
    "MigrationExecutionError",
    "SeedError",
    "SeedInsertError",
    "cause_chain",
    "log_error",
]
